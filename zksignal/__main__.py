"""Unified entry point: ``python -m zksignal <command> [args...]``."""

import argparse
import logging
import sys

log = logging.getLogger(__name__)


def main():
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s  %(levelname)-8s  %(message)s",
        datefmt="%H:%M:%S",
    )
    if len(sys.argv) < 2:
        log.error("Usage: python -m zksignal <command> [args...]")
        log.error("Available commands:")
        log.error("  predict   - Run the prediction engine and print the journal")
        log.error("  run       - Compute, prove and submit a signal from a YAML config")
        sys.exit(1)

    command = sys.argv[1]

    if command == "predict":
        p = argparse.ArgumentParser(description="Run the prediction engine")
        p.add_argument("--price", required=True, type=int, help="Current price (wei)")
        args = p.parse_args(sys.argv[2:])

        from zksignal.engine import compute_image_id, run_guest
        from zksignal.journal import decode, encode_price_input, journal_digest

        journal = run_guest(encode_price_input(args.price))
        out = decode(journal)
        log.info("Action     : %s", "BUY" if out.action == 1 else "SELL")
        log.info("Confidence : %d%%", out.confidence)
        log.info("Predicted  : %d", out.predicted_price)
        log.info("Journal    : %s", journal.hex())
        log.info("Digest     : %s", journal_digest(journal).hex())
        log.info("Image ID   : %s", compute_image_id().hex())
    elif command == "run":
        p = argparse.ArgumentParser(description="Compute, prove and submit a signal")
        p.add_argument("--config", required=True, help="Path to YAML config file")
        args = p.parse_args(sys.argv[2:])

        from zksignal.runner import run_oracle
        run_id = run_oracle(args.config)
        log.info("Finished — run_id: %s", run_id)
    else:
        log.error("Unknown command: %s", command)
        sys.exit(1)


if __name__ == "__main__":
    main()
