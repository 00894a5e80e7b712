"""Oracle runner — orchestrates compute → encode → prove → submit → artifacts."""

from __future__ import annotations

import json
import logging
import shutil
from datetime import datetime, timezone

from zksignal.config import load_config, resolve_path
from zksignal.engine import PredictionEngine, history_frame, run_guest
from zksignal.journal import decode, encode_price_input, journal_digest
from zksignal.ledger import MockProver, MockVerifier, SignalLedger

log = logging.getLogger(__name__)


def run_oracle(config_path: str) -> str:
    """Run the engine, prove its journal, submit it, and write run artifacts.

    Parameters
    ----------
    config_path : str
        Path to a YAML config file (relative to repo root or absolute).

    Returns
    -------
    str
        The generated ``run_id``.
    """
    cfg_path = resolve_path(config_path)
    cfg = load_config(cfg_path)

    # ── Generate run_id ──────────────────────────────────────────────
    run_id = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S_%f")
    run_dir = cfg.output_path / run_id
    run_dir.mkdir(parents=True, exist_ok=True)

    image_id = cfg.image_id

    log.info("Run ID   : %s", run_id)
    log.info("Output   : %s", run_dir)
    log.info("Image ID : %s", image_id.hex())

    # ── Compute ──────────────────────────────────────────────────────
    engine = PredictionEngine()
    journal = run_guest(encode_price_input(cfg.current_price), engine)
    digest = journal_digest(journal)
    committed = decode(journal)
    log.info(
        "Prediction: %s  confidence=%d%%  predicted=%d",
        "BUY" if committed.action == 1 else "SELL",
        committed.confidence,
        committed.predicted_price,
    )

    # ── Prove (development seal) ─────────────────────────────────────
    receipt = MockProver().prove(journal, image_id)

    # ── Submit ───────────────────────────────────────────────────────
    ledger = SignalLedger(MockVerifier(), image_id=image_id, owner=cfg.owner)
    ledger.set_signal(
        committed.action,
        committed.confidence,
        committed.predicted_price,
        receipt.seal,
    )
    signal = ledger.get_latest_signal()

    # ── Write artifacts ──────────────────────────────────────────────
    # 1. config.yaml
    shutil.copy2(cfg_path, run_dir / "config.yaml")

    # 2. journal.json
    journal_ref = {
        "current_price": str(cfg.current_price),
        "journal_hex": journal.hex(),
        "journal_digest": digest.hex(),
        "image_id": image_id.hex(),
        "seal": receipt.seal.hex(),
    }
    (run_dir / "journal.json").write_text(
        json.dumps(journal_ref, indent=2), encoding="utf-8",
    )
    log.info("Wrote journal.json")

    # 3. signal.json (prices as strings: uint256 does not survive JSON floats)
    signal_ref = {
        "action": signal.action,
        "confidence": signal.confidence,
        "predicted_price": str(signal.predicted_price),
        "timestamp": signal.timestamp,
    }
    (run_dir / "signal.json").write_text(
        json.dumps(signal_ref, indent=2), encoding="utf-8",
    )
    log.info("Wrote signal.json")

    # 4. plots
    if cfg.plot:
        from zksignal.reporting import plot_regression

        plot_regression(
            history_frame(engine.history),
            engine.fit,
            engine.next_day,
            run_dir / "plots" / "regression.png",
        )

    # 5. README.md
    readme_lines = [
        "Verified trading signal run",
        f"Run ID: {run_id}",
        f"Current price: {cfg.current_price}",
        f"Action: {'BUY' if signal.action == 1 else 'SELL'}, "
        f"confidence {signal.confidence}%, predicted {signal.predicted_price}",
        f"Journal digest: {digest.hex()}",
        f"Reproduce: python -m zksignal run --config {config_path}",
    ]
    (run_dir / "README.md").write_text(
        "\n".join(readme_lines) + "\n", encoding="utf-8",
    )
    log.info("Wrote README.md")

    log.info("✓ Run complete: %s", run_dir)
    return run_id
