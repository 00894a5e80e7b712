"""Journal package: the engine/ledger wire contract."""

from .codec import (
    JOURNAL_SIZE,
    UINT256_MAX,
    Journal,
    JournalDecodeError,
    decode,
    decode_price_input,
    encode,
    encode_price_input,
    journal_digest,
)

__all__ = [
    "JOURNAL_SIZE",
    "UINT256_MAX",
    "Journal",
    "JournalDecodeError",
    "decode",
    "decode_price_input",
    "encode",
    "encode_price_input",
    "journal_digest",
]
