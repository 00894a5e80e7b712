"""Canonical journal encoding shared by the engine and the ledger.

Layout (96 bytes, equal to Solidity ``abi.encode(uint8, uint256, uint256)``)::

    [ 0:32]  action           uint8, right-aligned, 31 leading zero bytes
    [32:64]  confidence       uint256, big-endian
    [64:96]  predicted_price  uint256, big-endian

Both sides must import this module; the layout is a contract, not a
convention.  The engine input (current price) is a single 32-byte
big-endian word in the same style.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass

WORD_SIZE = 32
JOURNAL_SIZE = 3 * WORD_SIZE

UINT8_MAX = 2**8 - 1
UINT256_MAX = 2**256 - 1


class JournalDecodeError(ValueError):
    """Raised when bytes are not a canonical journal encoding."""


@dataclass(frozen=True)
class Journal:
    """The three values committed by the prediction engine."""

    action: int
    confidence: int
    predicted_price: int

    def encode(self) -> bytes:
        return encode(self.action, self.confidence, self.predicted_price)


def _word(value: int, max_value: int, field: str) -> bytes:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{field} must be an int, got {type(value).__name__}")
    if value < 0 or value > max_value:
        raise ValueError(f"{field} out of range: {value}")
    return value.to_bytes(WORD_SIZE, "big")


def encode(action: int, confidence: int, predicted_price: int) -> bytes:
    """Encode the three fields into the 96-byte journal.

    Raises
    ------
    ValueError
        If a field is not an int or does not fit its ABI type.
    """
    return b"".join(
        (
            _word(action, UINT8_MAX, "action"),
            _word(confidence, UINT256_MAX, "confidence"),
            _word(predicted_price, UINT256_MAX, "predicted_price"),
        )
    )


def decode(data: bytes) -> Journal:
    """Strictly decode a 96-byte journal.

    Rejects any length other than 96 and any non-zero padding in the
    action word.
    """
    data = bytes(data)
    if len(data) != JOURNAL_SIZE:
        raise JournalDecodeError(
            f"journal must be {JOURNAL_SIZE} bytes, got {len(data)}"
        )

    action_word = data[0:WORD_SIZE]
    if any(action_word[:-1]):
        raise JournalDecodeError("non-zero padding in action word")

    return Journal(
        action=action_word[-1],
        confidence=int.from_bytes(data[WORD_SIZE : 2 * WORD_SIZE], "big"),
        predicted_price=int.from_bytes(data[2 * WORD_SIZE :], "big"),
    )


def journal_digest(data: bytes) -> bytes:
    """SHA-256 digest of the journal bytes (what a seal is bound to)."""
    return hashlib.sha256(bytes(data)).digest()


# -- engine input word ------------------------------------------------------


def encode_price_input(current_price: int) -> bytes:
    return _word(current_price, UINT256_MAX, "current_price")


def decode_price_input(data: bytes) -> int:
    """Decode the engine's 32-byte big-endian price input."""
    data = bytes(data)
    if len(data) != WORD_SIZE:
        raise JournalDecodeError(f"price input must be {WORD_SIZE} bytes, got {len(data)}")
    return int.from_bytes(data, "big")
