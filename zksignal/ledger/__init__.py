"""Ledger package: trusted image registry, proof verification, signal state."""

from .errors import (
    AccessControlError,
    DomainValidationError,
    InvalidAction,
    InvalidConfidence,
    InvalidImageId,
    InvalidPrice,
    SignalLedgerError,
    VerificationFailed,
)
from .events import EventBus, ImageIdUpdated, SignalUpdated
from .ledger import LedgerState, Signal, SignalLedger
from .registry import ImageRegistry, parse_image_id
from .verifier import MockProver, MockVerifier, ProofVerifier, Receipt

__all__ = [
    "AccessControlError",
    "DomainValidationError",
    "InvalidAction",
    "InvalidConfidence",
    "InvalidImageId",
    "InvalidPrice",
    "SignalLedgerError",
    "VerificationFailed",
    "EventBus",
    "ImageIdUpdated",
    "SignalUpdated",
    "LedgerState",
    "Signal",
    "SignalLedger",
    "ImageRegistry",
    "parse_image_id",
    "MockProver",
    "MockVerifier",
    "ProofVerifier",
    "Receipt",
]
