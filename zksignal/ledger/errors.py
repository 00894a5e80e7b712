"""Ledger error taxonomy.

Every failure aborts the whole transition; none of these is ever raised
after ledger state has been touched.
"""

from __future__ import annotations


class SignalLedgerError(Exception):
    """Base class for all ledger failures."""


class DomainValidationError(SignalLedgerError, ValueError):
    """Input rejected from the submitted values alone (no proof involved)."""


class InvalidAction(DomainValidationError):
    pass


class InvalidConfidence(DomainValidationError):
    pass


class InvalidPrice(DomainValidationError):
    pass


class VerificationFailed(SignalLedgerError):
    """Seal does not attest the trusted image producing this journal."""


class AccessControlError(SignalLedgerError, PermissionError):
    """Caller is not allowed to perform a privileged operation."""


class InvalidImageId(ValueError):
    """Image id is not a 32-byte value."""
