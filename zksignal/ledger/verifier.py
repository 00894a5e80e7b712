"""Proof verification contract and a development-mode prover/verifier.

The real proving backend is external.  The ledger only relies on
:class:`ProofVerifier`: ``verify`` returns on success and raises
:class:`VerificationFailed` on any mismatch between seal, image id and
journal digest.

``MockProver`` / ``MockVerifier`` bind a seal to ``(image_id, digest)``
with a plain hash so the full flow can run locally.  They attest
nothing about execution and must not guard a production ledger.
"""

from __future__ import annotations

import hashlib
import hmac
import logging
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from zksignal.journal import journal_digest
from zksignal.ledger.errors import VerificationFailed

log = logging.getLogger(__name__)

MOCK_SELECTOR = b"\xff\xff\xff\xff"


@runtime_checkable
class ProofVerifier(Protocol):
    """Anything that can check a seal against an image id and digest."""

    def verify(self, seal: bytes, image_id: bytes, journal_digest: bytes) -> None: ...


@dataclass(frozen=True)
class Receipt:
    """What a prover hands back: the seal and the journal it commits to."""

    seal: bytes
    journal: bytes


def _claim_digest(image_id: bytes, digest: bytes) -> bytes:
    return hashlib.sha256(bytes(image_id) + bytes(digest)).digest()


class MockProver:
    """Produces development seals for a journal under an image id."""

    def prove(self, journal: bytes, image_id: bytes) -> Receipt:
        digest = journal_digest(journal)
        seal = MOCK_SELECTOR + _claim_digest(image_id, digest)
        log.debug("mock seal for digest %s under image %s", digest.hex(), bytes(image_id).hex())
        return Receipt(seal=seal, journal=bytes(journal))


class MockVerifier:
    """Accepts exactly the seals :class:`MockProver` would produce."""

    def verify(self, seal: bytes, image_id: bytes, journal_digest: bytes) -> None:
        if not isinstance(seal, (bytes, bytearray)):
            raise VerificationFailed(f"seal must be bytes, got {type(seal).__name__}")
        seal = bytes(seal)
        if len(seal) != len(MOCK_SELECTOR) + 32:
            raise VerificationFailed(f"malformed seal: {len(seal)} bytes")
        if seal[: len(MOCK_SELECTOR)] != MOCK_SELECTOR:
            raise VerificationFailed("unknown seal selector")

        expected = _claim_digest(image_id, journal_digest)
        if not hmac.compare_digest(seal[len(MOCK_SELECTOR) :], expected):
            raise VerificationFailed("seal does not match image id and journal digest")
