"""SignalLedger: validated state machine holding the latest accepted signal.

Each ``set_signal`` call runs its guards strictly in this order and stops
at the first failure:

  action → confidence → price → re-encode journal → verify seal → commit

The cheap domain checks always run before the verifier, so a malformed
submission never pays for proof verification.  Nothing is written until
every guard has passed; the commit replaces all four fields at once.
Events are delivered after the transition has released its lock, in
commit order, so a subscriber can neither undo a commit nor deadlock by
calling back into the ledger.
"""

from __future__ import annotations

import logging
import threading
import time
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass

from zksignal.journal import UINT256_MAX, encode, journal_digest
from zksignal.ledger.errors import (
    InvalidAction,
    InvalidConfidence,
    InvalidPrice,
    VerificationFailed,
)
from zksignal.ledger.events import EventBus, ImageIdUpdated, LedgerEvent, SignalUpdated
from zksignal.ledger.registry import ImageRegistry
from zksignal.ledger.verifier import ProofVerifier

log = logging.getLogger(__name__)

MAX_CONFIDENCE = 100
_VALID_ACTIONS = (0, 1)


@dataclass(frozen=True)
class Signal:
    """The ledger's single stored record.  Zero-valued until first accepted."""

    action: int = 0
    confidence: int = 0
    predicted_price: int = 0
    timestamp: int = 0


@dataclass
class LedgerState:
    """All mutable ledger state, owned by exactly one :class:`SignalLedger`."""

    signal: Signal
    registry: ImageRegistry
    active: bool = False


def _is_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


class SignalLedger:
    """Accepts a signal only with a seal proving the trusted engine produced it.

    Parameters
    ----------
    verifier : ProofVerifier
        Checks ``(seal, image_id, journal_digest)``.
    image_id : bytes | str
        Initial trusted engine build.
    owner : str
        Caller allowed to rotate the image id.
    clock : callable, optional
        Returns the current time in integer seconds.  Defaults to
        wall-clock time.
    """

    def __init__(
        self,
        verifier: ProofVerifier,
        image_id: bytes | str,
        owner: str,
        clock: Callable[[], int] | None = None,
    ) -> None:
        self._verifier = verifier
        self._clock = clock or (lambda: int(time.time()))
        self._state = LedgerState(signal=Signal(), registry=ImageRegistry(image_id, owner))
        self._bus = EventBus()
        self._lock = threading.Lock()

        # Committed but not yet delivered events; drained by _flush_events
        self._outbox: deque[LedgerEvent] = deque()
        self._dispatch_lock = threading.RLock()
        self._dispatching = False

    # -- events --------------------------------------------------------------

    def subscribe(self, handler: Callable[[LedgerEvent], None]) -> None:
        """Register *handler* for every future ledger event."""
        self._bus.subscribe(handler)

    def _flush_events(self) -> None:
        """Deliver queued events in commit order, outside the state lock.

        A handler that triggers another transition only enqueues; the
        outermost flush delivers it after the current event.
        """
        with self._dispatch_lock:
            if self._dispatching:
                return
            self._dispatching = True
            try:
                while self._outbox:
                    self._bus.publish(self._outbox.popleft())
            finally:
                self._dispatching = False

    # -- transitions ---------------------------------------------------------

    def set_signal(
        self,
        action: int,
        confidence: int,
        predicted_price: int,
        seal: bytes,
    ) -> None:
        """Validate, verify, then atomically replace the stored signal.

        Raises
        ------
        InvalidAction, InvalidConfidence, InvalidPrice
            Domain checks, in that order; the verifier is not called.
        VerificationFailed
            The seal does not bind the current image id to this journal.
        """
        with self._lock:
            _check_domain(action, confidence, predicted_price)

            journal = encode(action, confidence, predicted_price)
            digest = journal_digest(journal)
            image_id = self._state.registry.image_id
            log.debug("journal digest %s, image id %s", digest.hex(), image_id.hex())

            try:
                self._verifier.verify(seal, image_id, digest)
            except VerificationFailed as exc:
                log.warning(
                    "Rejected signal (action=%d confidence=%d price=%d): %s",
                    action, confidence, predicted_price, exc,
                )
                raise

            signal = Signal(
                action=action,
                confidence=confidence,
                predicted_price=predicted_price,
                timestamp=int(self._clock()),
            )
            self._state.signal = signal
            self._state.active = True
            log.info(
                "Signal updated: action=%d confidence=%d price=%d ts=%d",
                signal.action, signal.confidence, signal.predicted_price, signal.timestamp,
            )
            self._outbox.append(
                SignalUpdated(
                    action=signal.action,
                    confidence=signal.confidence,
                    predicted_price=signal.predicted_price,
                    timestamp=signal.timestamp,
                )
            )
        self._flush_events()

    def set_image_id(self, image_id: bytes | str, caller: str) -> None:
        """Rotate the trusted image id (owner only).

        The stored signal is untouched; seals for the old id stop
        verifying immediately.
        """
        with self._lock:
            new_id = self._state.registry.set_image_id(image_id, caller)
            self._outbox.append(ImageIdUpdated(image_id=new_id))
        self._flush_events()

    def transfer_ownership(self, new_owner: str, caller: str) -> None:
        with self._lock:
            self._state.registry.transfer_ownership(new_owner, caller)

    # -- read accessors ------------------------------------------------------

    def get_latest_signal(self) -> Signal:
        return self._state.signal

    def get_signal_action(self) -> int:
        return self._state.signal.action

    def get_confidence(self) -> int:
        return self._state.signal.confidence

    def get_predicted_price(self) -> int:
        return self._state.signal.predicted_price

    @property
    def image_id(self) -> bytes:
        return self._state.registry.image_id

    @property
    def owner(self) -> str:
        return self._state.registry.owner

    @property
    def is_active(self) -> bool:
        """False until the first signal has been accepted."""
        return self._state.active


def _check_domain(action: int, confidence: int, predicted_price: int) -> None:
    """Cheap input guards.  Raises the first violation found."""
    if not _is_int(action) or action not in _VALID_ACTIONS:
        raise InvalidAction(f"action must be 0 (SELL) or 1 (BUY), got {action!r}")
    if not _is_int(confidence) or not 0 <= confidence <= MAX_CONFIDENCE:
        raise InvalidConfidence(f"confidence must be in [0, {MAX_CONFIDENCE}], got {confidence!r}")
    if not _is_int(predicted_price) or not 0 < predicted_price <= UINT256_MAX:
        raise InvalidPrice(f"predicted_price must be in (0, 2**256), got {predicted_price!r}")
