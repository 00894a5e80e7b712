"""Unit tests for zksignal.ledger.ledger.SignalLedger."""

from __future__ import annotations

import logging

import pytest

from zksignal.journal import encode
from zksignal.ledger import (
    AccessControlError,
    DomainValidationError,
    EventBus,
    ImageIdUpdated,
    InvalidAction,
    InvalidConfidence,
    InvalidPrice,
    MockProver,
    MockVerifier,
    Signal,
    SignalLedger,
    SignalUpdated,
    VerificationFailed,
)

IMAGE_A = bytes.fromhex("a1" * 32)
IMAGE_B = bytes.fromhex("b2" * 32)
NOW = 1_700_000_000


# ── helpers ──────────────────────────────────────────────────────────────

class CountingVerifier(MockVerifier):
    """MockVerifier that records how often it was consulted."""

    def __init__(self) -> None:
        self.calls = 0

    def verify(self, seal, image_id, journal_digest):
        self.calls += 1
        return super().verify(seal, image_id, journal_digest)


class ExplodingVerifier:
    def verify(self, seal, image_id, journal_digest):
        raise RuntimeError("backend unavailable")


def _seal(action, confidence, price, image_id=IMAGE_A) -> bytes:
    return MockProver().prove(encode(action, confidence, price), image_id).seal


def _ledger(verifier=None, clock=lambda: NOW) -> SignalLedger:
    return SignalLedger(verifier or MockVerifier(), image_id=IMAGE_A, owner="owner", clock=clock)


# ---------------------------------------------------------------------------
# Initial state
# ---------------------------------------------------------------------------


class TestInitialState:
    def test_zero_valued_signal(self):
        ledger = _ledger()
        assert ledger.get_latest_signal() == Signal(0, 0, 0, 0)
        assert ledger.get_signal_action() == 0
        assert ledger.get_confidence() == 0
        assert ledger.get_predicted_price() == 0
        assert ledger.is_active is False

    def test_initial_identity(self):
        ledger = _ledger()
        assert ledger.image_id == IMAGE_A
        assert ledger.owner == "owner"

    def test_hex_identity_accepted(self):
        ledger = SignalLedger(MockVerifier(), image_id="0x" + "a1" * 32, owner="owner")
        assert ledger.image_id == IMAGE_A


# ---------------------------------------------------------------------------
# Accepted updates
# ---------------------------------------------------------------------------


class TestSetSignal:
    def test_reference_scenario(self):
        ledger = _ledger()
        price = 3_750_000_000_000_000_000
        ledger.set_signal(1, 85, price, _seal(1, 85, price))
        assert ledger.get_signal_action() == 1
        assert ledger.get_confidence() == 85
        assert ledger.get_predicted_price() == 3_750_000_000_000_000_000
        assert ledger.is_active is True

    def test_stores_full_record(self):
        ledger = _ledger()
        assert ledger.set_signal(0, 100, 1, _seal(0, 100, 1)) is None
        assert ledger.get_latest_signal() == Signal(
            action=0, confidence=100, predicted_price=1, timestamp=NOW
        )

    def test_timestamp_not_before_call(self):
        ticks = iter([NOW, NOW + 5])
        ledger = _ledger(clock=lambda: next(ticks))
        ledger.set_signal(1, 50, 10, _seal(1, 50, 10))
        assert ledger.get_latest_signal().timestamp >= NOW

    def test_default_clock_is_wall_time(self):
        import time

        before = int(time.time())
        ledger = SignalLedger(MockVerifier(), image_id=IMAGE_A, owner="owner")
        ledger.set_signal(1, 50, 10, _seal(1, 50, 10))
        assert ledger.get_latest_signal().timestamp >= before

    @pytest.mark.parametrize("action", [0, 1])
    @pytest.mark.parametrize("confidence", [0, 1, 99, 100])
    def test_domain_bounds_accepted(self, action, confidence):
        ledger = _ledger()
        ledger.set_signal(action, confidence, 1, _seal(action, confidence, 1))
        assert ledger.get_signal_action() == action
        assert ledger.get_confidence() == confidence

    def test_second_update_overwrites_first(self):
        ticks = iter([NOW, NOW + 60])
        ledger = _ledger(clock=lambda: next(ticks))
        ledger.set_signal(1, 80, 350_000, _seal(1, 80, 350_000))
        ledger.set_signal(0, 90, 340_000, _seal(0, 90, 340_000))
        assert ledger.get_latest_signal() == Signal(0, 90, 340_000, NOW + 60)

    def test_update_event(self):
        ledger = _ledger()
        received = []
        ledger.subscribe(received.append)
        ledger.set_signal(1, 85, 42, _seal(1, 85, 42))
        expected = SignalUpdated(action=1, confidence=85, predicted_price=42, timestamp=NOW)
        assert received == [expected]

    def test_bytearray_seal(self):
        ledger = _ledger()
        ledger.set_signal(1, 10, 10, bytearray(_seal(1, 10, 10)))
        assert ledger.get_predicted_price() == 10


# ---------------------------------------------------------------------------
# Domain validation
# ---------------------------------------------------------------------------


class TestDomainValidation:
    def test_invalid_action_scenario(self):
        ledger = _ledger()
        price = 3_600_000_000_000_000_000
        with pytest.raises(InvalidAction):
            ledger.set_signal(2, 80, price, _seal(2, 80, price))

    @pytest.mark.parametrize("action", [2, 3, 255, -1, True])
    def test_invalid_action_regardless_of_seal(self, action):
        with pytest.raises(InvalidAction):
            _ledger().set_signal(action, 80, 1, b"garbage")

    def test_invalid_confidence_scenario(self):
        """Rejected even with a seal proven for exactly these values."""
        price = 3_600_000_000_000_000_000
        with pytest.raises(InvalidConfidence):
            _ledger().set_signal(1, 101, price, _seal(1, 101, price))

    @pytest.mark.parametrize("confidence", [101, 1000, 2**256 - 1, -1])
    def test_invalid_confidence(self, confidence):
        with pytest.raises(InvalidConfidence):
            _ledger().set_signal(1, confidence, 1, b"")

    def test_invalid_price_scenario(self):
        with pytest.raises(InvalidPrice):
            _ledger().set_signal(1, 80, 0, _seal(1, 80, 0))

    @pytest.mark.parametrize("price", [0, -1, 2**256])
    def test_invalid_price(self, price):
        with pytest.raises(InvalidPrice):
            _ledger().set_signal(1, 80, price, b"")

    def test_check_order(self):
        """Action is checked before confidence, confidence before price."""
        ledger = _ledger()
        with pytest.raises(InvalidAction):
            ledger.set_signal(9, 500, 0, b"")
        with pytest.raises(InvalidConfidence):
            ledger.set_signal(1, 500, 0, b"")

    def test_domain_errors_skip_verification(self):
        verifier = CountingVerifier()
        ledger = _ledger(verifier)
        for args in [(2, 80, 1), (1, 101, 1), (1, 80, 0)]:
            with pytest.raises(DomainValidationError):
                ledger.set_signal(*args, _seal(*args))
        assert verifier.calls == 0

    def test_domain_errors_are_value_errors(self):
        assert issubclass(DomainValidationError, ValueError)
        assert not issubclass(VerificationFailed, DomainValidationError)


# ---------------------------------------------------------------------------
# Verification
# ---------------------------------------------------------------------------


class TestVerification:
    def test_seal_for_other_journal_rejected(self):
        ledger = _ledger()
        seal = _seal(1, 80, 350_000)
        with pytest.raises(VerificationFailed):
            ledger.set_signal(0, 90, 340_000, seal)

    def test_verifier_called_once_for_valid_domain(self):
        verifier = CountingVerifier()
        ledger = _ledger(verifier)
        ledger.set_signal(1, 80, 350_000, _seal(1, 80, 350_000))
        assert verifier.calls == 1

    def test_failure_leaves_state_and_events_untouched(self):
        ledger = _ledger()
        ledger.set_signal(1, 80, 350_000, _seal(1, 80, 350_000))
        before = ledger.get_latest_signal()
        received = []
        ledger.subscribe(received.append)

        with pytest.raises(VerificationFailed):
            ledger.set_signal(0, 90, 340_000, _seal(1, 80, 350_000))
        with pytest.raises(InvalidPrice):
            ledger.set_signal(0, 90, 0, b"")

        assert ledger.get_latest_signal() == before
        assert received == []

    def test_first_failure_keeps_ledger_uninitialized(self):
        ledger = _ledger()
        with pytest.raises(VerificationFailed):
            ledger.set_signal(1, 80, 350_000, b"\x00" * 36)
        assert ledger.is_active is False
        assert ledger.get_latest_signal() == Signal()

    def test_empty_seal(self):
        with pytest.raises(VerificationFailed):
            _ledger().set_signal(1, 80, 350_000, b"")

    def test_backend_errors_propagate_without_commit(self):
        ledger = _ledger(ExplodingVerifier())
        with pytest.raises(RuntimeError, match="backend unavailable"):
            ledger.set_signal(1, 80, 350_000, b"")
        assert ledger.get_latest_signal() == Signal()


# ---------------------------------------------------------------------------
# Image id rotation
# ---------------------------------------------------------------------------


class TestImageRotation:
    def test_rotation_invalidates_old_seals(self):
        ledger = _ledger()
        old_seal = _seal(1, 80, 350_000, IMAGE_A)
        ledger.set_image_id(IMAGE_B, caller="owner")
        with pytest.raises(VerificationFailed):
            ledger.set_signal(1, 80, 350_000, old_seal)
        ledger.set_signal(1, 80, 350_000, _seal(1, 80, 350_000, IMAGE_B))
        assert ledger.get_predicted_price() == 350_000

    def test_rotation_keeps_stored_signal(self):
        ledger = _ledger()
        ledger.set_signal(1, 80, 350_000, _seal(1, 80, 350_000))
        stored = ledger.get_latest_signal()
        ledger.set_image_id(IMAGE_B, caller="owner")
        assert ledger.get_latest_signal() == stored
        assert ledger.image_id == IMAGE_B

    def test_rotation_event(self):
        ledger = _ledger()
        received = []
        ledger.subscribe(received.append)
        ledger.set_image_id("0x" + "b2" * 32, caller="owner")
        assert received == [ImageIdUpdated(image_id=IMAGE_B)]

    def test_non_owner_cannot_rotate(self):
        ledger = _ledger()
        received = []
        ledger.subscribe(received.append)
        with pytest.raises(AccessControlError):
            ledger.set_image_id(IMAGE_B, caller="mallory")
        assert ledger.image_id == IMAGE_A
        assert received == []

    def test_transfer_ownership(self):
        ledger = _ledger()
        ledger.transfer_ownership("new-owner", caller="owner")
        assert ledger.owner == "new-owner"
        with pytest.raises(AccessControlError):
            ledger.set_image_id(IMAGE_B, caller="owner")
        ledger.set_image_id(IMAGE_B, caller="new-owner")
        assert ledger.image_id == IMAGE_B


# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------


def test_handlers_called_in_registration_order():
    ledger = _ledger()
    order = []
    ledger.subscribe(lambda e: order.append("first"))
    ledger.subscribe(lambda e: order.append("second"))
    ledger.set_signal(1, 1, 1, _seal(1, 1, 1))
    assert order == ["first", "second"]


def test_event_sequence():
    ledger = _ledger()
    received = []
    ledger.subscribe(received.append)
    ledger.set_signal(1, 1, 1, _seal(1, 1, 1))
    ledger.set_image_id(IMAGE_B, caller="owner")
    ledger.set_signal(0, 2, 2, _seal(0, 2, 2, IMAGE_B))
    assert [type(e) for e in received] == [SignalUpdated, ImageIdUpdated, SignalUpdated]


def test_failing_handler_does_not_undo_commit(caplog):
    ledger = _ledger()
    received = []

    def broken(event):
        raise RuntimeError("subscriber down")

    ledger.subscribe(broken)
    ledger.subscribe(received.append)

    with caplog.at_level(logging.ERROR):
        ledger.set_signal(1, 80, 350_000, _seal(1, 80, 350_000))

    assert ledger.get_latest_signal() == Signal(1, 80, 350_000, NOW)
    assert ledger.is_active is True
    assert received == [SignalUpdated(1, 80, 350_000, NOW)]
    assert "subscriber down" in caplog.text


def test_handler_may_call_back_into_ledger():
    """A handler triggering another transition neither blocks nor reorders events."""
    ledger = _ledger()
    received = []

    def rotate_on_signal(event):
        if isinstance(event, SignalUpdated):
            ledger.set_image_id(IMAGE_B, caller="owner")

    ledger.subscribe(rotate_on_signal)
    ledger.subscribe(received.append)
    ledger.set_signal(1, 80, 350_000, _seal(1, 80, 350_000))

    assert ledger.image_id == IMAGE_B
    assert received == [
        SignalUpdated(1, 80, 350_000, NOW),
        ImageIdUpdated(image_id=IMAGE_B),
    ]


def test_event_bus_isolates_handler_errors():
    bus = EventBus()
    received = []
    bus.subscribe(lambda e: 1 / 0)
    bus.subscribe(received.append)
    event = ImageIdUpdated(image_id=IMAGE_A)
    bus.publish(event)
    assert received == [event]
    assert not hasattr(bus, "history")


# ---------------------------------------------------------------------------
# No history
# ---------------------------------------------------------------------------


def test_overwritten_signal_unrecoverable():
    """After two updates, nothing public still exposes the first signal."""
    ticks = iter([NOW, NOW + 60])
    ledger = _ledger(clock=lambda: next(ticks))
    ledger.set_signal(1, 80, 350_000, _seal(1, 80, 350_000))
    ledger.set_signal(0, 90, 340_000, _seal(0, 90, 340_000))

    seen = []
    for name in dir(ledger):
        if name.startswith("_"):
            continue
        value = getattr(ledger, name)
        if callable(value):
            if not name.startswith("get_"):
                continue
            value = value()
        seen.append(value)

    assert not hasattr(ledger, "events")
    assert Signal(1, 80, 350_000, NOW) not in seen
    assert 350_000 not in seen
    assert not any("350000" in repr(v) for v in seen)
    assert ledger.get_latest_signal() == Signal(0, 90, 340_000, NOW + 60)
