"""PredictionEngine: the deterministic computation named by the image id.

Maps a current price to ``(action, confidence, predicted_price)`` using the
compiled-in history only.  Identical inputs always yield identical
outputs, so one journal digest corresponds to exactly one result.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import IntEnum
from typing import Sequence

from zksignal.engine.history import PRICE_HISTORY, history_frame, validate_history
from zksignal.engine.regression import PRECISION, RegressionFit, fit_history
from zksignal.journal import UINT256_MAX, Journal, decode_price_input, encode

log = logging.getLogger(__name__)

# USD price the input amount is assumed to be worth today.
REFERENCE_USD_PRICE = 3200

# BUY requires the prediction to beat the current price by 0.5%.
THRESHOLD_BPS = 50
_BPS = 10_000


class Action(IntEnum):
    SELL = 0
    BUY = 1


@dataclass(frozen=True)
class Prediction:
    """Engine output, in the caller's price units."""

    action: Action
    confidence: int
    predicted_price: int

    def to_journal(self) -> Journal:
        return Journal(int(self.action), self.confidence, self.predicted_price)


class PredictionEngine:
    """Fixed-point linear-regression predictor.

    The history is validated and fitted once, at construction, so a bad
    series fails here rather than on a submitted price.

    Parameters
    ----------
    history : sequence of (day, usd_price)
        Defaults to the compiled-in ``PRICE_HISTORY``.
    reference_price : int
        USD value the input amount is assumed to represent today.
    threshold_bps : int
        Minimum predicted gain, in basis points, for a BUY.
    """

    def __init__(
        self,
        history: Sequence[tuple[int, int]] = PRICE_HISTORY,
        reference_price: int = REFERENCE_USD_PRICE,
        threshold_bps: int = THRESHOLD_BPS,
    ) -> None:
        if reference_price <= 0:
            raise ValueError(f"reference_price must be positive, got {reference_price}")
        if threshold_bps < 0:
            raise ValueError(f"threshold_bps must be >= 0, got {threshold_bps}")

        validate_history(history_frame(history))
        self._history = tuple(history)
        self._fit = fit_history(self._history)
        self._next_day = self._history[-1][0] + 1
        self.reference_price = reference_price
        self.threshold_bps = threshold_bps

    @property
    def fit(self) -> RegressionFit:
        return self._fit

    @property
    def history(self) -> tuple[tuple[int, int], ...]:
        return self._history

    @property
    def next_day(self) -> int:
        return self._next_day

    def projected_reference_price(self) -> int:
        """Next-day USD price scaled by ``PRECISION``, floored at zero."""
        projected = self._fit.project(self._next_day)
        if projected < 0:
            log.warning("Negative projection %d for day %d clamped to 0", projected, self._next_day)
            return 0
        return projected

    @property
    def max_current_price(self) -> int:
        """Largest input whose predicted price still fits in a uint256."""
        return self._max_input(self.projected_reference_price())

    def _max_input(self, projected: int) -> int:
        if projected == 0:
            return UINT256_MAX
        scale = self.reference_price * PRECISION
        # floor(c * projected / scale) <= MAX  <=>  c * projected < (MAX + 1) * scale
        return min(UINT256_MAX, ((UINT256_MAX + 1) * scale - 1) // projected)

    def predict(self, current_price: int) -> Prediction:
        """Derive the trading action for *current_price*.

        ``predicted_price = current_price * projected_usd / reference_usd``;
        BUY iff ``predicted_price > current_price * (1 + threshold)``.
        """
        if current_price < 0:
            raise ValueError(f"current_price must be >= 0, got {current_price}")
        projected = self.projected_reference_price()
        limit = self._max_input(projected)
        if current_price > limit:
            raise ValueError(
                f"current_price {current_price} exceeds maximum accepted input {limit}"
            )

        predicted_price = current_price * projected // (self.reference_price * PRECISION)

        if predicted_price * _BPS > current_price * (_BPS + self.threshold_bps):
            action = Action.BUY
        else:
            action = Action.SELL

        return Prediction(
            action=action,
            confidence=self._fit.confidence,
            predicted_price=predicted_price,
        )


def run_guest(input_bytes: bytes, engine: PredictionEngine | None = None) -> bytes:
    """Full computation: 32-byte price word in, 96-byte journal out."""
    engine = engine or PredictionEngine()
    current_price = decode_price_input(input_bytes)
    prediction = engine.predict(current_price)
    log.debug(
        "guest: price=%d action=%s confidence=%d predicted=%d",
        current_price, prediction.action.name, prediction.confidence, prediction.predicted_price,
    )
    return encode(int(prediction.action), prediction.confidence, prediction.predicted_price)
