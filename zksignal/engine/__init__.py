"""Engine package: the deterministic computation and its identity."""

from .history import PRICE_HISTORY, history_frame, validate_history
from .identity import compute_image_id
from .predictor import (
    REFERENCE_USD_PRICE,
    THRESHOLD_BPS,
    Action,
    Prediction,
    PredictionEngine,
    run_guest,
)
from .regression import PRECISION, RegressionFit, ZeroVarianceError, fit_history

__all__ = [
    "PRICE_HISTORY",
    "history_frame",
    "validate_history",
    "compute_image_id",
    "REFERENCE_USD_PRICE",
    "THRESHOLD_BPS",
    "Action",
    "Prediction",
    "PredictionEngine",
    "run_guest",
    "PRECISION",
    "RegressionFit",
    "ZeroVarianceError",
    "fit_history",
]
