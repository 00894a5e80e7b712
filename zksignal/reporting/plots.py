"""Plotting utilities for oracle run reporting."""

from __future__ import annotations

import logging
from pathlib import Path

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt  # noqa: E402
import numpy as np  # noqa: E402
import pandas as pd  # noqa: E402

from zksignal.engine.regression import PRECISION, RegressionFit  # noqa: E402

log = logging.getLogger(__name__)


def plot_regression(
    history: pd.DataFrame,
    fit: RegressionFit,
    next_day: int,
    out_path: str | Path,
) -> None:
    """Plot the price history, the fitted line and the projected point.

    Parameters
    ----------
    history : pd.DataFrame
        Must contain ``day`` and ``price`` columns.
    fit : RegressionFit
        Fixed-point fit of *history*.
    next_day : int
        Day the engine projects to.
    out_path : str | Path
        Destination file path (e.g. ``plots/regression.png``).
    """
    out_path = Path(out_path)
    out_path.parent.mkdir(parents=True, exist_ok=True)

    days = np.arange(int(history["day"].iloc[0]), next_day + 1)
    fitted = [fit.project(int(d)) / PRECISION for d in days]

    fig, ax = plt.subplots(figsize=(10, 5))
    ax.plot(history["day"], history["price"], marker="o", linewidth=0.8, color="#d4af37", label="history")
    ax.plot(days, fitted, linestyle="--", color="#4060a0", label="fit")
    ax.scatter([next_day], [fitted[-1]], color="#c03030", zorder=3, label=f"day {next_day}")
    ax.set_title(f"Price regression  (confidence {fit.confidence}%)")
    ax.set_xlabel("Day")
    ax.set_ylabel("USD")
    ax.grid(True, alpha=0.3)
    ax.legend()
    fig.tight_layout()
    fig.savefig(out_path, dpi=100)
    plt.close(fig)

    log.info("Saved regression plot → %s", out_path)
