"""Compiled-in price history and fail-fast integrity checks."""

from __future__ import annotations

from typing import Sequence

import pandas as pd

# (day_index, usd_price_per_eth), 30 consecutive days.  Part of the engine
# build: changing a single value changes the image id.
PRICE_HISTORY: tuple[tuple[int, int], ...] = (
    (1, 3200),
    (2, 3215),
    (3, 3189),
    (4, 3221),
    (5, 3254),
    (6, 3278),
    (7, 3242),
    (8, 3291),
    (9, 3315),
    (10, 3287),
    (11, 3324),
    (12, 3352),
    (13, 3389),
    (14, 3412),
    (15, 3398),
    (16, 3436),
    (17, 3462),
    (18, 3489),
    (19, 3453),
    (20, 3507),
    (21, 3534),
    (22, 3561),
    (23, 3528),
    (24, 3582),
    (25, 3615),
    (26, 3648),
    (27, 3621),
    (28, 3674),
    (29, 3702),
    (30, 3735),
)


def history_frame(history: Sequence[tuple[int, int]] = PRICE_HISTORY) -> pd.DataFrame:
    """Return the series as a ``day`` / ``price`` DataFrame."""
    return pd.DataFrame(list(history), columns=["day", "price"])


def validate_history(df: pd.DataFrame) -> None:
    """Validate a history frame before any regression runs.

    Raises ``ValueError`` on the first problem found so that a malformed
    series is rejected when the engine is built, not mid-computation.
    """

    # 1. Shape ─────────────────────────────────────────────────────────
    for col in ("day", "price"):
        if col not in df.columns:
            raise ValueError(f"Missing '{col}' column")
    if df.empty:
        raise ValueError("Price history is empty")

    # 2. No nulls, integers only ───────────────────────────────────────
    na_cols = [c for c in ("day", "price") if df[c].isna().any()]
    if na_cols:
        raise ValueError(f"Null values in {na_cols}")
    non_int = [c for c in ("day", "price") if not pd.api.types.is_integer_dtype(df[c])]
    if non_int:
        raise ValueError(f"Non-integer values in {non_int}")

    # 3. Strictly increasing day index ─────────────────────────────────
    n_dupes = int(df["day"].duplicated().sum())
    if n_dupes > 0:
        raise ValueError(f"Duplicate day indices found: {n_dupes}")
    if not df["day"].is_monotonic_increasing:
        raise ValueError("Day indices not monotonic increasing")

    # 4. Price sanity ──────────────────────────────────────────────────
    bad = int((df["price"] <= 0).sum())
    if bad > 0:
        raise ValueError(f"Non-positive price found: {bad} rows")
