"""Image id: a 32-byte digest naming one build of the prediction engine."""

from __future__ import annotations

import hashlib
from pathlib import Path

_PACKAGE_ROOT = Path(__file__).resolve().parent.parent

# Source files whose bytes define the computation.  Order matters.
ENGINE_SOURCES: tuple[str, ...] = (
    "engine/history.py",
    "engine/regression.py",
    "engine/predictor.py",
    "journal/codec.py",
)


def compute_image_id(root: Path = _PACKAGE_ROOT) -> bytes:
    """Return SHA-256 over the engine's source files.

    Each file contributes ``name:size:`` followed by its raw bytes, so a
    rename, truncation, or edit all produce a different id.
    """
    h = hashlib.sha256()
    for rel in ENGINE_SOURCES:
        data = (root / rel).read_bytes()
        h.update(f"{rel}:{len(data)}:".encode("utf-8"))
        h.update(data)
    return h.digest()
