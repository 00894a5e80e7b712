"""Immutable configuration for a single oracle run, read from YAML."""

from __future__ import annotations

from dataclasses import dataclass, fields
from pathlib import Path

import yaml

from zksignal.engine.identity import compute_image_id
from zksignal.ledger.registry import parse_image_id

# Repo root (one level up from zksignal/config.py)
REPO_ROOT = Path(__file__).resolve().parent.parent

_REQUIRED = ("current_price", "owner")


@dataclass(frozen=True)
class OracleConfig:
    """Settings for one compute → prove → submit run.

    ``initial_image_id`` of ``"auto"`` means the id of the engine build
    in this checkout (:func:`compute_image_id`).
    """

    current_price: int
    owner: str
    initial_image_id: str = "auto"
    output_dir: str = "runs"
    plot: bool = True

    def __post_init__(self) -> None:
        if isinstance(self.current_price, bool) or not isinstance(self.current_price, int):
            raise ValueError(f"current_price must be an integer, got {self.current_price!r}")
        if self.current_price < 0:
            raise ValueError(f"current_price must be >= 0, got {self.current_price}")
        if not self.owner:
            raise ValueError("owner must be a non-empty string")

    @property
    def image_id(self) -> bytes:
        if self.initial_image_id == "auto":
            return compute_image_id()
        return parse_image_id(self.initial_image_id)

    @property
    def output_path(self) -> Path:
        path = Path(self.output_dir)
        return path if path.is_absolute() else REPO_ROOT / path

    @classmethod
    def from_dict(cls, raw: dict) -> OracleConfig:
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(raw) - known)
        if unknown:
            raise ValueError(f"Unknown config keys: {unknown}")
        missing = [k for k in _REQUIRED if k not in raw]
        if missing:
            raise ValueError(f"Missing required config keys: {missing}")
        return cls(**raw)


def resolve_path(config_path: str | Path) -> Path:
    path = Path(config_path)
    return path if path.is_absolute() else REPO_ROOT / path


def load_config(config_path: str | Path) -> OracleConfig:
    """Load and validate a YAML config (relative to repo root or absolute)."""
    with open(resolve_path(config_path), "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}
    if not isinstance(raw, dict):
        raise ValueError("config file must contain a mapping")
    return OracleConfig.from_dict(raw)
