"""YAML configuration for the command line and HTTP service."""

from __future__ import annotations

import copy
from pathlib import Path
from typing import Any

import yaml

from .difficulty import MAX_TARGET
from .state_codec import SizeError, validate_size

DEFAULT_CONFIG: dict[str, Any] = {
    "engine": {"min_size": 2, "max_size": 16},
    "pow": {"target": MAX_TARGET},
    "server": {"host": "127.0.0.1", "port": 8000},
    "batch": {"max_workers": None},
}


def _merge(base: dict, override: dict) -> dict:
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            _merge(base[key], value)
        else:
            base[key] = value
    return base


def load_config(path: str | Path | None = None) -> dict:
    """Load YAML config merged over ``DEFAULT_CONFIG``."""
    cfg = copy.deepcopy(DEFAULT_CONFIG)
    if path is None:
        return cfg
    with open(path, encoding="utf-8") as f:
        loaded = yaml.safe_load(f) or {}
    if not isinstance(loaded, dict):
        raise ValueError(f"Config root must be a mapping: {path}")
    return _merge(cfg, loaded)


def check_size(size: int, cfg: dict | None = None) -> int:
    """Validate ``size`` against the configured engine bounds."""
    cfg = cfg or DEFAULT_CONFIG
    size = validate_size(size)
    lo = int(cfg["engine"]["min_size"])
    hi = int(cfg["engine"]["max_size"])
    if not lo <= size <= hi:
        raise SizeError(f"Cube size must be in {lo}..{hi}, got {size}")
    return size
