"""
Harvest Configuration

Tunables for the harvest loop. Defaults come from long-running exports of
virtualized chat pages; every value can be overridden from a JSON file and
then from the environment.

PRECEDENCE:
===========
1. Environment (RECONSTITUTE_*)
2. JSON config file (RECONSTITUTE_CONFIG or explicit path)
3. Dataclass defaults
"""

from __future__ import annotations
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Optional
import json
import os

from .contracts.base import ConfigError


ENV_CONFIG_PATH = "RECONSTITUTE_CONFIG"
ENV_PREFIX = "RECONSTITUTE_"


@dataclass(frozen=True)
class HarvestConfig:
    """Configuration for one harvest session."""
    step_fraction: float = 0.9      # Fraction of the viewport advanced per step
    settle_delay: float = 0.85      # Seconds to wait after each materialization
    stall_limit: int = 26           # Retry ceiling (consecutive stalled passes)
    confirm_stall: int = 3          # Stalled passes needed to accept the end
    end_epsilon: int = 10           # Slack when testing the end of the extent

    def __post_init__(self):
        if not 0 < self.step_fraction <= 1:
            raise ConfigError(f"step_fraction must be in (0, 1], got {self.step_fraction}")
        if self.settle_delay < 0:
            raise ConfigError(f"settle_delay must be >= 0, got {self.settle_delay}")
        if self.stall_limit < 1:
            raise ConfigError(f"stall_limit must be >= 1, got {self.stall_limit}")
        if self.confirm_stall < 1:
            raise ConfigError(f"confirm_stall must be >= 1, got {self.confirm_stall}")
        if self.confirm_stall > self.stall_limit:
            raise ConfigError(
                f"confirm_stall ({self.confirm_stall}) must not exceed "
                f"stall_limit ({self.stall_limit})"
            )
        if self.end_epsilon < 0:
            raise ConfigError(f"end_epsilon must be >= 0, got {self.end_epsilon}")

    def to_dict(self) -> dict:
        return {f.name: getattr(self, f.name) for f in fields(self)}


_CASTS: Dict[str, Callable[[Any], Any]] = {
    'step_fraction': float,
    'settle_delay': float,
    'stall_limit': int,
    'confirm_stall': int,
    'end_epsilon': int,
}


def _coerce(values: Mapping[str, Any], origin: str) -> Dict[str, Any]:
    coerced = {}
    for key, raw in values.items():
        cast = _CASTS.get(key)
        if cast is None:
            raise ConfigError(f"unknown config key {key!r} in {origin}")
        try:
            coerced[key] = cast(raw)
        except (TypeError, ValueError) as e:
            raise ConfigError(f"invalid value for {key} in {origin}: {raw!r}") from e
    return coerced


def _env_overrides(environ: Mapping[str, str]) -> Dict[str, Any]:
    overrides = {}
    for key in _CASTS:
        env_key = ENV_PREFIX + key.upper()
        if env_key in environ:
            overrides[key] = environ[env_key]
    return _coerce(overrides, "environment")


def load_config(
    path: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None
) -> HarvestConfig:
    """Load config from an optional JSON file, then apply env overrides."""
    environ = os.environ if environ is None else environ
    config = HarvestConfig()

    if path is None and environ.get(ENV_CONFIG_PATH):
        path = Path(environ[ENV_CONFIG_PATH])

    if path is not None:
        try:
            with open(path, 'r', encoding='utf-8') as f:
                raw = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigError(f"cannot read config {path}: {e}") from e
        if not isinstance(raw, dict):
            raise ConfigError(f"config {path} must be a JSON object")
        config = replace(config, **_coerce(raw, str(path)))

    overrides = _env_overrides(environ)
    if overrides:
        config = replace(config, **overrides)
    return config
