"""Engine configuration and its YAML/JSON loader."""

from __future__ import annotations

import json
import warnings
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

import yaml

from finprojector.core.decimal_math import Currency, RoundingPolicy, get_currency
from finprojector.core.errors import ConfigError

__all__ = ["EngineConfig", "ConfigWarning", "load_config", "DEFAULT_CONFIG"]

DEFAULT_MAX_PERIODS = 60
DEFAULT_HORIZONS = (12, 36, 60)


class ConfigWarning(UserWarning):
    """Warning for ignored or suspicious configuration entries."""


@dataclass(frozen=True)
class EngineConfig:
    """
    Settings shared by every projector.

    Attributes:
        max_periods: Cap on amortization schedule length (months)
        currency: Currency code used for quantization
        rounding: Rounding policy name ('bankers' or 'half_up')
        horizons: Standard investment horizons in months
        upcoming_days: Default look-ahead window for upcoming occurrences
    """

    max_periods: int = DEFAULT_MAX_PERIODS
    currency: str = "USD"
    rounding: str = "bankers"
    horizons: tuple[int, ...] = field(default=DEFAULT_HORIZONS)
    upcoming_days: int = 30

    def __post_init__(self):
        if isinstance(self.max_periods, bool) or not isinstance(self.max_periods, int):
            raise ConfigError(f"max_periods must be an integer, got {self.max_periods!r}")
        if self.max_periods < 1:
            raise ConfigError("max_periods must be >= 1")
        if isinstance(self.upcoming_days, bool) or not isinstance(self.upcoming_days, int):
            raise ConfigError(f"upcoming_days must be an integer, got {self.upcoming_days!r}")
        if self.upcoming_days < 0:
            raise ConfigError("upcoming_days must be >= 0")
        try:
            RoundingPolicy.from_name(self.rounding)
        except ValueError as exc:
            raise ConfigError(str(exc)) from None

        horizons = tuple(self.horizons)
        if not horizons or any(
            isinstance(h, bool) or not isinstance(h, int) or h < 0 for h in horizons
        ):
            raise ConfigError(f"horizons must be non-negative integers, got {self.horizons!r}")
        object.__setattr__(self, "horizons", tuple(sorted(set(horizons))))

    @property
    def money(self) -> Currency:
        """Currency with the configured rounding policy applied."""
        return get_currency(self.currency).with_rounding(RoundingPolicy.from_name(self.rounding))

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> EngineConfig:
        """Build a config from a mapping, warning about unknown keys."""
        if not isinstance(data, dict):
            raise ConfigError(f"configuration must be a mapping, got {type(data).__name__}")
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            warnings.warn(
                f"Ignoring unknown configuration keys: {', '.join(unknown)}",
                ConfigWarning,
                stacklevel=2,
            )
        kwargs = {k: v for k, v in data.items() if k in known}
        if "horizons" in kwargs and isinstance(kwargs["horizons"], list):
            kwargs["horizons"] = tuple(kwargs["horizons"])
        return cls(**kwargs)

    def to_dict(self) -> dict[str, Any]:
        return {
            "max_periods": self.max_periods,
            "currency": self.currency,
            "rounding": self.rounding,
            "horizons": list(self.horizons),
            "upcoming_days": self.upcoming_days,
        }


DEFAULT_CONFIG = EngineConfig()


def load_config(path: str | Path) -> EngineConfig:
    """
    Load an ``EngineConfig`` from a YAML or JSON file.

    The file may hold the settings at the top level or under a ``projection``
    key. ``.json`` files are parsed as JSON, anything else as YAML.

    Raises:
        ConfigError: If the file cannot be parsed or holds invalid values
    """
    config_path = Path(path)
    try:
        text = config_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"cannot read configuration {config_path}: {exc}") from exc

    try:
        if config_path.suffix.lower() == ".json":
            data = json.loads(text)
        else:
            data = yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise ConfigError(f"cannot parse configuration {config_path}: {exc}") from exc

    if data is None:
        return EngineConfig()
    if isinstance(data, dict) and isinstance(data.get("projection"), dict):
        data = data["projection"]
    return EngineConfig.from_dict(data)
