"""
Smoothing settings and configuration management.

Provides the filter configuration dataclass, the enums selecting the filter
variant and overscan policy, and the settings store that hands out atomic
configuration snapshots to pose controllers.
"""

from dataclasses import dataclass, fields, replace
from enum import Enum, auto
from pathlib import Path
from typing import Any, Optional, Tuple
import json
import logging
import math
import threading

import yaml

logger = logging.getLogger(__name__)


class FilterVariant(Enum):
    """Available pose filter implementations."""
    CLASSIC_ONE_EURO = auto()
    ADAPTIVE_ALPHA_LERP = auto()


class ScalePolicy(Enum):
    """How the overscanned scale reaches the smoothed pose."""
    DIRECT = auto()  # raw scale * overscan every tick
    BLEND = auto()   # blended at the position blend factor


# Lower bounds for strictly positive parameters
MIN_CUTOFF_FLOOR = 1e-3
D_CUTOFF_FLOOR = 1e-3
ALPHA_FLOOR = 0.01

# Persisted key -> field name. Includes the legacy tuning-panel names.
_KEY_ALIASES = {
    "minCutoff": "min_cutoff",
    "filterMinCF": "min_cutoff",
    "beta": "beta",
    "filterBeta": "beta",
    "dCutoff": "d_cutoff",
    "alphaMin": "alpha_min",
    "alphaMax": "alpha_max",
    "overscan": "overscan",
    "smoothingEnabled": "smoothing_enabled",
    "variant": "variant",
    "scalePolicy": "scale_policy",
}


def _finite_or(value: float, default: float) -> float:
    return value if math.isfinite(value) else default


@dataclass(frozen=True)
class FilterConfig:
    """
    Tuning parameters for pose smoothing.

    Instances are immutable so a reference handed to a controller is a
    consistent snapshot. Use clamped() to force values into their domains.
    """

    # One-Euro parameters
    min_cutoff: float = 0.02
    beta: float = 60.0
    d_cutoff: float = 1.0

    # Adaptive alpha bounds for the lerp variant
    alpha_min: float = 0.12
    alpha_max: float = 0.22

    # Uniform scale applied to the rendered content
    overscan: float = 1.02

    smoothing_enabled: bool = True
    variant: FilterVariant = FilterVariant.CLASSIC_ONE_EURO
    scale_policy: ScalePolicy = ScalePolicy.DIRECT

    def clamped(self) -> "FilterConfig":
        """Return a copy with every value forced into its valid domain."""
        defaults = FilterConfig()

        min_cutoff = max(MIN_CUTOFF_FLOOR, _finite_or(float(self.min_cutoff), defaults.min_cutoff))
        beta = max(0.0, _finite_or(float(self.beta), defaults.beta))
        d_cutoff = max(D_CUTOFF_FLOOR, _finite_or(float(self.d_cutoff), defaults.d_cutoff))
        alpha_min = min(1.0, max(ALPHA_FLOOR, _finite_or(float(self.alpha_min), defaults.alpha_min)))
        alpha_max = min(1.0, max(alpha_min, _finite_or(float(self.alpha_max), defaults.alpha_max)))
        overscan = max(1.0, _finite_or(float(self.overscan), defaults.overscan))

        result = replace(
            self,
            min_cutoff=min_cutoff,
            beta=beta,
            d_cutoff=d_cutoff,
            alpha_min=alpha_min,
            alpha_max=alpha_max,
            overscan=overscan,
            smoothing_enabled=_coerce("smoothing_enabled", self.smoothing_enabled),
            variant=_enum_or("variant", self.variant, defaults.variant),
            scale_policy=_enum_or("scale_policy", self.scale_policy, defaults.scale_policy),
        )

        for f in fields(self):
            before, after = getattr(self, f.name), getattr(result, f.name)
            if before != after:
                logger.warning("Clamped %s from %r to %r", f.name, before, after)

        return result

    def to_dict(self) -> dict:
        """Convert to dictionary using the persisted key names."""
        return {
            "minCutoff": self.min_cutoff,
            "beta": self.beta,
            "dCutoff": self.d_cutoff,
            "alphaMin": self.alpha_min,
            "alphaMax": self.alpha_max,
            "overscan": self.overscan,
            "smoothingEnabled": self.smoothing_enabled,
            "variant": self.variant.name,
            "scalePolicy": self.scale_policy.name,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "FilterConfig":
        """
        Create from dictionary.

        Accepts persisted camelCase keys, legacy tuning-panel keys and field
        names. Unknown keys are ignored; unparsable values keep their
        default. The result is clamped.
        """
        field_names = {f.name for f in fields(cls)}
        values: dict[str, Any] = {}

        for key, value in data.items():
            name = _KEY_ALIASES.get(key, key)
            if name not in field_names:
                continue
            try:
                values[name] = _coerce(name, value)
            except (KeyError, TypeError, ValueError):
                logger.warning("Ignoring invalid value for %s: %r", key, value)

        return cls(**values).clamped()

    @classmethod
    def from_yaml(cls, path: Path) -> "FilterConfig":
        """Load configuration from YAML file."""
        with open(path, "r") as f:
            data = yaml.safe_load(f) or {}

        if "filter" in data:
            data = data["filter"]

        return cls.from_dict(data)

    def to_yaml(self, path: Path) -> None:
        """Save configuration to YAML file."""
        with open(path, "w") as f:
            yaml.dump({"filter": self.to_dict()}, f, default_flow_style=False, sort_keys=False)


def _member_name(value: Any) -> str:
    return str(value).strip().upper().replace("-", "_")


def _coerce(name: str, value: Any) -> Any:
    if name == "variant":
        return value if isinstance(value, FilterVariant) else FilterVariant[_member_name(value)]
    if name == "scale_policy":
        return value if isinstance(value, ScalePolicy) else ScalePolicy[_member_name(value)]
    if name == "smoothing_enabled":
        if isinstance(value, str):
            return value.strip().lower() in ("1", "true", "yes", "on")
        return bool(value)
    if isinstance(value, bool):
        raise TypeError(f"Expected a number for {name}")
    return float(value)


def _enum_or(name: str, value: Any, default: Enum) -> Enum:
    try:
        return _coerce(name, value)
    except KeyError:
        logger.warning("Unknown %s %r, using %s", name, value, default.name)
        return default


class Settings:
    """
    Settings store for the smoothing core.

    Holds the current FilterConfig and hands out snapshots. Updates may come
    from another thread (a tuning UI, a file watcher); each update swaps in a
    complete new config under a lock, so readers only ever see whole
    configurations.
    """

    DEFAULT_CONFIG_PATH = Path.home() / ".posesmooth" / "config.json"

    def __init__(
        self,
        config_path: Optional[Path] = None,
        config: Optional[FilterConfig] = None,
    ):
        """Initialize settings with optional custom config path."""
        self.config_path = Path(config_path) if config_path else self.DEFAULT_CONFIG_PATH

        self._lock = threading.Lock()
        self._config = (config or FilterConfig()).clamped()
        self._stamp: Tuple[int, int] = (0, -1)  # (mtime_ns, size)

        # Load existing settings if available
        if config is None:
            self.load()

    def snapshot(self) -> FilterConfig:
        """Current configuration; never partially updated."""
        with self._lock:
            return self._config

    def update(self, **changes) -> FilterConfig:
        """
        Replace selected fields and publish the clamped result.

        Raises:
            TypeError: If a keyword is not a FilterConfig field
        """
        with self._lock:
            self._config = replace(self._config, **changes).clamped()
            config = self._config
        logger.debug("Settings updated: %s", changes)
        return config

    def reset_to_defaults(self):
        """Reset all settings to defaults."""
        with self._lock:
            self._config = FilterConfig()

    def load(self) -> bool:
        """Load settings from file. Returns True if successful."""
        if not self.config_path.exists():
            return False

        try:
            with open(self.config_path, 'r') as f:
                data = json.load(f)
            stat = self.config_path.stat()
        except (OSError, ValueError) as e:
            logger.warning("Could not load settings from %s: %s", self.config_path, e)
            return False

        if not isinstance(data, dict):
            logger.warning("Ignoring settings file %s: expected a JSON object", self.config_path)
            return False

        config = FilterConfig.from_dict(data)
        with self._lock:
            self._config = config
            self._stamp = (stat.st_mtime_ns, stat.st_size)

        logger.info("Loaded settings from %s", self.config_path)
        return True

    def save(self) -> bool:
        """Save settings to file. Returns True if successful."""
        try:
            # Ensure directory exists
            self.config_path.parent.mkdir(parents=True, exist_ok=True)

            with open(self.config_path, 'w') as f:
                json.dump(self.snapshot().to_dict(), f, indent=2)

            stat = self.config_path.stat()
            self._stamp = (stat.st_mtime_ns, stat.st_size)
            return True
        except OSError as e:
            logger.warning("Could not save settings to %s: %s", self.config_path, e)
            return False

    def maybe_reload(self) -> bool:
        """
        Reload the settings file if it changed since the last load or save.

        Returns True when a new configuration was published. A deleted or
        malformed file keeps the current configuration.
        """
        try:
            stat = self.config_path.stat()
        except FileNotFoundError:
            return False

        stamp = (stat.st_mtime_ns, stat.st_size)
        if stamp == self._stamp:
            return False

        # A malformed file is reported once per change
        self._stamp = stamp
        return self.load()
