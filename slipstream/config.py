# slipstream/config.py
import logging
import tomllib
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Union

from .errors import ConfigurationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SlipstreamSettings:
    data_path: Path = Path("data.txt")
    # platoon discovery limits, measured from the equipped vehicle
    max_total_distance_m: float = 120.0
    max_gap_m: float = 20.0
    # pick the smallest (gaps, ratios) signature instead of falling back to 1.0 on ties
    tie_break: bool = False

    def __post_init__(self):
        object.__setattr__(self, "data_path", Path(self.data_path))
        for name in ("max_total_distance_m", "max_gap_m"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ConfigurationError(f"'{name}' must be a number, got {value!r}")
            if value <= 0:
                raise ConfigurationError(f"'{name}' must be positive, got {value}")
            object.__setattr__(self, name, float(value))
        if not isinstance(self.tie_break, bool):
            raise ConfigurationError(f"'tie_break' must be a boolean, got {self.tie_break!r}")


def settings_from_mapping(values: Dict[str, Any], base_dir: Union[str, Path, None] = None) -> SlipstreamSettings:
    known = {f.name for f in fields(SlipstreamSettings)}
    unknown = sorted(set(values) - known)
    if unknown:
        raise ConfigurationError(f"Unknown slipstream settings: {', '.join(unknown)}")

    values = dict(values)
    if "data_path" in values and base_dir is not None:
        data_path = Path(values["data_path"])
        if not data_path.is_absolute():
            values["data_path"] = Path(base_dir) / data_path
    return SlipstreamSettings(**values)


def load_settings(path: Union[str, Path]) -> SlipstreamSettings:
    """
    Load the `[slipstream]` table of a TOML file. Relative data paths are
    resolved against the file's directory; a missing file yields the defaults.
    """
    path = Path(path)
    if not path.exists():
        logger.info("Settings file %s not found, using defaults", path)
        return SlipstreamSettings()

    try:
        with path.open("rb") as f:
            document = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigurationError(f"Invalid settings file {path}: {e}") from e

    table = document.get("slipstream", {})
    if not isinstance(table, dict):
        raise ConfigurationError(f"'slipstream' in {path} must be a table")
    return settings_from_mapping(table, base_dir=path.parent)
