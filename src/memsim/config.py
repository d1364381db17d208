"""Simulator configuration — frame count and address-space size.

The defaults reproduce the classroom setup: a small clock ring of four
frames and a 5000-byte address space for segmentation.  A session can
instead start from a JSON file::

    {"frames": 3, "memory_size": 8000}

Missing keys fall back to the defaults, so a file only needs to name
what it changes.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from pathlib import Path

DEFAULT_FRAMES = 4
DEFAULT_MEMORY_SIZE = 5000


class ConfigError(ValueError):
    """Raise when a configuration file is unreadable or holds bad values."""


@dataclass(frozen=True)
class SimulatorConfig:
    """Settings both engines are built from.

    Attributes:
        frames: Number of frames in the clock ring.
        memory_size: Total addressable bytes for segmentation.

    """

    frames: int = DEFAULT_FRAMES
    memory_size: int = DEFAULT_MEMORY_SIZE

    def __post_init__(self) -> None:
        """Reject non-positive or non-integer settings."""
        for field_name in ("frames", "memory_size"):
            value = getattr(self, field_name)
            if isinstance(value, bool) or not isinstance(value, int) or value < 1:
                msg = f"{field_name} must be a positive integer (got {value!r})"
                raise ConfigError(msg)

    def to_dict(self) -> dict[str, int]:
        """Return the settings as a JSON-ready dict."""
        return {"frames": self.frames, "memory_size": self.memory_size}


def load_config(path: Path) -> SimulatorConfig:
    """Load a configuration from a JSON file.

    Args:
        path: Location of the JSON file.

    Returns:
        The parsed configuration.

    Raises:
        ConfigError: If the file cannot be read, is not a JSON object,
            or holds invalid values.

    """
    try:
        data: Any = json.loads(path.read_text())
    except (OSError, json.JSONDecodeError) as e:
        msg = f"Cannot load config: {e}"
        raise ConfigError(msg) from e

    if not isinstance(data, dict):
        msg = f"Cannot load config: expected a JSON object in {path}"
        raise ConfigError(msg)

    return SimulatorConfig(
        frames=data.get("frames", DEFAULT_FRAMES),
        memory_size=data.get("memory_size", DEFAULT_MEMORY_SIZE),
    )
