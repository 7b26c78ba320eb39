# SPDX-License-Identifier: MIT OR Apache-2.0
# Copyright (c) 2025 John William Creighton (s243a)
"""
Settings - Layout, ingestion and publisher configuration.

Usage:
    from podbubble.config import load_settings

    settings = load_settings()                  # search cwd, else defaults
    settings = load_settings('podbubble.yaml')  # explicit file

    layout = settings.layout
    print(layout.iterations, layout.bounds)

YAML layout (every key optional, camelCase aliases accepted):

    seed: 7
    layout:
      iterations: 200
      repulsionStrength: 4000
      attraction_strength: 0.05
      min_distance: 80
      framePause: 0.02
      width: 400
      height: 700
    ingest:
      group_pause: 0.5
    publisher:
      min_interval: 0.016
"""

import re
from pathlib import Path
from dataclasses import dataclass, field, fields, asdict
from typing import Dict, Any, Optional, Tuple, Union
import logging

import yaml

from ..errors import ConfigError

logger = logging.getLogger(__name__)


def _snake_case(key: str) -> str:
    """repulsionStrength -> repulsion_strength"""
    return re.sub(r'(?<!^)(?=[A-Z])', '_', key).lower()


def _normalize_keys(data: Dict[str, Any]) -> Dict[str, Any]:
    return {_snake_case(str(k)): v for k, v in data.items()}


@dataclass(frozen=True)
class Bounds:
    """Axis-aligned box nodes are clamped into after every layout pass."""
    min_x: float
    max_x: float
    min_y: float
    max_y: float

    def contains(self, x: float, y: float) -> bool:
        return self.min_x <= x <= self.max_x and self.min_y <= y <= self.max_y

    def clamp(self, x: float, y: float) -> Tuple[float, float]:
        return (
            min(max(x, self.min_x), self.max_x),
            min(max(y, self.min_y), self.max_y),
        )


@dataclass
class LayoutConfig:
    """Force simulation parameters."""
    iterations: int = 200
    repulsion_strength: float = 4000.0
    attraction_strength: float = 0.05
    min_distance: float = 80.0
    frame_pause: float = 0.02  # seconds between iterations

    # Screen size and clamp margins
    width: float = 400.0
    height: float = 700.0
    margin_left: float = 50.0
    margin_right: float = 50.0
    margin_top: float = 100.0
    margin_bottom: float = 50.0

    # Box new nodes are dropped into; None derives it from width/height
    spawn_x: Optional[Tuple[float, float]] = None
    spawn_y: Optional[Tuple[float, float]] = None

    # Restart the iteration count when the graph changes mid-run
    restart_on_mutation: bool = True

    def __post_init__(self):
        if self.spawn_x is not None:
            self.spawn_x = tuple(float(v) for v in self.spawn_x)
        if self.spawn_y is not None:
            self.spawn_y = tuple(float(v) for v in self.spawn_y)
        self.validate()
        self.iterations = int(self.iterations)

    @property
    def bounds(self) -> Bounds:
        return Bounds(
            min_x=self.margin_left,
            max_x=self.width - self.margin_right,
            min_y=self.margin_top,
            max_y=self.height - self.margin_bottom,
        )

    @property
    def spawn_region(self) -> Tuple[Tuple[float, float], Tuple[float, float]]:
        """
        ((x_low, x_high), (y_low, y_high)) for new nodes. Defaults to the
        middle half of the width and 2/7..6/7 of the height (100..300 x
        200..600 on a 400x700 screen), kept inside bounds.
        """
        b = self.bounds
        x_lo, y_lo = b.clamp(self.width / 4, 2 * self.height / 7)
        x_hi, y_hi = b.clamp(3 * self.width / 4, 6 * self.height / 7)
        return self.spawn_x or (x_lo, x_hi), self.spawn_y or (y_lo, y_hi)

    def validate(self):
        """Raise ConfigError if any value is unusable."""
        if int(self.iterations) != self.iterations or self.iterations < 1:
            raise ConfigError(f"iterations must be a positive integer, got {self.iterations!r}")
        if self.min_distance <= 0:
            raise ConfigError(f"min_distance must be positive, got {self.min_distance!r}")
        if self.repulsion_strength < 0 or self.attraction_strength < 0:
            raise ConfigError("force strengths must be non-negative")
        if self.frame_pause < 0:
            raise ConfigError(f"frame_pause must be >= 0, got {self.frame_pause!r}")

        b = self.bounds
        if b.min_x > b.max_x or b.min_y > b.max_y:
            raise ConfigError(
                f"margins leave no room inside {self.width}x{self.height}: {b}"
            )

        for span, b_lo, b_hi, name in (
            (self.spawn_x, b.min_x, b.max_x, 'spawn_x'),
            (self.spawn_y, b.min_y, b.max_y, 'spawn_y'),
        ):
            if span is None:
                continue
            if len(span) != 2:
                raise ConfigError(f"{name} must be a (low, high) pair")
            lo, hi = span
            if lo > hi or lo < b_lo or hi > b_hi:
                raise ConfigError(
                    f"{name}=({lo}, {hi}) must lie within bounds [{b_lo}, {b_hi}]"
                )


@dataclass
class IngestConfig:
    """Progressive population pacing."""
    group_pause: float = 0.5

    def __post_init__(self):
        if self.group_pause < 0:
            raise ConfigError(f"group_pause must be >= 0, got {self.group_pause!r}")


@dataclass
class PublisherConfig:
    """Renderer-facing throttle."""
    min_interval: float = 1.0 / 60.0

    def __post_init__(self):
        if self.min_interval < 0:
            raise ConfigError(f"min_interval must be >= 0, got {self.min_interval!r}")


@dataclass
class Settings:
    """All configuration for one GraphModel."""
    layout: LayoutConfig = field(default_factory=LayoutConfig)
    ingest: IngestConfig = field(default_factory=IngestConfig)
    publisher: PublisherConfig = field(default_factory=PublisherConfig)
    seed: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'Settings':
        """Build settings from a (possibly camelCase) nested dict."""
        data = _normalize_keys(data or {})
        return cls(
            layout=_build(LayoutConfig, data.get('layout')),
            ingest=_build(IngestConfig, data.get('ingest')),
            publisher=_build(PublisherConfig, data.get('publisher')),
            seed=data.get('seed'),
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _build(config_cls, section: Optional[Dict[str, Any]]):
    if section is None:
        return config_cls()
    if not isinstance(section, dict):
        raise ConfigError(f"{config_cls.__name__} section must be a mapping")

    known = {f.name for f in fields(config_cls)}
    values = {}
    for key, value in _normalize_keys(section).items():
        if key not in known:
            logger.warning(f"Ignoring unknown {config_cls.__name__} option: {key}")
            continue
        values[key] = value

    try:
        return config_cls(**values)
    except TypeError as e:
        raise ConfigError(f"invalid {config_cls.__name__}: {e}") from e


# Searched in order under the working directory when no path is given
CONFIG_SEARCH_ORDER = [
    'podbubble.yaml',
    '.podbubble.yaml',
    'config/podbubble.yaml',
]


def _load_yaml_file(path: Path) -> Dict[str, Any]:
    try:
        with open(path) as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"failed to load {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"{path} must contain a mapping at top level")
    return data


def load_settings(
    path: Optional[Union[str, Path]] = None,
    search_root: Optional[Path] = None
) -> Settings:
    """
    Load settings from YAML.

    Args:
        path: Explicit config file. Missing or unreadable files raise
              ConfigError.
        search_root: Directory searched for CONFIG_SEARCH_ORDER when no
                     path is given (default: current directory).

    Returns:
        Settings, defaults when nothing is found.
    """
    if path is not None:
        path = Path(path)
        if not path.exists():
            raise ConfigError(f"config file not found: {path}")
        logger.info(f"Loading settings from {path}")
        return Settings.from_dict(_load_yaml_file(path))

    root = search_root or Path.cwd()
    for name in CONFIG_SEARCH_ORDER:
        candidate = root / name
        if candidate.exists():
            logger.info(f"Loading settings from {candidate}")
            return Settings.from_dict(_load_yaml_file(candidate))

    logger.debug("No config file found, using defaults")
    return Settings()
