"""
PROJECT:
-------
CIB-coordinated-behavior-detection

TITLE:
------
config.py

MAIN OBJECTIVE:
---------------
This script manages the configuration settings for the CIB detection framework, providing
centralized tunable thresholds, sensitivity presets and environment variable overrides.

Dependencies:
-------------
- os
- json
- dataclasses
- typing

MAIN FEATURES:
--------------
1) Central configuration dataclass for all detector parameters
2) Discrete sensitivity presets (1-10) selecting every threshold at once
3) Environment variable integration for flexible deployment
4) Range validation with ConfigurationError
5) JSON load/save support

Author:
-------
Antoine Lemor
"""

import os
import json
from dataclasses import dataclass, field, fields, replace
from typing import Dict, Optional, Any
from cib_detector.core.constants import *
from cib_detector.core.exceptions import ConfigurationError


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


def _env_seed() -> Optional[int]:
    value = os.getenv("CIB_RANDOM_SEED")
    return int(value) if value not in (None, '') else None


_PRESET = SENSITIVITY_PRESETS[DEFAULT_SENSITIVITY]


@dataclass
class DetectorConfig:
    """
    Central configuration for the CIB detector.
    Defaults are the medium sensitivity preset; can be overridden via
    environment variables, presets or config files.
    """

    # Sensitivity preset the thresholds were taken from (informational)
    sensitivity: int = DEFAULT_SENSITIVITY

    # Semantic similarity
    semantic_enabled: bool = field(
        default_factory=lambda: _env_bool("CIB_SEMANTIC_ENABLED", _PRESET['semantic_enabled'])
    )
    semantic_threshold: float = _PRESET['semantic_threshold']

    # Lexical thresholds
    ngram_threshold: float = _PRESET['ngram_threshold']
    username_threshold: float = _PRESET['username_threshold']
    tfidf_threshold: float = _PRESET['tfidf_threshold']

    # Statistical / behavioral thresholds
    zscore_threshold: float = _PRESET['zscore_threshold']
    burst_posts: int = _PRESET['burst_posts']
    rhythm_cv: float = _PRESET['rhythm_cv']
    night_gap: int = _PRESET['night_gap']  # seconds
    cluster_size: int = _PRESET['cluster_size']

    # Fusion
    cross_multiplier: float = _PRESET['cross_multiplier']

    # Group size thresholds
    min_sync_posts: int = _PRESET['min_sync_posts']
    min_hashtag_group_size: int = _PRESET['min_hashtag_group_size']
    min_username_group_size: int = _PRESET['min_username_group_size']
    min_high_volume_posts: int = _PRESET['min_high_volume_posts']

    # Windows (seconds)
    time_window: int = field(
        default_factory=lambda: int(os.getenv("CIB_TIME_WINDOW", str(DEFAULT_TIME_WINDOW)))
    )
    creation_window: int = DEFAULT_CREATION_WINDOW
    timezone: str = field(default_factory=lambda: os.getenv("CIB_TIMEZONE", DEFAULT_TIMEZONE))

    # Text handling
    ngram_size: int = DEFAULT_NGRAM_SIZE
    min_caption_length: int = MIN_CAPTION_LENGTH
    min_username_length: int = MIN_USERNAME_LENGTH

    # Batching
    embedding_batch_size: int = DEFAULT_EMBEDDING_BATCH_SIZE
    comparison_batch_size: int = DEFAULT_COMPARISON_BATCH_SIZE

    # Community detection
    random_seed: Optional[int] = field(default_factory=_env_seed)
    max_louvain_levels: int = DEFAULT_MAX_LOUVAIN_LEVELS

    # Risk weights per indicator
    indicator_weights: Dict[str, int] = field(default_factory=lambda: INDICATOR_WEIGHTS.copy())

    # Output
    verbose: bool = False

    @property
    def sensitivity_label(self) -> str:
        return SENSITIVITY_LABELS.get(self.sensitivity, 'Custom')

    @classmethod
    def from_sensitivity(cls, level: int, **overrides) -> 'DetectorConfig':
        """Build a config from a sensitivity preset (1-10); unknown levels fall back to 5."""
        if level not in SENSITIVITY_PRESETS:
            level = DEFAULT_SENSITIVITY
        values = dict(SENSITIVITY_PRESETS[level])
        values.update(overrides)
        return cls(sensitivity=level, **values)

    @classmethod
    def from_env(cls) -> 'DetectorConfig':
        """Build a config honoring CIB_SENSITIVITY in addition to per-field variables."""
        level = int(os.getenv("CIB_SENSITIVITY", str(DEFAULT_SENSITIVITY)))
        config = cls.from_sensitivity(level)
        config.semantic_enabled = _env_bool("CIB_SEMANTIC_ENABLED", config.semantic_enabled)
        return config

    def with_overrides(self, **overrides) -> 'DetectorConfig':
        """Return a copy with some parameters replaced."""
        known = {f.name for f in fields(self)}
        unknown = set(overrides) - known
        if unknown:
            raise ConfigurationError(f"Unknown configuration keys: {sorted(unknown)}")
        return replace(self, **overrides)

    def validate(self) -> bool:
        """Validate configuration consistency."""
        for name in ('semantic_threshold', 'ngram_threshold', 'username_threshold'):
            value = getattr(self, name)
            if not 0 <= value <= 1:
                raise ConfigurationError(f"{name} must be in [0, 1], got {value}")

        for name in ('burst_posts', 'cluster_size', 'min_sync_posts', 'min_hashtag_group_size',
                     'min_username_group_size', 'min_high_volume_posts', 'ngram_size',
                     'embedding_batch_size', 'comparison_batch_size', 'max_louvain_levels'):
            value = getattr(self, name)
            if value < 1:
                raise ConfigurationError(f"{name} must be >= 1, got {value}")

        for name in ('time_window', 'creation_window', 'night_gap'):
            value = getattr(self, name)
            if value <= 0:
                raise ConfigurationError(f"{name} must be a positive number of seconds, got {value}")

        if self.rhythm_cv < 0 or self.cross_multiplier < 0 or self.tfidf_threshold < 0:
            raise ConfigurationError("rhythm_cv, cross_multiplier and tfidf_threshold must be >= 0")

        missing = set(INDICATOR_ORDER) - set(self.indicator_weights)
        if missing:
            raise ConfigurationError(f"Missing indicator weights: {sorted(missing)}")

        return True

    def detection_params(self) -> Dict[str, Any]:
        """Parameters that change detection output (used for cache fingerprints)."""
        return {
            'semantic_threshold': self.semantic_threshold,
            'min_caption_length': self.min_caption_length,
        }

    def to_dict(self) -> Dict:
        """Convert config to dictionary."""
        return {
            'sensitivity': self.sensitivity,
            'semantic': {
                'enabled': self.semantic_enabled,
                'threshold': self.semantic_threshold,
                'embedding_batch_size': self.embedding_batch_size,
                'comparison_batch_size': self.comparison_batch_size
            },
            'lexical': {
                'ngram_threshold': self.ngram_threshold,
                'ngram_size': self.ngram_size,
                'username_threshold': self.username_threshold,
                'tfidf_threshold': self.tfidf_threshold,
                'min_caption_length': self.min_caption_length,
                'min_username_length': self.min_username_length
            },
            'behavioral': {
                'zscore_threshold': self.zscore_threshold,
                'burst_posts': self.burst_posts,
                'rhythm_cv': self.rhythm_cv,
                'night_gap': self.night_gap,
                'cluster_size': self.cluster_size
            },
            'groups': {
                'min_sync_posts': self.min_sync_posts,
                'min_hashtag_group_size': self.min_hashtag_group_size,
                'min_username_group_size': self.min_username_group_size,
                'min_high_volume_posts': self.min_high_volume_posts
            },
            'windows': {
                'time_window': self.time_window,
                'creation_window': self.creation_window,
                'timezone': self.timezone
            },
            'fusion': {
                'cross_multiplier': self.cross_multiplier,
                'indicator_weights': dict(self.indicator_weights)
            },
            'community': {
                'random_seed': self.random_seed,
                'max_louvain_levels': self.max_louvain_levels
            }
        }

    @classmethod
    def from_file(cls, path: str) -> 'DetectorConfig':
        """Load configuration from a flat JSON file of field values."""
        with open(path, 'r') as f:
            data = json.load(f)
        level = data.pop('sensitivity', None)
        if level is not None:
            return cls.from_sensitivity(int(level), **data)
        return cls(**data)

    def save(self, path: str) -> None:
        """Save configuration to a flat JSON file."""
        data = {f.name: getattr(self, f.name) for f in fields(self)}
        with open(path, 'w') as f:
            json.dump(data, f, indent=2)
