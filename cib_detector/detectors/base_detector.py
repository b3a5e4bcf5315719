"""
PROJECT:
-------
CIB-coordinated-behavior-detection

TITLE:
------
base_detector.py

MAIN OBJECTIVE:
---------------
This script provides the abstract base class for all CIB detectors and the per-run detection
context they read from, ensuring consistent interfaces and no shared mutable state between runs.

Dependencies:
-------------
- abc
- typing
- dataclasses
- logging
- time

MAIN FEATURES:
--------------
1) Immutable per-run detection context (posts, user aggregates, dataset statistics)
2) Abstract interface for detection algorithms
3) Cooperative async entry point shared by sync and async detectors
4) Performance tracking per detector

Author:
-------
Antoine Lemor
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Any, Tuple
import logging
import time

from cib_detector.core.config import DetectorConfig
from cib_detector.core.models import Post, UserAggregate, DetectorFinding
from cib_detector.core.exceptions import DetectionError
from cib_detector.data.processor import DataProcessor
from cib_detector.metrics.dataset_statistics import DatasetStatistics, compute_dataset_statistics


@dataclass
class DetectionContext:
    """
    Snapshot of one detection run.
    Detectors read from it and never mutate it.
    """

    posts: Tuple[Post, ...]
    users: Dict[str, UserAggregate]
    statistics: DatasetStatistics
    config: DetectorConfig = field(default_factory=DetectorConfig)

    # Metadata for tracking
    metadata: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def build(cls, posts, config: Optional[DetectorConfig] = None) -> 'DetectionContext':
        """
        Build a fresh context from filtered posts.

        Args:
            posts: Filtered posts (copied into an immutable tuple)
            config: Optional configuration override
        """
        config = config or DetectorConfig()
        snapshot = tuple(posts)
        users = DataProcessor(config).build_user_aggregates(snapshot)
        return cls(
            posts=snapshot,
            users=users,
            statistics=compute_dataset_statistics(users),
            config=config,
            metadata={'n_posts': len(snapshot), 'n_users': len(users)}
        )

    def usernames(self) -> Dict[str, str]:
        """Display name per user id, for reason strings."""
        return {uid: user.display_name for uid, user in self.users.items()}


class BaseDetector(ABC):
    """
    Abstract base class for all CIB detectors.

    A detector reads the context, returns a list of findings and
    holds no state that outlives a call.
    """

    name = 'base'

    def __init__(self, config: Optional[DetectorConfig] = None):
        """
        Initialize base detector.

        Args:
            config: Optional configuration override (defaults to the context's)
        """
        self.config = config
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")
        self._performance_stats = {
            'detections': 0,
            'computation_time': 0.0
        }

    def get_config(self, context: DetectionContext) -> DetectorConfig:
        return self.config or context.config

    @abstractmethod
    def detect(self, context: DetectionContext) -> List[DetectorFinding]:
        """
        Main detection method to be implemented by subclasses.

        Returns:
            List of findings
        """
        pass

    async def run(self, context: DetectionContext) -> List[DetectorFinding]:
        """Run the detector; synchronous detectors complete without suspending."""
        start = time.time()
        findings = self.detect(context)
        self._record(findings, start)
        return findings

    def _record(self, findings: List[DetectorFinding], start: float) -> None:
        if not isinstance(findings, list):
            raise DetectionError(
                f"Detector {self.name} returned {type(findings).__name__} instead of a list of findings"
            )
        elapsed = time.time() - start
        self._performance_stats['detections'] += len(findings)
        self._performance_stats['computation_time'] += elapsed
        self.logger.info(f"{self.name}: {len(findings)} finding(s) in {elapsed:.2f}s")

    def get_performance_stats(self) -> Dict[str, Any]:
        return dict(self._performance_stats)
