"""
PROJECT:
-------
CIB-coordinated-behavior-detection

TITLE:
------
cib_pipeline.py

MAIN OBJECTIVE:
---------------
This script orchestrates a complete coordinated-behavior detection run: filtering posts,
building the per-run context, running every detector in isolation, fusing findings into
per-user risk scores and packaging the results for reporting.

Dependencies:
-------------
- asyncio
- typing
- dataclasses
- datetime
- collections
- pandas
- logging
- time
- traceback
- uuid

MAIN FEATURES:
--------------
1) Async orchestration with a blocking run_sync() wrapper
2) Detector failures isolated and surfaced as warnings
3) Risk fusion over all findings
4) Indicator counts per detector family
5) Results export as dict or pandas DataFrame

Author:
-------
Antoine Lemor
"""

import asyncio
from typing import Dict, List, Optional, Any, Iterable, Union
from dataclasses import dataclass, field
from datetime import datetime
from collections import OrderedDict
import logging
import time
import traceback
import uuid

import pandas as pd

from cib_detector.core.config import DetectorConfig
from cib_detector.core.constants import (
    SYNCHRONIZED, RARE_HASHTAGS, SIMILAR_USERNAMES, HIGH_VOLUME, TEMPORAL_BURST,
    REGULAR_RHYTHM, NIGHT_ACTIVITY, SEMANTIC_DUPLICATE, TEMPLATE_CAPTION, CREATION_CLUSTER
)
from cib_detector.core.exceptions import ValidationError
from cib_detector.core.models import Post, RiskRecord, DetectorFinding
from cib_detector.data.connector import NDJSONConnector
from cib_detector.data.processor import filter_posts
from cib_detector.detectors import default_detectors
from cib_detector.detectors.base_detector import BaseDetector, DetectionContext
from cib_detector.detectors.risk_fusion import RiskFusionEngine
from cib_detector.detectors.semantic_detector import SemanticSimilarityDetector
from cib_detector.embeddings.cache import EmbeddingCache
from cib_detector.metrics.dataset_statistics import DatasetStatistics
from cib_detector.utils.progress_tracker import ProgressReporter

logger = logging.getLogger(__name__)


@dataclass
class CIBResults:
    """
    Complete results of one detection run.
    """
    # Execution metadata
    pipeline_id: str
    execution_timestamp: datetime
    execution_duration: float  # seconds
    config_used: DetectorConfig

    # Data
    n_posts: int
    n_users: int
    statistics: Optional[DatasetStatistics]
    usernames: Dict[str, str]

    # Detection
    findings: Dict[str, List[DetectorFinding]]
    risk_records: Dict[str, RiskRecord]
    indicators: Dict[str, int]

    # Soft failures ({'detector', 'error'})
    warnings: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def suspicious_users(self) -> List[str]:
        return list(self.risk_records.keys())

    def get_score(self, user_id: str) -> int:
        record = self.risk_records.get(user_id)
        return record.score if record else 0

    def get_reasons(self, user_id: str) -> List[str]:
        record = self.risk_records.get(user_id)
        return list(record.reasons) if record else []

    def top_users(self, n: int = 10) -> List[RiskRecord]:
        """Highest scores first; ties keep detection order."""
        return sorted(self.risk_records.values(), key=lambda r: r.score, reverse=True)[:n]

    def get_summary(self) -> Dict[str, Any]:
        """Get summary of detection results."""
        scores = [r.score for r in self.risk_records.values()]
        return {
            'pipeline_id': self.pipeline_id,
            'execution': {
                'timestamp': self.execution_timestamp.isoformat(),
                'duration_seconds': self.execution_duration
            },
            'data': {'posts': self.n_posts, 'users': self.n_users},
            'suspicious_users': len(self.risk_records),
            'indicators': dict(self.indicators),
            'scores': {
                'mean': sum(scores) / len(scores) if scores else 0.0,
                'max': max(scores) if scores else 0,
                'high_risk': sum(1 for s in scores if s >= 70)
            },
            'top_users': [
                {'user_id': r.user_id, 'username': self.usernames.get(r.user_id, r.user_id), 'score': r.score}
                for r in self.top_users(5)
            ],
            'issues': {'warnings': len(self.warnings)}
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            'pipeline_id': self.pipeline_id,
            'summary': self.get_summary(),
            'statistics': self.statistics.to_dict() if self.statistics else None,
            'risk_records': [r.to_dict() for r in self.risk_records.values()],
            'warnings': list(self.warnings),
            'config': self.config_used.to_dict()
        }

    def to_frame(self) -> pd.DataFrame:
        """One row per suspicious user, highest score first."""
        rows = [{
            'user_id': r.user_id,
            'username': self.usernames.get(r.user_id, ''),
            'score': r.score,
            'n_reasons': len(r.reasons),
            'indicators': ', '.join(r.indicators),
            'reasons': ' | '.join(r.reasons)
        } for r in self.risk_records.values()]
        df = pd.DataFrame(rows, columns=['user_id', 'username', 'score', 'n_reasons', 'indicators', 'reasons'])
        if not df.empty:
            df = df.sort_values('score', ascending=False, kind='stable').reset_index(drop=True)
        return df


def count_indicators(findings: Dict[str, List[DetectorFinding]]) -> Dict[str, int]:
    """
    Indicator counts per detector family, from findings grouped by detector.

    Group indicators (identical hashtags, similar usernames) count member users;
    the others count findings.
    """
    by_indicator: Dict[str, List[DetectorFinding]] = {}
    for detector_findings in findings.values():
        for finding in detector_findings:
            by_indicator.setdefault(finding.indicator, []).append(finding)

    def n(indicator: str) -> int:
        return len(by_indicator.get(indicator, []))

    def members(indicator: str) -> int:
        return sum(len(f.members) for f in by_indicator.get(indicator, []))

    return OrderedDict([
        ('synchronized', n(SYNCHRONIZED)),
        ('identical_hashtags', members(RARE_HASHTAGS)),
        ('similar_usernames', members(SIMILAR_USERNAMES)),
        ('high_volume', n(HIGH_VOLUME)),
        ('temporal_bursts', n(TEMPORAL_BURST)),
        ('regular_rhythm', n(REGULAR_RHYTHM)),
        ('night_activity', n(NIGHT_ACTIVITY)),
        ('semantic_duplicates', n(SEMANTIC_DUPLICATE)),
        ('template_captions', n(TEMPLATE_CAPTION)),
        ('duplicate_captions', n(SEMANTIC_DUPLICATE) + n(TEMPLATE_CAPTION)),
        ('account_creation_clusters', n(CREATION_CLUSTER))
    ])


class CIBPipeline:
    """
    Orchestration pipeline for coordinated inauthentic behavior detection.

    The embedding cache is the only state kept between runs.
    """

    def __init__(self, config: Optional[DetectorConfig] = None,
                 provider=None,
                 cache: Optional[EmbeddingCache] = None,
                 detectors: Optional[List[BaseDetector]] = None,
                 progress_callback=None):
        """
        Initialize pipeline.

        Args:
            config: Detector configuration (defaults to the medium preset)
            provider: Embedding provider or callable for semantic analysis
            cache: Embedding cache shared across runs
            detectors: Detector list override (defaults to every detector)
            progress_callback: Optional callable(stage, current, total)
        """
        self.config = config or DetectorConfig()
        self.config.validate()
        self.pipeline_id = str(uuid.uuid4())
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

        self.cache = cache if cache is not None else EmbeddingCache()
        self.progress = ProgressReporter(progress_callback, verbose=self.config.verbose)
        self.detectors = detectors if detectors is not None else default_detectors(
            provider=provider, cache=self.cache, progress=self.progress
        )
        self.fusion = RiskFusionEngine(self.config)

        self.results: Optional[CIBResults] = None
        self.context: Optional[DetectionContext] = None

        self.logger.info(f"CIBPipeline initialized with ID: {self.pipeline_id} "
                         f"({len(self.detectors)} detectors, sensitivity {self.config.sensitivity} "
                         f"[{self.config.sensitivity_label}])")

    def _coerce_posts(self, posts: Iterable[Union[Post, Dict]], warnings: List[Dict[str, Any]]) -> List[Post]:
        coerced = []
        skipped = 0
        for item in posts:
            if isinstance(item, Post):
                coerced.append(item)
                continue
            try:
                coerced.append(Post.from_dict(item))
            except ValidationError as e:
                skipped += 1
                self.logger.warning(f"Skipping invalid record: {e}")
        if skipped:
            warnings.append({'detector': 'ingestion', 'error': f"{skipped} invalid record(s) skipped"})
        return coerced

    async def run(self, posts: Iterable[Union[Post, Dict]],
                  min_engagement: int = 0,
                  start: Optional[int] = None,
                  end: Optional[int] = None) -> CIBResults:
        """
        Execute a complete detection run.

        Args:
            posts: Posts (or normalized records) to analyze
            min_engagement: Minimum likes + comments + shares
            start: Inclusive lower bound on create_time (epoch seconds)
            end: Inclusive upper bound on create_time (epoch seconds)

        Returns:
            CIBResults
        """
        self.logger.info("Starting CIB detection run...")
        start_time = time.time()
        warnings: List[Dict[str, Any]] = []

        # Step 1: Filter and build context
        filtered = filter_posts(self._coerce_posts(posts, warnings), min_engagement, start, end)
        context = DetectionContext.build(filtered, self.config)
        self.context = context

        with self.progress:
            # Step 2: Detectors
            findings: Dict[str, List[DetectorFinding]] = {}
            n_detectors = len(self.detectors)
            for index, detector in enumerate(self.detectors):
                self.progress.report('Running detectors', index, n_detectors)
                try:
                    findings[detector.name] = await detector.run(context)
                except Exception as e:
                    self.logger.error(f"Detector {detector.name} failed: {e}")
                    self.logger.error(traceback.format_exc())
                    warnings.append({'detector': detector.name, 'error': str(e)})
                    findings[detector.name] = []
                    continue
                warnings.extend(self._semantic_warnings(detector))
            self.progress.report('Running detectors', n_detectors, n_detectors)

            # Step 3: Fusion
            all_findings = [f for detector_findings in findings.values() for f in detector_findings]
            usernames = context.usernames()
            records = self.fusion.fuse(all_findings, usernames)

        execution_duration = time.time() - start_time
        self.results = CIBResults(
            pipeline_id=self.pipeline_id,
            execution_timestamp=datetime.now(),
            execution_duration=execution_duration,
            config_used=self.config,
            n_posts=len(context.posts),
            n_users=len(context.users),
            statistics=context.statistics,
            usernames=usernames,
            findings=findings,
            risk_records=records,
            indicators=count_indicators(findings),
            warnings=warnings
        )

        self.logger.info(f"Detection completed in {execution_duration:.2f} seconds: "
                         f"{len(records)} suspicious user(s), {len(warnings)} warning(s)")
        return self.results

    def _semantic_warnings(self, detector: BaseDetector) -> List[Dict[str, Any]]:
        if not isinstance(detector, SemanticSimilarityDetector) or not self.config.semantic_enabled:
            return []
        if detector.provider is None:
            return [{'detector': detector.name, 'error': 'No embedding provider configured'}]
        if detector.failed_users:
            return [{'detector': detector.name,
                     'error': f"{len(detector.failed_users)} caption(s) could not be embedded"}]
        return []

    def run_sync(self, posts: Iterable[Union[Post, Dict]], **filters) -> CIBResults:
        """Blocking wrapper around run()."""
        return asyncio.run(self.run(posts, **filters))


def run_cib_pipeline(data_path: str,
                     config: Optional[DetectorConfig] = None,
                     provider=None,
                     **filters) -> CIBResults:
    """
    Convenience function to run detection on an NDJSON file.

    Args:
        data_path: Path to a file of normalized records, one per line
        config: Detector configuration
        provider: Embedding provider for semantic analysis

    Returns:
        CIBResults
    """
    posts = NDJSONConnector().load_posts(data_path)
    pipeline = CIBPipeline(config, provider=provider)
    return pipeline.run_sync(posts, **filters)
