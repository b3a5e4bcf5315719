"""
PROJECT:
-------
CIB-coordinated-behavior-detection

TITLE:
------
__init__.py (detectors module)

MAIN OBJECTIVE:
---------------
This script initializes the detectors module, exposing every coordination detector, the
detection context they share and the risk fusion engine.

Dependencies:
-------------
- cib_detector.detectors.*

MAIN FEATURES:
--------------
1) Exports BaseDetector and DetectionContext
2) Exports temporal, lexical, semantic and behavioral detectors
3) Exports RiskFusionEngine
4) default_detectors() factory in reporting order

Author:
-------
Antoine Lemor
"""

from cib_detector.detectors.base_detector import BaseDetector, DetectionContext
from cib_detector.detectors.synchrony_detector import SynchronyDetector, count_synchronized_posts
from cib_detector.detectors.lexical_detectors import (
    RareHashtagDetector,
    UsernameSimilarityDetector,
    TemplateCaptionDetector,
    calculate_tfidf,
    levenshtein_distance,
    username_similarity,
    get_ngrams,
    ngram_overlap
)
from cib_detector.detectors.behavioral_detectors import (
    RhythmRegularityDetector,
    NightActivityDetector,
    BurstDetector,
    CreationClusterDetector,
    HighVolumeDetector,
    analyze_posting_rhythm,
    analyze_night_posting,
    detect_temporal_bursts,
    detect_account_creation_clusters
)
from cib_detector.detectors.semantic_detector import SemanticSimilarityDetector
from cib_detector.detectors.risk_fusion import RiskFusionEngine, format_time_window


def default_detectors(provider=None, cache=None, progress=None):
    """One instance of every detector, in reason order."""
    return [
        SynchronyDetector(),
        RareHashtagDetector(),
        UsernameSimilarityDetector(),
        HighVolumeDetector(),
        BurstDetector(),
        RhythmRegularityDetector(),
        NightActivityDetector(),
        SemanticSimilarityDetector(provider=provider, cache=cache, progress=progress),
        TemplateCaptionDetector(),
        CreationClusterDetector()
    ]


__all__ = [
    'BaseDetector',
    'DetectionContext',
    'SynchronyDetector',
    'RareHashtagDetector',
    'UsernameSimilarityDetector',
    'TemplateCaptionDetector',
    'RhythmRegularityDetector',
    'NightActivityDetector',
    'BurstDetector',
    'CreationClusterDetector',
    'HighVolumeDetector',
    'SemanticSimilarityDetector',
    'RiskFusionEngine',
    'default_detectors',
    'count_synchronized_posts',
    'calculate_tfidf',
    'levenshtein_distance',
    'username_similarity',
    'get_ngrams',
    'ngram_overlap',
    'analyze_posting_rhythm',
    'analyze_night_posting',
    'detect_temporal_bursts',
    'detect_account_creation_clusters',
    'format_time_window'
]
