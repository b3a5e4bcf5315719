"""
PROJECT:
-------
CIB-coordinated-behavior-detection

TITLE:
------
__init__.py (core module)

MAIN OBJECTIVE:
---------------
This script initializes the core module of the CIB detector, exposing the main configuration,
models, exceptions and constants for use throughout the framework.

Dependencies:
-------------
- cib_detector.core.config
- cib_detector.core.models
- cib_detector.core.constants
- cib_detector.core.exceptions

MAIN FEATURES:
--------------
1) Exports DetectorConfig for configuration management
2) Exports all data models (Post, UserAggregate, findings, RiskRecord, graph types)
3) Exports sensitivity presets and indicator constants
4) Provides clean API for core components

Author:
-------
Antoine Lemor
"""

from cib_detector.core.config import DetectorConfig
from cib_detector.core.models import (
    Post,
    UserAggregate,
    DetectorFinding,
    SynchronizedPair,
    RareHashtagGroup,
    UsernameGroup,
    HighVolumeOutlier,
    Burst,
    RegularRhythm,
    NightActive,
    SemanticPair,
    TemplatePair,
    CreationCluster,
    RiskRecord,
    GraphNode,
    GraphLink,
    ClusterAssignment
)
from cib_detector.core.constants import (
    INDICATOR_ORDER,
    INDICATOR_WEIGHTS,
    SENSITIVITY_PRESETS,
    NOISE_CLUSTER_ID
)
from cib_detector.core.exceptions import (
    CIBDetectorError,
    ConfigurationError,
    ValidationError,
    DetectionError,
    EmbeddingError,
    GraphError
)

__all__ = [
    'DetectorConfig',
    'Post',
    'UserAggregate',
    'DetectorFinding',
    'SynchronizedPair',
    'RareHashtagGroup',
    'UsernameGroup',
    'HighVolumeOutlier',
    'Burst',
    'RegularRhythm',
    'NightActive',
    'SemanticPair',
    'TemplatePair',
    'CreationCluster',
    'RiskRecord',
    'GraphNode',
    'GraphLink',
    'ClusterAssignment',
    'INDICATOR_ORDER',
    'INDICATOR_WEIGHTS',
    'SENSITIVITY_PRESETS',
    'NOISE_CLUSTER_ID',
    'CIBDetectorError',
    'ConfigurationError',
    'ValidationError',
    'DetectionError',
    'EmbeddingError',
    'GraphError'
]
