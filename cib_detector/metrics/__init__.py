"""
PROJECT:
-------
CIB-coordinated-behavior-detection

TITLE:
------
__init__.py (metrics module)

MAIN OBJECTIVE:
---------------
This script initializes the metrics module, exposing dataset statistics, network summary
metrics and Louvain community detection.

Dependencies:
-------------
- cib_detector.metrics.dataset_statistics
- cib_detector.metrics.network_metrics
- cib_detector.metrics.community_detection

MAIN FEATURES:
--------------
1) Exports DatasetStatistics and compute_dataset_statistics
2) Exports NetworkMetricsCalculator and NetworkSummary
3) Exports LouvainCommunityDetector and adaptive_min_cluster_size

Author:
-------
Antoine Lemor
"""

from cib_detector.metrics.dataset_statistics import (
    DistributionStats,
    DatasetStatistics,
    compute_dataset_statistics
)
from cib_detector.metrics.network_metrics import (
    NetworkMetricsCalculator,
    NetworkSummary,
    build_simple_graph
)
from cib_detector.metrics.community_detection import (
    LouvainCommunityDetector,
    adaptive_min_cluster_size,
    build_weighted_graph
)

__all__ = [
    'DistributionStats',
    'DatasetStatistics',
    'compute_dataset_statistics',
    'NetworkMetricsCalculator',
    'NetworkSummary',
    'build_simple_graph',
    'LouvainCommunityDetector',
    'adaptive_min_cluster_size',
    'build_weighted_graph'
]
