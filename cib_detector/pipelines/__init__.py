"""
PROJECT:
-------
CIB-coordinated-behavior-detection

TITLE:
------
__init__.py (pipelines module)

MAIN OBJECTIVE:
---------------
This script initializes the pipelines module, exposing the detection pipeline and the graph
annotation pipeline.

Dependencies:
-------------
- cib_detector.pipelines.cib_pipeline
- cib_detector.pipelines.graph_pipeline

MAIN FEATURES:
--------------
1) Exports CIBPipeline, CIBResults and run_cib_pipeline
2) Exports analyze_graph and GraphAnalysis

Author:
-------
Antoine Lemor
"""

from cib_detector.pipelines.cib_pipeline import CIBPipeline, CIBResults, count_indicators, run_cib_pipeline
from cib_detector.pipelines.graph_pipeline import GraphAnalysis, analyze_graph, match_risk_record

__all__ = [
    'CIBPipeline',
    'CIBResults',
    'count_indicators',
    'run_cib_pipeline',
    'GraphAnalysis',
    'analyze_graph',
    'match_risk_record'
]
