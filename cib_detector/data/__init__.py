"""
PROJECT:
-------
CIB-coordinated-behavior-detection

TITLE:
------
__init__.py (data module)

MAIN OBJECTIVE:
---------------
This script initializes the data module, exposing the NDJSON connector and the processor
that turns validated posts into per-user aggregates.

Dependencies:
-------------
- cib_detector.data.connector
- cib_detector.data.processor

MAIN FEATURES:
--------------
1) Exports NDJSONConnector and DatasetSummary
2) Exports DataProcessor and filter_posts

Author:
-------
Antoine Lemor
"""

from cib_detector.data.connector import NDJSONConnector, DatasetSummary, IngestBatch
from cib_detector.data.processor import DataProcessor, filter_posts

__all__ = [
    'NDJSONConnector',
    'DatasetSummary',
    'IngestBatch',
    'DataProcessor',
    'filter_posts'
]
