"""
PROJECT:
-------
CIB-coordinated-behavior-detection

TITLE:
------
__init__.py (indexing module)

MAIN OBJECTIVE:
---------------
This script initializes the indexing module, exposing the abstract indexer and the temporal
bucket index used by the synchrony detector.

Dependencies:
-------------
- cib_detector.indexing.base_indexer
- cib_detector.indexing.temporal_indexer

MAIN FEATURES:
--------------
1) Exports AbstractIndexer
2) Exports TemporalBucketIndexer

Author:
-------
Antoine Lemor
"""

from cib_detector.indexing.base_indexer import AbstractIndexer
from cib_detector.indexing.temporal_indexer import TemporalBucketIndexer

__all__ = [
    'AbstractIndexer',
    'TemporalBucketIndexer'
]
