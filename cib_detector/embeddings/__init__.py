"""
PROJECT:
-------
CIB-coordinated-behavior-detection

TITLE:
------
__init__.py (embeddings module)

MAIN OBJECTIVE:
---------------
This script initializes the embeddings module, exposing the provider interface, its adapters
and the fingerprinted embedding cache.

Dependencies:
-------------
- cib_detector.embeddings.provider
- cib_detector.embeddings.cache

MAIN FEATURES:
--------------
1) Exports EmbeddingProvider, CallableEmbeddingProvider, SentenceTransformerProvider
2) Exports EmbeddingCache and dataset_fingerprint

Author:
-------
Antoine Lemor
"""

from cib_detector.embeddings.provider import (
    EmbeddingProvider,
    CallableEmbeddingProvider,
    SentenceTransformerProvider,
    as_provider
)
from cib_detector.embeddings.cache import EmbeddingCache, CacheStats, dataset_fingerprint

__all__ = [
    'EmbeddingProvider',
    'CallableEmbeddingProvider',
    'SentenceTransformerProvider',
    'as_provider',
    'EmbeddingCache',
    'CacheStats',
    'dataset_fingerprint'
]
