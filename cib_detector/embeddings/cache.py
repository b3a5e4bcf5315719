"""
PROJECT:
-------
CIB-coordinated-behavior-detection

TITLE:
------
cache.py

MAIN OBJECTIVE:
---------------
This script keeps caption embeddings between detection runs, at two levels: individual text
vectors and complete user-to-vector maps bound to a dataset fingerprint, so a rerun on the
same filtered data skips the embedding model entirely.

Dependencies:
-------------
- hashlib
- json
- collections
- dataclasses
- typing
- logging
- numpy

MAIN FEATURES:
--------------
1) Dataset fingerprint (MD5 over post identity and detection parameters)
2) Per-text vector store with oldest-first eviction
3) Per-fingerprint store of user -> vector maps
4) Full invalidation when a different dataset is bound
5) Hit/miss statistics

Author:
-------
Antoine Lemor
"""

import hashlib
import json
from collections import OrderedDict
from dataclasses import dataclass
from typing import Dict, Iterable, Optional, Any
import logging

import numpy as np

from cib_detector.core.models import Post
from cib_detector.core.constants import DEFAULT_EMBEDDING_CACHE_ENTRIES

logger = logging.getLogger(__name__)


def dataset_fingerprint(posts: Iterable[Post], params: Optional[Dict[str, Any]] = None) -> str:
    """
    MD5 fingerprint of a filtered dataset.

    Covers every post's id, author, timestamp and caption plus the
    parameters that change which captions get embedded.
    """
    digest = hashlib.md5()
    for post in posts:
        key = f"{post.post_id}|{post.author_id}|{post.create_time}|{post.caption}\n"
        digest.update(key.encode('utf-8'))
    digest.update(json.dumps(params or {}, sort_keys=True).encode('utf-8'))
    return digest.hexdigest()


@dataclass
class CacheStats:
    hits: int = 0
    misses: int = 0
    evictions: int = 0
    invalidations: int = 0

    def hit_rate(self) -> Optional[float]:
        total = self.hits + self.misses
        return self.hits / total if total else None


class EmbeddingCache:
    """
    Two-level embedding cache.

    Text vectors are shared across users with identical captions; user maps
    let an unchanged dataset reuse the whole previous result. Both stores are
    cleared whenever a new fingerprint is bound.
    """

    def __init__(self, max_entries: int = DEFAULT_EMBEDDING_CACHE_ENTRIES):
        if max_entries < 1:
            raise ValueError(f"max_entries must be >= 1, got {max_entries}")
        self.max_entries = max_entries
        self.fingerprint: Optional[str] = None
        self._texts: 'OrderedDict[str, np.ndarray]' = OrderedDict()
        self._user_maps: Dict[str, Dict[str, np.ndarray]] = {}
        self.stats = CacheStats()

    def bind(self, fingerprint: str) -> bool:
        """
        Bind the cache to a dataset.

        Returns:
            True if the fingerprint was already bound (cache kept),
            False if the cache was invalidated.
        """
        if fingerprint == self.fingerprint:
            return True
        if self.fingerprint is not None:
            logger.debug(f"Dataset fingerprint changed ({self.fingerprint[:8]} -> {fingerprint[:8]}), "
                         f"invalidating embedding cache")
            self.stats.invalidations += 1
        self.clear()
        self.fingerprint = fingerprint
        return False

    def get_text(self, text: str) -> Optional[np.ndarray]:
        vector = self._texts.get(text)
        if vector is None:
            self.stats.misses += 1
        else:
            self.stats.hits += 1
        return vector

    def put_text(self, text: str, vector) -> None:
        if text in self._texts:
            self._texts.move_to_end(text)
        self._texts[text] = np.asarray(vector, dtype=float)
        while len(self._texts) > self.max_entries:
            self._texts.popitem(last=False)
            self.stats.evictions += 1

    def get_user_map(self, fingerprint: Optional[str] = None) -> Optional[Dict[str, np.ndarray]]:
        """User -> vector map for the bound (or given) fingerprint."""
        key = fingerprint or self.fingerprint
        if key is None or key != self.fingerprint:
            return None
        user_map = self._user_maps.get(key)
        if user_map is not None:
            self.stats.hits += 1
        return user_map

    def put_user_map(self, user_map: Dict[str, np.ndarray], fingerprint: Optional[str] = None) -> None:
        key = fingerprint or self.fingerprint
        if key is None:
            raise ValueError("No dataset fingerprint bound")
        if key != self.fingerprint:
            self.bind(key)
        self._user_maps[key] = dict(user_map)

    def clear(self) -> None:
        self._texts.clear()
        self._user_maps.clear()

    def __len__(self) -> int:
        return len(self._texts)

    def get_statistics(self) -> Dict[str, Any]:
        return {
            'fingerprint': self.fingerprint,
            'texts': len(self._texts),
            'max_entries': self.max_entries,
            'user_maps': len(self._user_maps),
            'hits': self.stats.hits,
            'misses': self.stats.misses,
            'evictions': self.stats.evictions,
            'invalidations': self.stats.invalidations,
            'hit_rate': self.stats.hit_rate()
        }
