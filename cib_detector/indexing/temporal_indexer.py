"""
PROJECT:
-------
CIB-coordinated-behavior-detection

TITLE:
------
temporal_indexer.py

MAIN OBJECTIVE:
---------------
This script creates time-bucketed indices of post timestamps so that pairwise temporal
comparisons only happen between users active in the same window.

Dependencies:
-------------
- typing
- collections
- logging

MAIN FEATURES:
--------------
1) Buckets of width W keyed by floor(timestamp / W)
2) Each post also inserted into both adjacent buckets (boundary pairs)
3) Per-bucket user lists for candidate pair generation

Author:
-------
Antoine Lemor
"""

from typing import Dict, List, Any, Iterator, Tuple
from collections import defaultdict
import logging

from cib_detector.indexing.base_indexer import AbstractIndexer
from cib_detector.core.models import UserAggregate

logger = logging.getLogger(__name__)


class TemporalBucketIndexer(AbstractIndexer):
    """
    Index of {bucket_key: {user_id: [timestamps]}}.
    """

    def __init__(self):
        """Initialize temporal bucket indexer."""
        super().__init__(name="TemporalBucketIndexer")
        self.window = None

    def build_index(self, data: Dict[str, UserAggregate], **kwargs) -> Dict[int, Dict[str, List[int]]]:
        """
        Build bucket index from user aggregates.

        Args:
            data: UserAggregate per user id
            window: Bucket width in seconds (required, > 0)
        """
        window = kwargs.get('window')
        if not window or window <= 0:
            raise ValueError(f"Bucket window must be positive, got {window}")
        self.window = window

        index: Dict[int, Dict[str, List[int]]] = defaultdict(lambda: defaultdict(list))
        n_entries = 0

        for user_id, user in data.items():
            for ts in user.timestamps:
                key = ts // window
                for offset in (-1, 0, 1):
                    index[key + offset][user_id].append(ts)
                n_entries += 1

        self.index = {key: dict(users) for key, users in index.items()}
        self._mark_built(n_entries)
        return self.index

    def query_index(self, criteria: Dict[str, Any]) -> List[str]:
        """Users present in the bucket containing ``criteria['timestamp']``."""
        if self.window is None:
            return []
        key = criteria['timestamp'] // self.window
        return list(self.index.get(key, {}).keys())

    def iter_buckets(self) -> Iterator[Tuple[int, List[str]]]:
        """Yield (bucket_key, user_ids) in ascending key order."""
        for key in sorted(self.index):
            yield key, list(self.index[key].keys())
