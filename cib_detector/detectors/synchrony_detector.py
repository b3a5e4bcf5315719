"""
PROJECT:
-------
CIB-coordinated-behavior-detection

TITLE:
------
synchrony_detector.py

MAIN OBJECTIVE:
---------------
This script detects pairs of users who repeatedly post within a shared time window, comparing
only users that share a time bucket instead of every user pair.

Dependencies:
-------------
- bisect
- typing

MAIN FEATURES:
--------------
1) Time-bucketed candidate generation (current and adjacent buckets)
2) Exact synchronized post-pair count per user pair
3) Canonical sorted pair keys so each pair is scored once

Author:
-------
Antoine Lemor
"""

from bisect import bisect_left, bisect_right
from typing import List, Set, Tuple

from cib_detector.detectors.base_detector import BaseDetector, DetectionContext
from cib_detector.indexing.temporal_indexer import TemporalBucketIndexer
from cib_detector.core.models import SynchronizedPair


def count_synchronized_posts(times_a: List[int], times_b: List[int], window: int) -> int:
    """
    Number of (a, b) post pairs with |ta - tb| < window.

    Both lists must be sorted.
    """
    count = 0
    for ta in times_a:
        lo = bisect_right(times_b, ta - window)
        hi = bisect_left(times_b, ta + window)
        count += hi - lo
    return count


class SynchronyDetector(BaseDetector):
    """
    Synchronized posting between user pairs.
    """

    name = 'synchronized'

    def detect(self, context: DetectionContext) -> List[SynchronizedPair]:
        config = self.get_config(context)
        window = config.time_window

        indexer = TemporalBucketIndexer()
        indexer.build_index(context.users, window=window)

        processed: Set[Tuple[str, str]] = set()
        findings = []

        for _, user_ids in indexer.iter_buckets():
            for i in range(len(user_ids)):
                for j in range(i + 1, len(user_ids)):
                    u1, u2 = user_ids[i], user_ids[j]
                    pair = (u1, u2) if u1 < u2 else (u2, u1)
                    if pair in processed:
                        continue
                    processed.add(pair)

                    count = count_synchronized_posts(
                        context.users[pair[0]].timestamps,
                        context.users[pair[1]].timestamps,
                        window
                    )
                    if count >= config.min_sync_posts:
                        self.logger.debug(f"Synchronized pair {pair[0]} <-> {pair[1]}: {count} posts")
                        findings.append(SynchronizedPair(pair[0], pair[1], count=count))

        self.logger.debug(f"Compared {len(processed)} candidate pairs")
        return findings
