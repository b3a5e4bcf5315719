"""
PROJECT:
-------
CIB-coordinated-behavior-detection

TITLE:
------
dataset_statistics.py

MAIN OBJECTIVE:
---------------
This script computes per-user post and hashtag count distributions over the filtered dataset,
used by the detectors for z-score outlier normalization.

Dependencies:
-------------
- numpy
- dataclasses
- typing
- logging

MAIN FEATURES:
--------------
1) Mean and population standard deviation of posts per user
2) Mean and population standard deviation of hashtags per user
3) Safe z-score (None when the spread is zero)

Author:
-------
Antoine Lemor
"""

from dataclasses import dataclass
from typing import Dict, Iterable, Optional
import logging

import numpy as np

from cib_detector.core.models import UserAggregate

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DistributionStats:
    """Mean and population standard deviation of a count distribution."""
    mean: float = 0.0
    std_dev: float = 0.0

    @classmethod
    def from_values(cls, values: Iterable[float]) -> 'DistributionStats':
        arr = np.asarray(list(values), dtype=float)
        if arr.size == 0:
            return cls()
        return cls(mean=float(arr.mean()), std_dev=float(arr.std()))

    def zscore(self, value: float) -> Optional[float]:
        """Z-score of ``value``; None when the standard deviation is zero."""
        if self.std_dev == 0:
            return None
        return (value - self.mean) / self.std_dev


@dataclass(frozen=True)
class DatasetStatistics:
    """Distributions used for outlier normalization."""
    posts: DistributionStats
    hashtags: DistributionStats
    n_users: int = 0

    def to_dict(self) -> Dict:
        return {
            'posts': {'mean': self.posts.mean, 'std_dev': self.posts.std_dev},
            'hashtags': {'mean': self.hashtags.mean, 'std_dev': self.hashtags.std_dev},
            'n_users': self.n_users
        }


def compute_dataset_statistics(users: Dict[str, UserAggregate]) -> DatasetStatistics:
    """
    Compute post and hashtag count distributions per user.

    Args:
        users: UserAggregate per user id

    Returns:
        DatasetStatistics; both distributions are (0, 0) for an empty dataset
    """
    aggregates = list(users.values())
    stats = DatasetStatistics(
        posts=DistributionStats.from_values(u.post_count for u in aggregates),
        hashtags=DistributionStats.from_values(u.hashtag_count for u in aggregates),
        n_users=len(aggregates)
    )
    logger.debug(
        f"Dataset statistics: {stats.n_users} users, posts mean={stats.posts.mean:.2f} "
        f"std={stats.posts.std_dev:.2f}"
    )
    return stats
