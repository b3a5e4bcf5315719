"""
PROJECT:
-------
CIB-coordinated-behavior-detection

TITLE:
------
processor.py

MAIN OBJECTIVE:
---------------
This script prepares validated posts for CIB detection, applying the engagement/date filter
and folding the filtered snapshot into per-user aggregates.

Dependencies:
-------------
- pandas
- logging
- typing

MAIN FEATURES:
--------------
1) Engagement and date-range filtering of normalized posts
2) Per-user aggregation (timestamps, hashtags, captions, account metadata)
3) Tabular export of posts for ad-hoc analysis

Author:
-------
Antoine Lemor
"""

import logging
from typing import Dict, Iterable, List, Optional, Sequence

import pandas as pd

from cib_detector.core.config import DetectorConfig
from cib_detector.core.models import Post, UserAggregate

logger = logging.getLogger(__name__)


def filter_posts(posts: Iterable[Post],
                 min_engagement: int = 0,
                 start: Optional[int] = None,
                 end: Optional[int] = None) -> List[Post]:
    """
    Keep posts passing the engagement and date filters.

    Posts without a timestamp pass only when neither date bound is set.
    """
    lower = start if start is not None else float('-inf')
    upper = end if end is not None else float('inf')
    kept = []
    for post in posts:
        if post.create_time is None:
            passes_date = start is None and end is None
        else:
            passes_date = lower <= post.create_time <= upper
        if passes_date and post.engagement >= min_engagement:
            kept.append(post)
    return kept


class DataProcessor:
    """
    Builds the per-user view of a filtered dataset.
    """

    def __init__(self, config: Optional[DetectorConfig] = None):
        """
        Initialize data processor.

        Args:
            config: Detector configuration
        """
        self.config = config or DetectorConfig()

    def build_user_aggregates(self, posts: Sequence[Post]) -> Dict[str, UserAggregate]:
        """
        Fold posts into one UserAggregate per author.

        Args:
            posts: Filtered, validated posts (not mutated)

        Returns:
            Dict of user id to aggregate, in first-seen order
        """
        users: Dict[str, UserAggregate] = {}

        for post in posts:
            user = users.get(post.author_id)
            if user is None:
                user = UserAggregate(user_id=post.author_id)
                users[post.author_id] = user

            user.post_count += 1
            user.hashtag_count += len(post.hashtags)
            user.hashtags.extend(post.hashtags)
            user.captions.append(post.caption)

            if post.create_time is not None:
                user.timestamps.append(post.create_time)
            if post.username:
                user.username = post.username
            if user.account_created_at is None and post.author_created_at:
                user.account_created_at = post.author_created_at
            if post.follower_count:
                user.follower_count = post.follower_count

        for user in users.values():
            user.timestamps.sort()

        logger.info(f"Aggregated {len(posts):,} posts into {len(users):,} users")
        return users

    @staticmethod
    def to_frame(posts: Sequence[Post]) -> pd.DataFrame:
        """One row per post, with engagement and a UTC datetime column."""
        df = pd.DataFrame([{
            'post_id': p.post_id,
            'platform': p.platform,
            'author_id': p.author_id,
            'username': p.username,
            'create_time': p.create_time,
            'engagement': p.engagement,
            'n_hashtags': len(p.hashtags),
            'caption_length': len(p.caption),
            'location': p.location
        } for p in posts])
        if not df.empty:
            df['created'] = pd.to_datetime(df['create_time'], unit='s', utc=True, errors='coerce')
        return df
