"""
PROJECT:
-------
CIB-coordinated-behavior-detection

TITLE:
------
behavioral_detectors.py

MAIN OBJECTIVE:
---------------
This script detects per-user behavioral anomalies typical of automated or coordinated accounts:
clock-like posting rhythm, round-the-clock activity, short posting bursts, accounts created in
the same window, and statistically extreme posting volume.

Dependencies:
-------------
- numpy
- pandas
- scipy
- typing
- logging

MAIN FEATURES:
--------------
1) Coefficient of variation of inter-post intervals
2) Average largest daily gap (with overnight wrap) in a configurable timezone
3) Two-pointer sliding window burst search (earliest burst per user)
4) Greedy first-match account creation clustering
5) Z-score outliers on posts per user

Author:
-------
Antoine Lemor
"""

from typing import Dict, List, Optional, Any
import logging

import numpy as np
import pandas as pd
from scipy import stats

from cib_detector.detectors.base_detector import BaseDetector, DetectionContext
from cib_detector.core.models import (
    UserAggregate, RegularRhythm, NightActive, Burst, CreationCluster, HighVolumeOutlier
)
from cib_detector.core.constants import (
    MIN_RHYTHM_POSTS, MIN_NIGHT_POSTS, SECONDS_PER_DAY, DEFAULT_CREATION_WINDOW, DEFAULT_TIMEZONE
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Posting rhythm
# ---------------------------------------------------------------------------

def analyze_posting_rhythm(timestamps: List[int], cv_threshold: float = 0.1) -> Dict[str, Any]:
    """
    Regularity of inter-post intervals.

    Returns:
        {'regular': bool, 'cv': float or None, 'mean': float or None, 'std_dev': float or None}
        cv is None (and the user not regular) with fewer than 5 posts or
        when every post shares one timestamp.
    """
    if len(timestamps) < MIN_RHYTHM_POSTS:
        return {'regular': False, 'cv': None, 'mean': None, 'std_dev': None}

    intervals = np.diff(np.sort(np.asarray(timestamps, dtype=float)))
    mean = float(intervals.mean())
    std_dev = float(intervals.std())

    if mean == 0:
        return {'regular': False, 'cv': None, 'mean': mean, 'std_dev': std_dev}

    cv = float(stats.variation(intervals))
    return {'regular': cv < cv_threshold, 'cv': cv, 'mean': mean, 'std_dev': std_dev}


class RhythmRegularityDetector(BaseDetector):
    """Users whose posting intervals barely vary."""

    name = 'regular_rhythm'

    def detect(self, context: DetectionContext) -> List[RegularRhythm]:
        config = self.get_config(context)
        findings = []
        for uid, user in context.users.items():
            rhythm = analyze_posting_rhythm(user.timestamps, config.rhythm_cv)
            if rhythm['regular']:
                findings.append(RegularRhythm(uid, cv=rhythm['cv']))
        return findings


# ---------------------------------------------------------------------------
# Round-the-clock activity
# ---------------------------------------------------------------------------

def analyze_night_posting(timestamps: List[int], gap_threshold: int = 7200,
                          tz: str = DEFAULT_TIMEZONE) -> Dict[str, Any]:
    """
    Average of the largest daily posting gap.

    Posts are grouped by calendar day in ``tz``; within a day, times of day are
    taken at minute resolution. A day with more than one post also counts the
    overnight wrap gap (86400 - last + first). Single-post days contribute 0.

    Returns:
        {'suspicious': bool, 'avg_max_gap': float or None}
    """
    if len(timestamps) < MIN_NIGHT_POSTS:
        return {'suspicious': False, 'avg_max_gap': None}

    local = pd.to_datetime(pd.Series(sorted(timestamps)), unit='s', utc=True).dt.tz_convert(tz)
    frame = pd.DataFrame({
        'day': local.dt.date,
        'second': local.dt.hour * 3600 + local.dt.minute * 60
    })

    daily_gaps = []
    for _, seconds in frame.groupby('day', sort=False)['second']:
        day = np.sort(seconds.to_numpy())
        max_gap = int(np.diff(day).max()) if len(day) > 1 else 0
        if len(day) > 1:
            max_gap = max(max_gap, SECONDS_PER_DAY - int(day[-1]) + int(day[0]))
        daily_gaps.append(max_gap)

    avg_max_gap = sum(daily_gaps) / (len(daily_gaps) or 1)
    return {'suspicious': avg_max_gap < gap_threshold, 'avg_max_gap': avg_max_gap}


class NightActivityDetector(BaseDetector):
    """Users who never pause long enough to sleep."""

    name = 'night_activity'

    def detect(self, context: DetectionContext) -> List[NightActive]:
        config = self.get_config(context)
        findings = []
        for uid, user in context.users.items():
            result = analyze_night_posting(user.timestamps, config.night_gap, config.timezone)
            if result['suspicious']:
                findings.append(NightActive(uid, max_gap=result['avg_max_gap']))
        return findings


# ---------------------------------------------------------------------------
# Bursts
# ---------------------------------------------------------------------------

def detect_temporal_bursts(users: Dict[str, UserAggregate], window: int,
                           min_posts: int = 5) -> List[Dict[str, Any]]:
    """
    Earliest burst of at least ``min_posts`` posts spanning less than ``window``
    seconds, per user.

    Returns:
        List of {'user_id', 'time', 'count', 'timestamps'}
    """
    bursts = []
    for uid, user in users.items():
        timestamps = sorted(user.timestamps)
        start = 0
        for end in range(len(timestamps)):
            while start < end and timestamps[end] - timestamps[start] >= window:
                start += 1
            size = end - start + 1
            if size >= min_posts:
                bursts.append({
                    'user_id': uid,
                    'time': timestamps[start],
                    'count': size,
                    'timestamps': timestamps[start:end + 1]
                })
                break
    return bursts


class BurstDetector(BaseDetector):
    """Many posts from one user in a short window."""

    name = 'temporal_burst'

    def detect(self, context: DetectionContext) -> List[Burst]:
        config = self.get_config(context)
        bursts = detect_temporal_bursts(context.users, config.time_window, config.burst_posts)
        return [
            Burst(b['user_id'], time=b['time'], count=b['count'], window=config.time_window)
            for b in bursts
        ]


# ---------------------------------------------------------------------------
# Account creation clusters
# ---------------------------------------------------------------------------

def detect_account_creation_clusters(users: Dict[str, UserAggregate],
                                     window: int = DEFAULT_CREATION_WINDOW,
                                     min_size: int = 5) -> List[Dict[str, Any]]:
    """
    Group accounts created close together.

    Accounts are visited in creation order; each joins the first cluster whose
    anchor time is less than ``window`` away, otherwise it anchors a new one.
    Posting time is never used as a substitute for a missing creation date.

    Returns:
        List of {'start', 'members'} for clusters of at least ``min_size`` accounts
    """
    created = [(uid, u.account_created_at) for uid, u in users.items() if u.account_created_at]
    if users:
        logger.info(
            f"Account creation clustering: {len(created)} of {len(users)} accounts have "
            f"creation dates ({len(created) / len(users) * 100:.1f}%)"
        )

    clusters: List[Dict[str, Any]] = []
    for uid, created_at in sorted(created, key=lambda item: item[1]):
        for cluster in clusters:
            if abs(created_at - cluster['start']) < window:
                cluster['members'].append(uid)
                break
        else:
            clusters.append({'start': created_at, 'members': [uid]})

    return [c for c in clusters if len(c['members']) >= min_size]


class CreationClusterDetector(BaseDetector):
    """Batches of accounts registered within one window."""

    name = 'creation_cluster'

    def detect(self, context: DetectionContext) -> List[CreationCluster]:
        config = self.get_config(context)
        clusters = detect_account_creation_clusters(
            context.users, config.creation_window, config.cluster_size
        )
        return [
            CreationCluster(frozenset(c['members']), window=config.creation_window, start=c['start'])
            for c in clusters
        ]


# ---------------------------------------------------------------------------
# Volume outliers
# ---------------------------------------------------------------------------

class HighVolumeDetector(BaseDetector):
    """
    Users posting far more than the rest of the dataset.
    """

    name = 'high_volume'

    def detect(self, context: DetectionContext) -> List[HighVolumeOutlier]:
        config = self.get_config(context)
        distribution = context.statistics.posts

        if distribution.std_dev == 0:
            self.logger.debug("Post count standard deviation is zero, skipping volume check")
            return []

        findings = []
        for uid, user in context.users.items():
            if user.post_count < config.min_high_volume_posts:
                continue
            zscore: Optional[float] = distribution.zscore(user.post_count)
            if zscore is not None and zscore > config.zscore_threshold:
                findings.append(HighVolumeOutlier(uid, zscore=zscore, post_count=user.post_count))
        return findings
