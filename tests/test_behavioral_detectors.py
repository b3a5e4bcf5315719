#!/usr/bin/env python3
"""
Tests for the behavioral detectors: posting rhythm, round-the-clock activity,
bursts, account creation clusters and volume outliers.
"""

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

import unittest

from cib_detector.core.config import DetectorConfig
from cib_detector.core.models import Post, UserAggregate
from cib_detector.detectors.base_detector import DetectionContext
from cib_detector.detectors.behavioral_detectors import (
    analyze_posting_rhythm, RhythmRegularityDetector,
    analyze_night_posting, NightActivityDetector,
    detect_temporal_bursts, BurstDetector,
    detect_account_creation_clusters, CreationClusterDetector,
    HighVolumeDetector
)

# 2024-01-01 00:00:00 UTC
MIDNIGHT = 1704067200


def make_post(author, ts, created_at=None, index=0):
    return Post(post_id=f"{author}-{index}-{ts}", platform='tiktok', author_id=author,
                username=author, create_time=ts, author_created_at=created_at)


class TestPostingRhythm(unittest.TestCase):
    """Test suite for posting rhythm analysis."""

    def test_perfectly_regular(self):
        result = analyze_posting_rhythm([0, 100, 200, 300, 400])
        self.assertTrue(result['regular'])
        self.assertEqual(result['cv'], 0.0)
        self.assertEqual(result['mean'], 100.0)

    def test_irregular(self):
        result = analyze_posting_rhythm([0, 10, 500, 520, 3000])
        self.assertFalse(result['regular'])
        self.assertGreater(result['cv'], 0.1)

    def test_too_few_posts(self):
        result = analyze_posting_rhythm([0, 100, 200, 300])
        self.assertFalse(result['regular'])
        self.assertIsNone(result['cv'])

    def test_identical_timestamps(self):
        result = analyze_posting_rhythm([50] * 6)
        self.assertFalse(result['regular'])
        self.assertIsNone(result['cv'])

    def test_detector(self):
        posts = [make_post('bot', MIDNIGHT + k * 600) for k in range(6)]
        posts += [make_post('human', MIDNIGHT + t) for t in (0, 50, 4000, 4100, 9000)]
        findings = RhythmRegularityDetector().detect(DetectionContext.build(posts, DetectorConfig()))
        self.assertEqual([f.user for f in findings], ['bot'])
        self.assertEqual(findings[0].cv, 0.0)


class TestNightPosting(unittest.TestCase):
    """Test suite for round-the-clock activity."""

    def test_hourly_posting_is_suspicious(self):
        result = analyze_night_posting([MIDNIGHT + h * 3600 for h in range(24)])
        self.assertTrue(result['suspicious'])
        self.assertEqual(result['avg_max_gap'], 3600)

    def test_gap_equal_to_threshold_not_suspicious(self):
        result = analyze_night_posting([MIDNIGHT + h * 7200 for h in range(12)], gap_threshold=7200)
        self.assertFalse(result['suspicious'])
        self.assertEqual(result['avg_max_gap'], 7200)

    def test_too_few_posts(self):
        result = analyze_night_posting([MIDNIGHT + h * 60 for h in range(9)])
        self.assertFalse(result['suspicious'])
        self.assertIsNone(result['avg_max_gap'])

    def test_timezone_changes_day_boundaries(self):
        timestamps = [MIDNIGHT + h * 3600 for h in range(24)]
        result = analyze_night_posting(timestamps, tz='Asia/Tokyo')
        self.assertFalse(result['suspicious'])
        self.assertEqual(result['avg_max_gap'], 46800)

    def test_detector(self):
        posts = [make_post('owl', MIDNIGHT + h * 3600, index=h) for h in range(24)]
        findings = NightActivityDetector().detect(DetectionContext.build(posts, DetectorConfig(timezone='UTC')))
        self.assertEqual(len(findings), 1)
        self.assertEqual(findings[0].max_gap, 3600)


class TestTemporalBursts(unittest.TestCase):
    """Test suite for burst detection."""

    def test_first_burst_only(self):
        users = {'u1': UserAggregate('u1', timestamps=[0, 10, 20, 30, 40, 1000, 1001, 1002, 1003, 1004])}
        bursts = detect_temporal_bursts(users, window=300, min_posts=5)
        self.assertEqual(len(bursts), 1)
        self.assertEqual(bursts[0]['time'], 0)
        self.assertEqual(bursts[0]['count'], 5)
        self.assertEqual(bursts[0]['timestamps'], [0, 10, 20, 30, 40])

    def test_span_must_be_below_window(self):
        users = {'u1': UserAggregate('u1', timestamps=[0, 75, 150, 225, 300])}
        self.assertEqual(detect_temporal_bursts(users, window=300, min_posts=5), [])

    def test_not_enough_posts(self):
        users = {'u1': UserAggregate('u1', timestamps=[0, 1, 2, 3])}
        self.assertEqual(detect_temporal_bursts(users, window=300, min_posts=5), [])

    def test_detector(self):
        posts = [make_post('spammer', MIDNIGHT + k, index=k) for k in range(6)]
        config = DetectorConfig(time_window=300, burst_posts=5)
        findings = BurstDetector().detect(DetectionContext.build(posts, config))
        self.assertEqual(len(findings), 1)
        self.assertEqual(findings[0].count, 5)
        self.assertEqual(findings[0].window, 300)


class TestCreationClusters(unittest.TestCase):
    """Test suite for account creation clustering."""

    def test_cluster(self):
        users = {f"u{i}": UserAggregate(f"u{i}", account_created_at=MIDNIGHT + i * 3600) for i in range(5)}
        users['late'] = UserAggregate('late', account_created_at=MIDNIGHT + 10 * 86400)
        clusters = detect_account_creation_clusters(users, window=86400, min_size=5)
        self.assertEqual(len(clusters), 1)
        self.assertEqual(sorted(clusters[0]['members']), ['u0', 'u1', 'u2', 'u3', 'u4'])
        self.assertEqual(clusters[0]['start'], MIDNIGHT)

    def test_distance_measured_from_anchor(self):
        users = {
            'a': UserAggregate('a', account_created_at=MIDNIGHT),
            'b': UserAggregate('b', account_created_at=MIDNIGHT + 80000),
            'c': UserAggregate('c', account_created_at=MIDNIGHT + 90000),
        }
        clusters = detect_account_creation_clusters(users, window=86400, min_size=1)
        self.assertEqual([c['members'] for c in clusters], [['a', 'b'], ['c']])

    def test_missing_creation_dates_ignored(self):
        users = {f"u{i}": UserAggregate(f"u{i}", timestamps=[MIDNIGHT]) for i in range(6)}
        self.assertEqual(detect_account_creation_clusters(users, min_size=5), [])

    def test_detector(self):
        posts = [make_post(f"u{i}", MIDNIGHT, created_at=MIDNIGHT - 100000 + i * 60) for i in range(5)]
        findings = CreationClusterDetector().detect(DetectionContext.build(posts, DetectorConfig()))
        self.assertEqual(len(findings), 1)
        self.assertEqual(len(findings[0].members), 5)
        self.assertEqual(findings[0].window, 86400)


class TestHighVolumeDetector(unittest.TestCase):
    """Test suite for HighVolumeDetector."""

    def test_outlier(self):
        posts = [make_post('heavy', MIDNIGHT + k, index=k) for k in range(30)]
        posts += [make_post(f"light{i}", MIDNIGHT) for i in range(20)]
        findings = HighVolumeDetector().detect(DetectionContext.build(posts, DetectorConfig()))
        self.assertEqual(len(findings), 1)
        self.assertEqual(findings[0].user, 'heavy')
        self.assertEqual(findings[0].post_count, 30)
        self.assertGreater(findings[0].zscore, 2.0)

    def test_uniform_volume(self):
        posts = [make_post(f"u{i}", MIDNIGHT + k, index=k) for i in range(5) for k in range(6)]
        self.assertEqual(HighVolumeDetector().detect(DetectionContext.build(posts, DetectorConfig())), [])

    def test_minimum_post_count(self):
        posts = [make_post('heavy', MIDNIGHT + k, index=k) for k in range(4)]
        posts += [make_post(f"light{i}", MIDNIGHT) for i in range(30)]
        config = DetectorConfig(min_high_volume_posts=5)
        self.assertEqual(HighVolumeDetector().detect(DetectionContext.build(posts, config)), [])


if __name__ == '__main__':
    unittest.main()
