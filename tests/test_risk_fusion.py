#!/usr/bin/env python3
"""
Tests for risk fusion: weights, cross-indicator multiplier, combination
bonuses and reason strings.
"""

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

import unittest

from cib_detector.core.config import DetectorConfig
from cib_detector.core.constants import SYNCHRONIZED, REGULAR_RHYTHM, CREATION_CLUSTER
from cib_detector.core.models import (
    SynchronizedPair, RareHashtagGroup, UsernameGroup, HighVolumeOutlier, Burst,
    RegularRhythm, NightActive, SemanticPair, TemplatePair, CreationCluster
)
from cib_detector.detectors.risk_fusion import (
    RiskFusionEngine, format_time_window, format_partners, round_half_up
)

NAMES = {'a': 'alice', 'b': 'bob', 'c': 'carol', 'd': 'dave', 'e': 'erin'}


class TestFormatting(unittest.TestCase):

    def test_format_time_window(self):
        self.assertEqual(format_time_window(1), '1 second')
        self.assertEqual(format_time_window(45), '45 seconds')
        self.assertEqual(format_time_window(60), '1 minute')
        self.assertEqual(format_time_window(300), '5 minutes')
        self.assertEqual(format_time_window(150), '2m 30s')

    def test_format_partners(self):
        self.assertEqual(format_partners(['a', 'b']), 'a, b')
        names = [f"u{i}" for i in range(7)]
        self.assertEqual(format_partners(names), 'u0, u1, u2, u3, u4 and 2 more')

    def test_round_half_up(self):
        self.assertEqual(round_half_up(72.5), 73)
        self.assertEqual(round_half_up(72.49), 72)


class TestRiskFusionEngine(unittest.TestCase):
    """Test suite for RiskFusionEngine."""

    def setUp(self):
        self.engine = RiskFusionEngine(DetectorConfig())

    def test_single_indicator_weight(self):
        records = self.engine.fuse([SynchronizedPair('a', 'b', count=3)], NAMES)
        self.assertEqual(records['a'].score, 25)
        self.assertEqual(records['b'].score, 25)
        self.assertEqual(records['a'].reasons, ['Synchronized posting with: bob'])
        self.assertEqual(records['b'].reasons, ['Synchronized posting with: alice'])

    def test_users_without_findings_absent(self):
        records = self.engine.fuse([SynchronizedPair('a', 'b', count=3)], NAMES)
        self.assertNotIn('c', records)
        self.assertEqual(self.engine.fuse([]), {})

    def test_multiplier_and_rhythm_combo(self):
        records = self.engine.fuse([
            SynchronizedPair('a', 'b', count=3),
            RegularRhythm('a', cv=0.042),
        ], NAMES)
        # 45 * (1 + 0.3 * 2) = 72, then +15
        self.assertEqual(records['a'].score, 87)
        self.assertTrue(records['a'].has_indicators(SYNCHRONIZED, REGULAR_RHYTHM))
        self.assertEqual(records['a'].reasons[1], 'Highly regular posting rhythm (CV: 4.2%)')

    def test_username_creation_combo(self):
        records = self.engine.fuse([
            UsernameGroup(frozenset({'a', 'b'}), similarity=0.9, names=('alice1', 'alice2')),
            CreationCluster(frozenset({'a', 'b', 'c', 'd', 'e'}), window=86400, start=0),
        ], NAMES)
        # 40 * 1.6 = 64, then +20
        self.assertEqual(records['a'].score, 84)
        self.assertEqual(records['a'].reasons, [
            'Similar username pattern with: bob',
            'Account created with 4 others within 24 hours',
        ])
        self.assertEqual(records['c'].score, 30)
        self.assertEqual(records['c'].indicators, [CREATION_CLUSTER])

    def test_score_capped(self):
        findings = [
            SynchronizedPair('a', 'b', count=3),
            RareHashtagGroup(frozenset({'a', 'b', 'c'}), tfidf=1.2, hashtags=('#x',)),
            HighVolumeOutlier('a', zscore=3.14, post_count=40),
            Burst('a', time=0, count=6, window=300),
            RegularRhythm('a', cv=0.01),
            NightActive('a', max_gap=3600),
        ]
        self.assertEqual(self.engine.fuse(findings, NAMES)['a'].score, 100)

    def test_reason_order_independent_of_input_order(self):
        findings = [
            CreationCluster(frozenset({'a', 'b', 'c', 'd', 'e'}), window=86400),
            Burst('a', time=0, count=6, window=300),
            SynchronizedPair('a', 'b', count=3),
        ]
        reasons = self.engine.fuse(findings, NAMES)['a'].reasons
        self.assertEqual(reasons, [
            'Synchronized posting with: bob',
            'Posting burst: 6 posts in 5 minutes',
            'Account created with 4 others within 24 hours',
        ])
        self.assertEqual(reasons, self.engine.fuse(list(reversed(findings)), NAMES)['a'].reasons)

    def test_adding_findings_never_lowers_score(self):
        base = [SynchronizedPair('a', 'b', count=3)]
        extra = base + [Burst('a', time=0, count=6, window=300)]
        before = self.engine.fuse(base, NAMES)['a'].score
        after = self.engine.fuse(extra, NAMES)['a'].score
        self.assertGreaterEqual(after, before)

    def test_sync_partners_truncated(self):
        findings = [SynchronizedPair('a', f"p{i}", count=2) for i in range(7)]
        reason = self.engine.fuse(findings, NAMES)['a'].reasons[0]
        self.assertEqual(reason, 'Synchronized posting with: p0, p1, p2, p3, p4 and 2 more')

    def test_hashtag_partners_deduplicated(self):
        findings = [
            RareHashtagGroup(frozenset({'a', 'b', 'c'}), tfidf=1.0, hashtags=('#x',)),
            RareHashtagGroup(frozenset({'a', 'b', 'd'}), tfidf=0.8, hashtags=('#y',)),
        ]
        record = self.engine.fuse(findings, NAMES)['a']
        self.assertEqual(record.reasons, ['Rare hashtag combinations with: bob, carol, dave'])
        self.assertEqual(record.score, 20)

    def test_reason_formats(self):
        findings = [
            HighVolumeOutlier('a', zscore=3.14, post_count=40),
            NightActive('a', max_gap=5399),
            SemanticPair('a', 'b', similarity=0.912, captions=('x', 'y')),
            TemplatePair('a', 'c', overlap=0.45),
        ]
        reasons = RiskFusionEngine(DetectorConfig(cross_multiplier=0.0)).fuse(findings, NAMES)['a'].reasons
        self.assertEqual(reasons, [
            'High-volume posting (z-score: 3.1)',
            '24/7 posting pattern (max gap: 1h)',
            'Semantically similar captions (0.912) with bob',
            'Template caption (45% overlap) with carol',
        ])

    def test_unknown_username_falls_back_to_id(self):
        records = self.engine.fuse([SynchronizedPair('a', 'zz', count=2)], NAMES)
        self.assertEqual(records['a'].reasons, ['Synchronized posting with: zz'])

    def test_custom_weights(self):
        config = DetectorConfig()
        config.indicator_weights[SYNCHRONIZED] = 40
        records = RiskFusionEngine(config).fuse([SynchronizedPair('a', 'b', count=3)], NAMES)
        self.assertEqual(records['a'].score, 40)


if __name__ == '__main__':
    unittest.main()
