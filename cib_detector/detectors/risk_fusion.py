"""
PROJECT:
-------
CIB-coordinated-behavior-detection

TITLE:
------
risk_fusion.py

MAIN OBJECTIVE:
---------------
This script folds the findings of every detector into one 0-100 risk score per user, with an
ordered list of human-readable reasons, amplifying users flagged by several independent
indicators.

Dependencies:
-------------
- math
- collections
- typing
- logging

MAIN FEATURES:
--------------
1) Fixed per-indicator weights (configurable)
2) Reason strings in a stable indicator order
3) Cross-indicator multiplier for users with two or more reasons
4) Combo bonuses for username + creation cluster and synchrony + rhythm
5) Scores clamped to [0, 100]

Author:
-------
Antoine Lemor
"""

import math
from collections import defaultdict
from typing import Dict, List, Optional, Iterable
import logging

from cib_detector.core.config import DetectorConfig
from cib_detector.core.constants import (
    INDICATOR_ORDER, COMBO_BONUSES, MAX_RISK_SCORE, MAX_REASON_PARTNERS,
    SYNCHRONIZED, RARE_HASHTAGS, SIMILAR_USERNAMES, HIGH_VOLUME, TEMPORAL_BURST,
    REGULAR_RHYTHM, NIGHT_ACTIVITY, SEMANTIC_DUPLICATE, TEMPLATE_CAPTION, CREATION_CLUSTER
)
from cib_detector.core.models import DetectorFinding, RiskRecord

logger = logging.getLogger(__name__)


def format_time_window(seconds: int) -> str:
    """'45 seconds', '5 minutes', '2m 30s'."""
    if seconds < 60:
        return f"{seconds} second{'s' if seconds != 1 else ''}"
    minutes, remainder = divmod(int(seconds), 60)
    if remainder == 0:
        return f"{minutes} minute{'s' if minutes != 1 else ''}"
    return f"{minutes}m {remainder}s"


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def format_partners(names: List[str], total: Optional[int] = None) -> str:
    """First five names, then ' and N more' when ``total`` exceeds five."""
    total = len(names) if total is None else total
    shown = ', '.join(names[:MAX_REASON_PARTNERS])
    if total > MAX_REASON_PARTNERS:
        shown += f" and {total - MAX_REASON_PARTNERS} more"
    return shown


class RiskFusionEngine:
    """
    Combine detector findings into per-user risk records.

    Users that no finding touches get no record.
    """

    def __init__(self, config: Optional[DetectorConfig] = None):
        self.config = config or DetectorConfig()
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    def fuse(self, findings: Iterable[DetectorFinding],
             usernames: Optional[Dict[str, str]] = None) -> Dict[str, RiskRecord]:
        """
        Score every user touched by a finding.

        Args:
            findings: Findings from all detectors, in any order
            usernames: Display name per user id (ids are used when missing)

        Returns:
            RiskRecord per user id, in first-touched order
        """
        usernames = usernames or {}
        by_user: Dict[str, Dict[str, List[DetectorFinding]]] = defaultdict(lambda: defaultdict(list))
        for finding in findings:
            for uid in finding.users:
                by_user[uid][finding.indicator].append(finding)

        records = {}
        for uid, user_findings in by_user.items():
            record = RiskRecord(user_id=uid)
            for indicator in INDICATOR_ORDER:
                if indicator in user_findings:
                    self._contribute(record, indicator, user_findings[indicator], usernames)
            records[uid] = record

        for record in records.values():
            self._finalize(record)

        self.logger.info(f"Fused findings into {len(records)} risk record(s)")
        return records

    def _name(self, uid: str, usernames: Dict[str, str]) -> str:
        return usernames.get(uid) or uid

    def _contribute(self, record: RiskRecord, indicator: str, findings: List[DetectorFinding],
                    usernames: Dict[str, str]) -> None:
        uid = record.user_id
        weight = self.config.indicator_weights.get(indicator, 0)

        if indicator == SYNCHRONIZED:
            partners = [self._name(f.partner_of(uid), usernames) for f in findings]
            record.add(indicator, weight, f"Synchronized posting with: {format_partners(partners)}")

        elif indicator == RARE_HASHTAGS:
            partners = []
            for f in findings:
                for other in sorted(f.members - {uid}):
                    name = self._name(other, usernames)
                    if name not in partners:
                        partners.append(name)
            record.add(indicator, weight, f"Rare hashtag combinations with: {format_partners(partners)}")

        elif indicator == SIMILAR_USERNAMES:
            for f in findings:
                others = [self._name(o, usernames) for o in sorted(f.members - {uid})]
                record.add(indicator, weight, f"Similar username pattern with: {format_partners(others)}")

        elif indicator == HIGH_VOLUME:
            f = findings[0]
            record.add(indicator, weight, f"High-volume posting (z-score: {f.zscore:.1f})")

        elif indicator == TEMPORAL_BURST:
            f = findings[0]
            record.add(indicator, weight,
                       f"Posting burst: {f.count} posts in {format_time_window(f.window)}")

        elif indicator == REGULAR_RHYTHM:
            f = findings[0]
            record.add(indicator, weight, f"Highly regular posting rhythm (CV: {f.cv * 100:.1f}%)")

        elif indicator == NIGHT_ACTIVITY:
            f = findings[0]
            record.add(indicator, weight, f"24/7 posting pattern (max gap: {int(f.max_gap // 3600)}h)")

        elif indicator == SEMANTIC_DUPLICATE:
            for f in findings:
                partner = self._name(f.partner_of(uid), usernames)
                record.add(indicator, weight,
                           f"Semantically similar captions ({f.similarity:.3f}) with {partner}")

        elif indicator == TEMPLATE_CAPTION:
            for f in findings:
                partner = self._name(f.partner_of(uid), usernames)
                record.add(indicator, weight,
                           f"Template caption ({f.overlap * 100:.0f}% overlap) with {partner}")

        elif indicator == CREATION_CLUSTER:
            for f in findings:
                hours = f.window // 3600
                record.add(indicator, weight,
                           f"Account created with {len(f.members) - 1} others within {hours} hours")

    def _finalize(self, record: RiskRecord) -> None:
        score = record.score
        n_reasons = len(record.reasons)

        if n_reasons >= 2:
            multiplier = 1 + self.config.cross_multiplier * n_reasons
            score = round_half_up(min(MAX_RISK_SCORE, score * multiplier))

        for indicators, bonus in COMBO_BONUSES:
            if record.has_indicators(*indicators):
                score = min(MAX_RISK_SCORE, score + bonus)

        record.score = max(0, min(MAX_RISK_SCORE, int(score)))
