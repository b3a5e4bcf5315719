"""
PROJECT:
-------
CIB-coordinated-behavior-detection

TITLE:
------
models.py

MAIN OBJECTIVE:
---------------
This script defines the core data models and structures used throughout the CIB detection
framework, including the typed post schema, per-user aggregates, detector findings, risk records
and the graph annotation types.

Dependencies:
-------------
- dataclasses
- typing

MAIN FEATURES:
--------------
1) Post schema validated at the ingestion boundary
2) UserAggregate built fresh per detection run
3) Immutable detector findings (one class per indicator)
4) RiskRecord folded from findings by the fusion engine
5) GraphNode / GraphLink / ClusterAssignment for network annotation

Author:
-------
Antoine Lemor
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Any, Tuple, FrozenSet, Iterable

from cib_detector.core import constants as C
from cib_detector.core.exceptions import ValidationError, GraphError


def _as_int(value: Any, name: str, default: Optional[int] = None) -> Optional[int]:
    if value is None or value == '':
        return default
    try:
        return int(float(value))
    except (TypeError, ValueError, OverflowError):
        raise ValidationError(f"Field '{name}' is not a finite number: {value!r}")


@dataclass(frozen=True)
class Post:
    """Normalized post record. Immutable once ingested."""
    post_id: str
    platform: str
    author_id: str
    username: str
    create_time: Optional[int]
    likes: int = 0
    comments: int = 0
    shares: int = 0
    caption: str = ''
    hashtags: Tuple[str, ...] = ()
    location: Optional[str] = None
    author_created_at: Optional[int] = None
    follower_count: int = 0

    @property
    def engagement(self) -> int:
        """Total engagement (likes + comments + shares)."""
        return self.likes + self.comments + self.shares

    @classmethod
    def from_dict(cls, record: Dict[str, Any]) -> 'Post':
        """
        Validate a normalized record and build a Post.

        Raises:
            ValidationError: if the record has no author id or carries
                non-numeric timestamps/counters.
        """
        if not isinstance(record, dict):
            raise ValidationError(f"Record must be an object, got {type(record).__name__}")

        author = record.get('author') or {}
        if not isinstance(author, dict):
            raise ValidationError("Field 'author' must be an object")
        author_id = author.get('id')
        if author_id in (None, ''):
            raise ValidationError("Record has no author id")

        stats = record.get('stats') or {}
        if not isinstance(stats, dict):
            raise ValidationError("Field 'stats' must be an object")
        hashtags = record.get('hashtags') or []
        if not isinstance(hashtags, (list, tuple)):
            raise ValidationError("Field 'hashtags' must be a list")

        location = record.get('location')
        if isinstance(location, dict):
            location = location.get('name') or location.get('id')

        return cls(
            post_id=str(record.get('id', '')),
            platform=str(record.get('platform') or 'unknown'),
            author_id=str(author_id),
            username=str(author.get('username') or ''),
            create_time=_as_int(record.get('create_time'), 'create_time'),
            likes=_as_int(stats.get('likes'), 'stats.likes', 0),
            comments=_as_int(stats.get('comments'), 'stats.comments', 0),
            shares=_as_int(stats.get('shares'), 'stats.shares', 0),
            caption=str(record.get('caption') or ''),
            hashtags=tuple(str(h) for h in hashtags if h),
            location=str(location) if location else None,
            author_created_at=_as_int(author.get('created_at'), 'author.created_at'),
            follower_count=_as_int(author.get('followers'), 'author.followers', 0),
        )

    def to_dict(self) -> Dict:
        """Convert back to the normalized record shape."""
        return {
            'id': self.post_id,
            'platform': self.platform,
            'author': {
                'id': self.author_id,
                'username': self.username,
                'created_at': self.author_created_at,
                'followers': self.follower_count
            },
            'create_time': self.create_time,
            'stats': {'likes': self.likes, 'comments': self.comments, 'shares': self.shares},
            'caption': self.caption,
            'hashtags': list(self.hashtags),
            'location': self.location
        }


@dataclass
class UserAggregate:
    """Per-user view of the filtered dataset. Built fresh per detection run."""
    user_id: str
    username: str = ''
    timestamps: List[int] = field(default_factory=list)
    hashtags: List[str] = field(default_factory=list)
    captions: List[str] = field(default_factory=list)
    account_created_at: Optional[int] = None
    follower_count: int = 0
    post_count: int = 0
    hashtag_count: int = 0

    @property
    def display_name(self) -> str:
        return self.username or f"user_{self.user_id}"

    def representative_caption(self, min_length: int = C.MIN_CAPTION_LENGTH) -> Optional[str]:
        """Longest caption with at least ``min_length`` characters (first one on ties)."""
        best = None
        for caption in self.captions:
            if len(caption) < min_length:
                continue
            if best is None or len(caption) > len(best):
                best = caption
        return best


# ---------------------------------------------------------------------------
# Detector findings
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class DetectorFinding:
    """Base class for detector signals. Findings are read-only facts."""
    indicator = ''

    @property
    def users(self) -> Tuple[str, ...]:
        raise NotImplementedError


@dataclass(frozen=True)
class PairFinding(DetectorFinding):
    user_a: str
    user_b: str

    @property
    def users(self) -> Tuple[str, ...]:
        return (self.user_a, self.user_b)

    def partner_of(self, user_id: str) -> str:
        return self.user_b if user_id == self.user_a else self.user_a


@dataclass(frozen=True)
class GroupFinding(DetectorFinding):
    members: FrozenSet[str]

    @property
    def users(self) -> Tuple[str, ...]:
        return tuple(sorted(self.members))


@dataclass(frozen=True)
class SingleUserFinding(DetectorFinding):
    user: str

    @property
    def users(self) -> Tuple[str, ...]:
        return (self.user,)


@dataclass(frozen=True)
class SynchronizedPair(PairFinding):
    count: int = 0
    indicator = C.SYNCHRONIZED


@dataclass(frozen=True)
class RareHashtagGroup(GroupFinding):
    tfidf: float = 0.0
    hashtags: Tuple[str, ...] = ()
    indicator = C.RARE_HASHTAGS


@dataclass(frozen=True)
class UsernameGroup(GroupFinding):
    similarity: float = 0.0
    names: Tuple[str, ...] = ()
    indicator = C.SIMILAR_USERNAMES


@dataclass(frozen=True)
class HighVolumeOutlier(SingleUserFinding):
    zscore: float = 0.0
    post_count: int = 0
    indicator = C.HIGH_VOLUME


@dataclass(frozen=True)
class Burst(SingleUserFinding):
    time: int = 0
    count: int = 0
    window: int = C.DEFAULT_TIME_WINDOW
    indicator = C.TEMPORAL_BURST


@dataclass(frozen=True)
class RegularRhythm(SingleUserFinding):
    cv: float = 0.0
    indicator = C.REGULAR_RHYTHM


@dataclass(frozen=True)
class NightActive(SingleUserFinding):
    max_gap: float = 0.0
    indicator = C.NIGHT_ACTIVITY


@dataclass(frozen=True)
class SemanticPair(PairFinding):
    similarity: float = 0.0
    captions: Tuple[str, str] = ('', '')
    indicator = C.SEMANTIC_DUPLICATE


@dataclass(frozen=True)
class TemplatePair(PairFinding):
    overlap: float = 0.0
    indicator = C.TEMPLATE_CAPTION


@dataclass(frozen=True)
class CreationCluster(GroupFinding):
    window: int = C.DEFAULT_CREATION_WINDOW
    start: int = 0
    indicator = C.CREATION_CLUSTER


# ---------------------------------------------------------------------------
# Risk records
# ---------------------------------------------------------------------------

@dataclass
class RiskRecord:
    """Fused risk for one suspicious user."""
    user_id: str
    score: int = 0
    reasons: List[str] = field(default_factory=list)
    indicators: List[str] = field(default_factory=list)

    def add(self, indicator: str, weight: int, reason: str) -> None:
        """Fold one contributing finding into the record."""
        self.score += weight
        self.reasons.append(reason)
        self.indicators.append(indicator)

    def has_indicators(self, *indicators: str) -> bool:
        return all(ind in self.indicators for ind in indicators)

    def to_dict(self) -> Dict:
        return {
            'user_id': self.user_id,
            'score': self.score,
            'reasons': list(self.reasons),
            'indicators': list(self.indicators)
        }


# ---------------------------------------------------------------------------
# Graph annotation
# ---------------------------------------------------------------------------

@dataclass
class GraphNode:
    """Graph node supplied by the graph-extraction collaborator."""
    id: str
    type: str = 'user'
    label: Optional[str] = None
    degree: Optional[int] = None
    community: Optional[int] = None
    suspicious: bool = False
    risk_score: Optional[int] = None
    reasons: List[str] = field(default_factory=list)

    def __post_init__(self):
        if self.type not in C.NODE_TYPES:
            raise GraphError(f"Unknown type '{self.type}' for node {self.id}")

    def assign_degree(self, degree: int) -> None:
        if self.degree is not None and self.degree != degree:
            raise GraphError(f"Degree of node {self.id} already set to {self.degree}")
        self.degree = degree

    def assign_community(self, community: int) -> None:
        if self.community is not None and self.community != community:
            raise GraphError(f"Community of node {self.id} already set to {self.community}")
        self.community = community

    def reset_annotations(self) -> None:
        """Clear per-run annotations before a new run."""
        self.degree = None
        self.community = None
        self.suspicious = False
        self.risk_score = None
        self.reasons = []


@dataclass(frozen=True)
class GraphLink:
    """Undirected link with optional weight."""
    source: str
    target: str
    weight: float = 1.0


@dataclass
class ClusterAssignment:
    """Community id per node; noise nodes share NOISE_CLUSTER_ID."""
    assignments: Dict[str, int]
    count: int
    noise_id: Optional[int]
    min_cluster_size: int

    @property
    def total(self) -> int:
        """Number of distinct ids including the noise cluster."""
        return self.count + (1 if self.noise_id is not None else 0)

    def members(self, cluster_id: int) -> List[str]:
        return [node for node, cid in self.assignments.items() if cid == cluster_id]

    def sizes(self) -> Dict[int, int]:
        sizes: Dict[int, int] = {}
        for cid in self.assignments.values():
            sizes[cid] = sizes.get(cid, 0) + 1
        return sizes

    def cluster_stats(self, suspicious_ids: Iterable[str] = ()) -> Dict[int, Dict[str, Any]]:
        """Size, flagged-member count and noise flag per cluster."""
        flagged = set(suspicious_ids)
        stats: Dict[int, Dict[str, Any]] = {}
        for node, cid in self.assignments.items():
            entry = stats.setdefault(cid, {'size': 0, 'suspicious': 0,
                                           'is_noise': cid == self.noise_id})
            entry['size'] += 1
            if node in flagged:
                entry['suspicious'] += 1
        return stats
