"""
PROJECT:
-------
CIB-coordinated-behavior-detection

TITLE:
------
connector.py

MAIN OBJECTIVE:
---------------
This script streams newline-delimited JSON exports of normalized posts into validated Post
records, emitting incremental dataset statistics while parsing.

Dependencies:
-------------
- json
- logging
- pathlib
- dataclasses
- typing

MAIN FEATURES:
--------------
1) Streaming NDJSON parsing in fixed-size batches
2) Malformed or invalid lines skipped with a logged warning
3) Rolling dataset summary (posts, users, hashtags, mean engagement, platforms, time range)
4) Convenience loader returning the full post list

Author:
-------
Antoine Lemor
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import BinaryIO, Dict, Iterator, List, Optional, Set, TextIO, Union

from cib_detector.core.exceptions import ValidationError
from cib_detector.core.models import Post

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 500


@dataclass
class DatasetSummary:
    """Rolling statistics over the posts ingested so far."""
    posts: int = 0
    total_engagement: int = 0
    platforms: Dict[str, int] = field(default_factory=dict)
    min_timestamp: Optional[int] = None
    max_timestamp: Optional[int] = None
    _users: Set[str] = field(default_factory=set, repr=False)
    _hashtags: Set[str] = field(default_factory=set, repr=False)

    @property
    def users(self) -> int:
        return len(self._users)

    @property
    def hashtags(self) -> int:
        return len(self._hashtags)

    @property
    def engagement(self) -> int:
        """Mean engagement (likes + comments) per post, rounded."""
        return round(self.total_engagement / self.posts) if self.posts else 0

    def update(self, post: Post) -> None:
        self.posts += 1
        self._users.add(post.author_id)
        self._hashtags.update(post.hashtags)
        self.total_engagement += post.likes + post.comments
        self.platforms[post.platform] = self.platforms.get(post.platform, 0) + 1
        if post.create_time is not None:
            if self.min_timestamp is None or post.create_time < self.min_timestamp:
                self.min_timestamp = post.create_time
            if self.max_timestamp is None or post.create_time > self.max_timestamp:
                self.max_timestamp = post.create_time

    def snapshot(self) -> Dict:
        return {
            'posts': self.posts,
            'users': self.users,
            'hashtags': self.hashtags,
            'engagement': self.engagement,
            'platforms': dict(self.platforms),
            'min_timestamp': self.min_timestamp,
            'max_timestamp': self.max_timestamp
        }


@dataclass
class IngestBatch:
    """A batch of parsed posts and the summary as of the end of the batch."""
    posts: List[Post]
    summary: Dict
    line_number: int


class NDJSONConnector:
    """
    Reads normalized post exports (one JSON object per line).
    """

    def __init__(self, batch_size: int = DEFAULT_BATCH_SIZE):
        """
        Initialize connector.

        Args:
            batch_size: Number of posts per emitted batch
        """
        self.batch_size = max(1, batch_size)
        self.summary = DatasetSummary()
        self.skipped = 0

    def stream(self, source: Union[str, Path, TextIO, BinaryIO]) -> Iterator[IngestBatch]:
        """
        Parse ``source`` progressively.

        Args:
            source: Path to an NDJSON file or an open text or binary stream

        Yields:
            IngestBatch objects with the rolling summary
        """
        self.summary = DatasetSummary()
        self.skipped = 0

        if isinstance(source, (str, Path)):
            with open(source, 'rb') as handle:
                yield from self._stream_lines(handle)
        else:
            yield from self._stream_lines(source)

        if self.skipped:
            logger.warning(f"Skipped {self.skipped} malformed record(s)")
        logger.info(
            f"Ingested {self.summary.posts:,} posts from {self.summary.users:,} users"
        )

    def _stream_lines(self, handle: Union[TextIO, BinaryIO]) -> Iterator[IngestBatch]:
        batch: List[Post] = []
        line_number = 0

        for line_number, raw in enumerate(handle, start=1):
            line = raw.strip()
            if not line:
                continue

            post = self._parse_line(line, line_number)
            if post is None:
                continue

            self.summary.update(post)
            batch.append(post)

            if len(batch) >= self.batch_size:
                yield IngestBatch(batch, self.summary.snapshot(), line_number)
                batch = []

        if batch:
            yield IngestBatch(batch, self.summary.snapshot(), line_number)

    def _parse_line(self, line: Union[str, bytes], line_number: int) -> Optional[Post]:
        if isinstance(line, bytes):
            try:
                line = line.decode('utf-8')
            except UnicodeDecodeError as e:
                logger.warning(f"Invalid UTF-8 on line {line_number}: {e}")
                self.skipped += 1
                return None

        try:
            record = json.loads(line)
        except json.JSONDecodeError as e:
            logger.warning(f"Failed to parse NDJSON on line {line_number}: {e}")
            self.skipped += 1
            return None

        try:
            return Post.from_dict(record)
        except ValidationError as e:
            logger.warning(f"Invalid record on line {line_number}: {e}")
            self.skipped += 1
            return None

    def load_posts(self, source: Union[str, Path, TextIO, BinaryIO]) -> List[Post]:
        """Parse the whole source and return every valid post."""
        posts: List[Post] = []
        for batch in self.stream(source):
            posts.extend(batch.posts)
        return posts
