#!/usr/bin/env python3
"""
Tests for NDJSON ingestion, post filtering and per-user aggregation.
"""

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

import io
import json
import os
import tempfile
import unittest

from cib_detector.core.models import Post
from cib_detector.data.connector import NDJSONConnector
from cib_detector.data.processor import DataProcessor, filter_posts


def record(post_id, author, ts, likes=0, comments=0, hashtags=(), platform='tiktok', username=None):
    return {
        'id': post_id,
        'platform': platform,
        'author': {'id': author, 'username': username or author},
        'create_time': ts,
        'stats': {'likes': likes, 'comments': comments, 'shares': 0},
        'caption': f"caption {post_id}",
        'hashtags': list(hashtags)
    }


def ndjson(*lines):
    return io.StringIO('\n'.join(lines) + '\n')


class TestNDJSONConnector(unittest.TestCase):
    """Test suite for NDJSONConnector."""

    def test_malformed_lines_skipped(self):
        source = ndjson(
            json.dumps(record('p1', 'u1', 1000, likes=4, hashtags=['#a'])),
            '{not json',
            '',
            json.dumps({'id': 'p2', 'author': {}}),
            json.dumps(record('p3', 'u2', 2000, likes=2, comments=2, hashtags=['#a', '#b'], platform='instagram')),
        )
        connector = NDJSONConnector()
        posts = connector.load_posts(source)

        self.assertEqual([p.post_id for p in posts], ['p1', 'p3'])
        self.assertEqual(connector.skipped, 2)

        summary = connector.summary.snapshot()
        self.assertEqual(summary['posts'], 2)
        self.assertEqual(summary['users'], 2)
        self.assertEqual(summary['hashtags'], 2)
        self.assertEqual(summary['engagement'], 4)
        self.assertEqual(summary['platforms'], {'tiktok': 1, 'instagram': 1})
        self.assertEqual((summary['min_timestamp'], summary['max_timestamp']), (1000, 2000))

    def test_unparseable_values_skipped(self):
        good = json.dumps(record('p1', 'u1', 1000))
        bad_stats = json.dumps(dict(record('p2', 'u2', 1000), stats=[1]))
        overflow = json.dumps(record('p3', 'u3', 1000)).replace('"create_time": 1000', '"create_time": 1e999')
        connector = NDJSONConnector()
        posts = connector.load_posts(ndjson(good, bad_stats, overflow, good))

        self.assertEqual([p.post_id for p in posts], ['p1', 'p1'])
        self.assertEqual(connector.skipped, 2)

    def test_invalid_utf8_line_skipped(self):
        good = json.dumps(record('p1', 'u1', 1000)).encode('utf-8')
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, 'posts.ndjson')
            with open(path, 'wb') as f:
                f.write(good + b'\n{"author": {"id": "\xff"}}\n' + good + b'\n')
            connector = NDJSONConnector()
            posts = connector.load_posts(path)

        self.assertEqual(len(posts), 2)
        self.assertEqual(connector.skipped, 1)

    def test_binary_stream(self):
        source = io.BytesIO(json.dumps(record('p1', 'u1', 1000)).encode('utf-8') + b'\n\n')
        self.assertEqual(len(NDJSONConnector().load_posts(source)), 1)

    def test_progressive_batches(self):
        source = ndjson(*[json.dumps(record(f"p{i}", 'u1', 1000 + i)) for i in range(5)])
        batches = list(NDJSONConnector(batch_size=2).stream(source))

        self.assertEqual([len(b.posts) for b in batches], [2, 2, 1])
        self.assertEqual([b.summary['posts'] for b in batches], [2, 4, 5])
        self.assertEqual(batches[-1].line_number, 5)

    def test_reads_from_path(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, 'posts.ndjson')
            with open(path, 'w', encoding='utf-8') as f:
                f.write(json.dumps(record('p1', 'u1', 1000)) + '\n')
            posts = NDJSONConnector().load_posts(path)
        self.assertEqual(len(posts), 1)

    def test_stream_resets_state(self):
        connector = NDJSONConnector()
        connector.load_posts(ndjson('{bad'))
        connector.load_posts(ndjson(json.dumps(record('p1', 'u1', 1000))))
        self.assertEqual(connector.skipped, 0)
        self.assertEqual(connector.summary.posts, 1)


class TestFilterPosts(unittest.TestCase):

    def setUp(self):
        self.posts = [
            Post.from_dict(record('p1', 'u1', 1000, likes=1)),
            Post.from_dict(record('p2', 'u1', 2000, likes=10)),
            Post.from_dict(record('p3', 'u2', None, likes=10)),
        ]

    def test_no_filters(self):
        self.assertEqual(len(filter_posts(self.posts)), 3)

    def test_min_engagement(self):
        kept = filter_posts(self.posts, min_engagement=5)
        self.assertEqual([p.post_id for p in kept], ['p2', 'p3'])

    def test_date_bounds_inclusive(self):
        kept = filter_posts(self.posts, start=1000, end=1000)
        self.assertEqual([p.post_id for p in kept], ['p1'])

    def test_untimed_posts_dropped_with_bounds(self):
        kept = filter_posts(self.posts, start=0)
        self.assertNotIn('p3', [p.post_id for p in kept])


class TestDataProcessor(unittest.TestCase):
    """Test suite for DataProcessor."""

    def test_build_user_aggregates(self):
        posts = [
            Post.from_dict(record('p1', 'u1', 2000, hashtags=['#a'], username='first')),
            Post.from_dict(record('p2', 'u1', 1000, hashtags=['#a', '#b'], username='second')),
            Post.from_dict(record('p3', 'u2', None)),
        ]
        users = DataProcessor().build_user_aggregates(posts)

        self.assertEqual(list(users), ['u1', 'u2'])
        u1 = users['u1']
        self.assertEqual(u1.post_count, 2)
        self.assertEqual(u1.hashtag_count, 3)
        self.assertEqual(u1.timestamps, [1000, 2000])
        self.assertEqual(u1.username, 'second')
        self.assertEqual(users['u2'].timestamps, [])

    def test_to_frame(self):
        posts = [Post.from_dict(record('p1', 'u1', 1000, likes=3))]
        frame = DataProcessor.to_frame(posts)
        self.assertEqual(list(frame['engagement']), [3])
        self.assertIn('created', frame.columns)


if __name__ == '__main__':
    unittest.main()
