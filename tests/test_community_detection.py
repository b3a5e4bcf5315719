#!/usr/bin/env python3
"""
Tests for Louvain community detection and noise-cluster handling.
"""

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

import random
import unittest

import networkx as nx

from cib_detector.core.models import GraphLink
from cib_detector.metrics.community_detection import (
    LouvainCommunityDetector, adaptive_min_cluster_size, build_weighted_graph
)


def links_from(edges, weight=1.0):
    return [GraphLink(s, t, weight) for s, t in edges]


TRIANGLES = [('a', 'b'), ('b', 'c'), ('a', 'c'), ('x', 'y'), ('y', 'z'), ('x', 'z')]


class TestAdaptiveMinClusterSize(unittest.TestCase):

    def test_thresholds(self):
        self.assertEqual(adaptive_min_cluster_size(10), 2)
        self.assertEqual(adaptive_min_cluster_size(25), 2)
        self.assertEqual(adaptive_min_cluster_size(26), 3)
        self.assertEqual(adaptive_min_cluster_size(300), 5)
        self.assertEqual(adaptive_min_cluster_size(2000), 10)
        self.assertEqual(adaptive_min_cluster_size(2001), 20)
        self.assertEqual(adaptive_min_cluster_size(5000), 50)


class TestBuildWeightedGraph(unittest.TestCase):

    def test_parallel_links_accumulate(self):
        graph = build_weighted_graph(['a', 'b'], [GraphLink('a', 'b', 1.0), GraphLink('b', 'a', 2.5)])
        self.assertEqual(graph['a']['b']['weight'], 3.5)

    def test_unknown_endpoints_ignored(self):
        graph = build_weighted_graph(['a', 'b'], links_from([('a', 'b'), ('a', 'ghost')]))
        self.assertEqual(graph.number_of_edges(), 1)
        self.assertNotIn('ghost', graph)


class TestLouvainCommunityDetector(unittest.TestCase):
    """Test suite for LouvainCommunityDetector."""

    def test_two_disconnected_triangles(self):
        for seed in range(5):
            clusters = LouvainCommunityDetector(seed=seed).detect('abcxyz', links_from(TRIANGLES))
            self.assertEqual(clusters.count, 2)
            self.assertIsNone(clusters.noise_id)
            a = clusters.assignments
            self.assertEqual(a['a'], a['b'])
            self.assertEqual(a['b'], a['c'])
            self.assertEqual(a['x'], a['y'])
            self.assertEqual(a['y'], a['z'])
            self.assertNotEqual(a['a'], a['x'])
            self.assertEqual({a['a'], a['x']}, {1, 2})

    def test_clusters_numbered_by_size(self):
        clique = [('a', 'b'), ('a', 'c'), ('a', 'd'), ('b', 'c'), ('b', 'd'), ('c', 'd')]
        triangle = [('x', 'y'), ('y', 'z'), ('x', 'z')]
        clusters = LouvainCommunityDetector(seed=1).detect('xyzabcd', links_from(triangle + clique))
        self.assertEqual(clusters.assignments['a'], 1)
        self.assertEqual(clusters.assignments['x'], 2)
        self.assertEqual(clusters.sizes(), {1: 4, 2: 3})

    def test_singleton_goes_to_noise(self):
        clusters = LouvainCommunityDetector(seed=0).detect('abcs', links_from(TRIANGLES[:3]))
        self.assertEqual(clusters.assignments['s'], 0)
        self.assertEqual(clusters.noise_id, 0)
        self.assertEqual(clusters.count, 1)
        self.assertEqual(clusters.total, 2)

    def test_no_edges(self):
        clusters = LouvainCommunityDetector(seed=0).detect(['a', 'b', 'c'], [])
        self.assertEqual(set(clusters.assignments.values()), {0})
        self.assertEqual(clusters.count, 0)
        self.assertEqual(clusters.noise_id, 0)

    def test_no_nodes(self):
        self.assertIsNone(LouvainCommunityDetector().detect([], []))

    def test_min_cluster_size_applied(self):
        # 30 nodes: minimum size 3, so an isolated pair is noise
        node_ids = [f"n{i}" for i in range(30)]
        edges = [('n0', 'n1')]
        for i in range(2, 30, 4):
            group = node_ids[i:i + 4]
            edges += [(u, v) for k, u in enumerate(group) for v in group[k + 1:]]
        clusters = LouvainCommunityDetector(seed=3).detect(node_ids, links_from(edges))
        self.assertEqual(clusters.min_cluster_size, 3)
        self.assertEqual(clusters.assignments['n0'], 0)
        self.assertEqual(clusters.assignments['n1'], 0)
        self.assertNotEqual(clusters.assignments['n2'], 0)

    def test_seeded_runs_are_reproducible(self):
        karate = nx.karate_club_graph()
        node_ids = [str(n) for n in karate.nodes()]
        links = [GraphLink(str(u), str(v)) for u, v in karate.edges()]

        first = LouvainCommunityDetector(seed=42).detect(node_ids, links)
        second = LouvainCommunityDetector(rng=random.Random(42)).detect(node_ids, links)
        self.assertEqual(first.assignments, second.assignments)
        self.assertGreaterEqual(first.count, 2)

    def test_every_node_assigned(self):
        karate = nx.karate_club_graph()
        node_ids = [str(n) for n in karate.nodes()]
        links = [GraphLink(str(u), str(v)) for u, v in karate.edges()]
        clusters = LouvainCommunityDetector(seed=7).detect(node_ids, links)
        self.assertEqual(set(clusters.assignments), set(node_ids))
        ids = set(clusters.assignments.values()) - {0}
        self.assertEqual(ids, set(range(1, clusters.count + 1)))


if __name__ == '__main__':
    unittest.main()
