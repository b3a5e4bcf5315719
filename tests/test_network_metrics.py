#!/usr/bin/env python3
"""
Tests for network summary metrics.
"""

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

import unittest

from cib_detector.core.models import GraphNode, GraphLink
from cib_detector.core.exceptions import GraphError
from cib_detector.metrics.network_metrics import NetworkMetricsCalculator, build_simple_graph


def make_graph(node_ids, edges):
    return [GraphNode(n) for n in node_ids], [GraphLink(s, t) for s, t in edges]


class TestNetworkMetricsCalculator(unittest.TestCase):
    """Test suite for NetworkMetricsCalculator."""

    def setUp(self):
        self.calculator = NetworkMetricsCalculator()

    def test_path_graph(self):
        nodes, links = make_graph('abcd', [('a', 'b'), ('b', 'c'), ('c', 'd')])
        summary = self.calculator.calculate(nodes, links)

        self.assertEqual(summary.nodes, 4)
        self.assertEqual(summary.edges, 3)
        self.assertAlmostEqual(summary.density, 0.5)
        self.assertAlmostEqual(summary.avg_degree, 1.5)
        self.assertEqual(summary.max_degree, 2)
        self.assertEqual(summary.avg_clustering, 0.0)
        self.assertEqual([n.degree for n in nodes], [1, 2, 2, 1])

    def test_triangle(self):
        nodes, links = make_graph('abc', [('a', 'b'), ('b', 'c'), ('a', 'c')])
        summary = self.calculator.calculate(nodes, links)
        self.assertAlmostEqual(summary.density, 1.0)
        self.assertAlmostEqual(summary.avg_clustering, 1.0)

    def test_clustering_only_over_eligible_nodes(self):
        # Triangle plus a pendant node: the pendant is not averaged in
        nodes, links = make_graph('abcd', [('a', 'b'), ('b', 'c'), ('a', 'c'), ('c', 'd')])
        summary = self.calculator.calculate(nodes, links)
        self.assertAlmostEqual(summary.avg_clustering, (1 + 1 + 1 / 3) / 3)

    def test_empty_graph(self):
        self.assertIsNone(self.calculator.calculate([], []))

    def test_single_node(self):
        nodes, links = make_graph('a', [])
        summary = self.calculator.calculate(nodes, links)
        self.assertEqual(summary.density, 0.0)
        self.assertEqual(summary.max_degree, 0)

    def test_parallel_links_counted(self):
        nodes, links = make_graph('ab', [('a', 'b'), ('a', 'b')])
        summary = self.calculator.calculate(nodes, links)
        self.assertEqual(summary.edges, 2)
        self.assertAlmostEqual(summary.density, 2.0)
        self.assertEqual(nodes[0].degree, 2)

    def test_self_loop(self):
        nodes, links = make_graph('ab', [('a', 'a'), ('a', 'b')])
        self.calculator.calculate(nodes, links)
        self.assertEqual(nodes[0].degree, 3)
        self.assertFalse(build_simple_graph(nodes, links).has_edge('a', 'a'))

    def test_degree_not_overwritten(self):
        nodes, links = make_graph('ab', [('a', 'b')])
        nodes[0].assign_degree(7)
        with self.assertRaises(GraphError):
            self.calculator.calculate(nodes, links)

    def test_rounded_summary(self):
        nodes, links = make_graph('abc', [('a', 'b')])
        data = self.calculator.calculate(nodes, links).to_dict(rounded=True)
        self.assertEqual(data['density'], 0.333)
        self.assertEqual(data['avg_degree'], 0.67)


if __name__ == '__main__':
    unittest.main()
