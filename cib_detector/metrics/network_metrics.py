"""
PROJECT:
-------
CIB-coordinated-behavior-detection

TITLE:
------
network_metrics.py

MAIN OBJECTIVE:
---------------
This script computes the summary metrics of an interaction graph (users, hashtags, locations)
and writes each node's degree back onto the node for downstream sizing and ranking.

Dependencies:
-------------
- networkx
- typing
- collections
- dataclasses
- logging

MAIN FEATURES:
--------------
1) Density over the raw link count
2) Degree per node from one pass over links (self-loops count twice)
3) Average and maximum degree
4) Average local clustering over nodes with at least two distinct neighbours

Author:
-------
Antoine Lemor
"""

import networkx as nx
from typing import Dict, List, Optional, Any, Sequence
from collections import defaultdict
from dataclasses import dataclass, asdict
import logging

from cib_detector.core.models import GraphNode, GraphLink

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NetworkSummary:
    """Summary metrics of one graph."""
    nodes: int
    edges: int
    density: float
    avg_degree: float
    max_degree: int
    avg_clustering: float

    def to_dict(self, rounded: bool = False) -> Dict[str, Any]:
        """Metrics as a dict; ``rounded`` gives display precision."""
        data = asdict(self)
        if rounded:
            data['density'] = round(self.density, 3)
            data['avg_degree'] = round(self.avg_degree, 2)
            data['avg_clustering'] = round(self.avg_clustering, 3)
        return data


def build_simple_graph(nodes: Sequence[GraphNode], links: Sequence[GraphLink]) -> nx.Graph:
    """Unweighted neighbour graph: parallel links merged, self-loops dropped."""
    graph = nx.Graph()
    graph.add_nodes_from(node.id for node in nodes)
    graph.add_edges_from(
        (link.source, link.target) for link in links if link.source != link.target
    )
    return graph


class NetworkMetricsCalculator:
    """
    Calculate network summary metrics for an externally extracted graph.
    """

    def __init__(self):
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    def calculate_degrees(self, nodes: Sequence[GraphNode], links: Sequence[GraphLink]) -> Dict[str, int]:
        """
        Degree per node id from one pass over the links.

        Link endpoints missing from ``nodes`` are counted too.
        """
        degrees: Dict[str, int] = defaultdict(int)
        for node in nodes:
            degrees[node.id] = 0
        for link in links:
            degrees[link.source] += 1
            degrees[link.target] += 1
        return dict(degrees)

    def calculate_density(self, n_nodes: int, n_links: int) -> float:
        if n_nodes < 2:
            return 0.0
        max_edges = n_nodes * (n_nodes - 1) / 2
        return n_links / max_edges

    def calculate_clustering(self, nodes: Sequence[GraphNode], links: Sequence[GraphLink]) -> float:
        """Mean local clustering of nodes with at least two distinct neighbours."""
        graph = build_simple_graph(nodes, links)
        eligible = [node.id for node in nodes if graph.degree(node.id) >= 2]
        if not eligible:
            return 0.0
        clustering = nx.clustering(graph, eligible)
        return sum(clustering[n] for n in eligible) / len(eligible)

    def calculate(self, nodes: List[GraphNode], links: List[GraphLink]) -> Optional[NetworkSummary]:
        """
        Compute summary metrics and write degrees onto ``nodes``.

        Returns:
            NetworkSummary, or None when there are no nodes
        """
        n = len(nodes)
        if n == 0:
            return None
        m = len(links)

        degrees = self.calculate_degrees(nodes, links)
        for node in nodes:
            node.assign_degree(degrees.get(node.id, 0))

        summary = NetworkSummary(
            nodes=n,
            edges=m,
            density=self.calculate_density(n, m),
            avg_degree=sum(degrees.values()) / n,
            max_degree=max(degrees.values()) if degrees else 0,
            avg_clustering=self.calculate_clustering(nodes, links)
        )
        self.logger.info(
            f"Network metrics: {n} nodes, {m} links, density={summary.density:.3f}, "
            f"clustering={summary.avg_clustering:.3f}"
        )
        return summary
