"""
PROJECT:
-------
CIB-coordinated-behavior-detection

TITLE:
------
graph_pipeline.py

MAIN OBJECTIVE:
---------------
This script annotates an externally extracted interaction graph with network metrics,
community assignments and the risk scores of a detection run.

Dependencies:
-------------
- random
- typing
- dataclasses
- logging

MAIN FEATURES:
--------------
1) Per-run reset of node annotations
2) Network summary metrics and node degrees
3) Louvain community assignment written onto nodes
4) Suspicious-user marking (node ids with or without the 'u_' prefix)
5) Per-cluster size and flagged-member statistics

Author:
-------
Antoine Lemor
"""

import random
from typing import Dict, List, Optional, Any
from dataclasses import dataclass, field
import logging

from cib_detector.core.config import DetectorConfig
from cib_detector.core.models import GraphNode, GraphLink, ClusterAssignment, RiskRecord
from cib_detector.metrics.network_metrics import NetworkMetricsCalculator, NetworkSummary
from cib_detector.metrics.community_detection import LouvainCommunityDetector

logger = logging.getLogger(__name__)

USER_NODE_PREFIX = 'u_'


@dataclass
class GraphAnalysis:
    """Annotated graph of one run."""
    nodes: List[GraphNode]
    links: List[GraphLink]
    summary: Optional[NetworkSummary]
    clusters: Optional[ClusterAssignment]
    cluster_stats: Dict[int, Dict[str, Any]] = field(default_factory=dict)

    @property
    def suspicious_nodes(self) -> List[GraphNode]:
        return [node for node in self.nodes if node.suspicious]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'summary': self.summary.to_dict(rounded=True) if self.summary else None,
            'clusters': {
                'count': self.clusters.count,
                'total': self.clusters.total,
                'noise_id': self.clusters.noise_id,
                'min_cluster_size': self.clusters.min_cluster_size
            } if self.clusters else None,
            'cluster_stats': {str(cid): stats for cid, stats in self.cluster_stats.items()},
            'suspicious_nodes': [node.id for node in self.suspicious_nodes]
        }


def match_risk_record(node: GraphNode, records: Dict[str, RiskRecord]) -> Optional[RiskRecord]:
    """Record for a node id, trying the id without its user prefix as well."""
    record = records.get(node.id)
    if record is None and node.id.startswith(USER_NODE_PREFIX):
        record = records.get(node.id[len(USER_NODE_PREFIX):])
    return record


def analyze_graph(nodes: List[GraphNode], links: List[GraphLink],
                  risk_records: Optional[Dict[str, RiskRecord]] = None,
                  config: Optional[DetectorConfig] = None,
                  rng: Optional[random.Random] = None) -> GraphAnalysis:
    """
    Compute metrics and communities, and mark suspicious nodes.

    Args:
        nodes: Graph nodes (annotations are reset, then rewritten)
        links: Undirected links
        risk_records: Risk records of a detection run, keyed by user id
        config: Configuration (seed and level cap for community detection)
        rng: Random generator overriding the configured seed

    Returns:
        GraphAnalysis
    """
    config = config or DetectorConfig()
    risk_records = risk_records or {}

    for node in nodes:
        node.reset_annotations()

    summary = NetworkMetricsCalculator().calculate(nodes, links)

    detector = LouvainCommunityDetector(rng=rng, seed=config.random_seed,
                                        max_levels=config.max_louvain_levels)
    clusters = detector.detect([node.id for node in nodes], links)
    if clusters is not None:
        for node in nodes:
            node.assign_community(clusters.assignments[node.id])

    flagged = []
    for node in nodes:
        record = match_risk_record(node, risk_records)
        if record is not None:
            node.suspicious = True
            node.risk_score = record.score
            node.reasons = list(record.reasons)
            flagged.append(node.id)

    cluster_stats = clusters.cluster_stats(flagged) if clusters is not None else {}
    logger.info(f"Graph analysis: {len(nodes)} nodes, {len(flagged)} suspicious, "
                f"{clusters.count if clusters else 0} communities")

    return GraphAnalysis(
        nodes=nodes,
        links=links,
        summary=summary,
        clusters=clusters,
        cluster_stats=cluster_stats
    )
