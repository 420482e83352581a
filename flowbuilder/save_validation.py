"""
Save-time structural checks.

A flow may be saved when it has more than one node and no node is fully
isolated. A node with only incoming or only outgoing edges is fine.
"""

from dataclasses import dataclass, field
from typing import Iterable, Optional, Tuple

import networkx as nx

from flowbuilder.errors import DisconnectedNodes, FlowError, InsufficientNodes
from flowbuilder.models import Edge, Node

SAVE_SUCCESS_MESSAGE = "Flow saved successfully!"


@dataclass(frozen=True)
class SaveResult:
    ok: bool
    error: Optional[FlowError] = None
    isolated_node_ids: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def reason(self) -> str:
        return self.error.message if self.error else SAVE_SUCCESS_MESSAGE

    def raise_for_error(self) -> None:
        if self.error is not None:
            raise self.error


def build_graph(nodes: Iterable[Node], edges: Iterable[Edge]) -> nx.DiGraph:
    """Directed graph of the flow. Edges to unknown nodes are left out."""
    G = nx.DiGraph()
    for node in nodes:
        G.add_node(node.id, label=node.data.label)
    for edge in edges:
        if edge.source in G.nodes and edge.target in G.nodes:
            G.add_edge(edge.source, edge.target, id=edge.id)
    return G


def find_isolated_nodes(nodes: Iterable[Node], edges: Iterable[Edge]) -> Tuple[str, ...]:
    nodes = list(nodes)
    G = build_graph(nodes, edges)
    isolated = set(nx.isolates(G))
    # keep flow order rather than networkx's iteration order
    return tuple(n.id for n in nodes if n.id in isolated)


def validate_save(nodes: Iterable[Node], edges: Iterable[Edge]) -> SaveResult:
    nodes = list(nodes)
    edges = list(edges)

    if len(nodes) <= 1:
        return SaveResult(ok=False, error=InsufficientNodes())

    isolated = find_isolated_nodes(nodes, edges)
    if isolated:
        return SaveResult(ok=False, error=DisconnectedNodes(isolated), isolated_node_ids=isolated)

    return SaveResult(ok=True)
