"""
Connection legality.

A node's source port is exclusive: once an edge leaves (source, source_handle)
no second edge may leave the same port. Target ports take any number of
incoming edges. Self-loops and cycles are allowed.
"""

from dataclasses import dataclass
from typing import Iterable, Optional

from flowbuilder.errors import DuplicateOutgoingConnection, FlowError
from flowbuilder.models import ConnectionProposal, Edge


@dataclass(frozen=True)
class ConnectionVerdict:
    accepted: bool
    edge: Optional[Edge] = None
    error: Optional[FlowError] = None

    @property
    def reason(self) -> Optional[str]:
        return self.error.message if self.error else None


def source_port_taken(proposal: ConnectionProposal, edges: Iterable[Edge]) -> bool:
    return any(
        e.source == proposal.source and e.source_handle == proposal.source_handle
        for e in edges
    )


def validate_connection(proposal: ConnectionProposal, edges: Iterable[Edge]) -> ConnectionVerdict:
    """
    Decide whether `proposal` may be added on top of `edges`.

    Returns an accepted verdict carrying the edge that would be created, or a
    rejected one carrying DuplicateOutgoingConnection.
    """
    if source_port_taken(proposal, edges):
        return ConnectionVerdict(accepted=False, error=DuplicateOutgoingConnection())
    return ConnectionVerdict(accepted=True, edge=Edge.from_proposal(proposal))
