"""
Error taxonomy for flow editing.

Every error here is recoverable and user-facing. Validators hand them back
inside a verdict instead of raising, so a rejected gesture leaves the graph
exactly as it was.
"""


class FlowError(Exception):
    """Base class. `message` is the text shown to the user."""

    message = "Flow error"

    def __init__(self, message: str = None):
        self.message = message or self.message
        super().__init__(self.message)


class DuplicateOutgoingConnection(FlowError):
    message = "A node can only have one outgoing connection"


class InsufficientNodes(FlowError):
    message = "Flow must have more than one node"


class DisconnectedNodes(FlowError):
    message = "Cannot save Flow - all nodes must be connected"

    def __init__(self, node_ids=(), message: str = None):
        self.node_ids = tuple(node_ids)
        super().__init__(message)


class MissingDragPayload(FlowError):
    message = "Drop ignored: no node type in drag payload"


class UninitializedCanvas(FlowError):
    message = "Drop ignored: canvas not ready"


class ExportFailed(FlowError):
    message = "Cannot save Flow - export failed"
