"""
Placement Translator - turns a drop on the canvas into a new message node.

The camera (pan + zoom) belongs to the rendering layer. This module only asks
it for a screen -> graph conversion through the CanvasTransform protocol and
never does camera math of its own beyond the simple ViewportTransform the
ECharts adapter hands in.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Mapping, Optional, Protocol, runtime_checkable

from flowbuilder.errors import MissingDragPayload, UninitializedCanvas
from flowbuilder.models import Node, NodeData, NodeType, Position
from flowbuilder.store import FlowStore

logger = logging.getLogger(__name__)

# Drag payload protocol shared with the nodes panel
DRAG_MIME_TYPE = "application/reactflow"
TEXT_NODE_TOKEN = "textNode"

# Drag token -> node type it creates
NODE_KINDS: Dict[str, NodeType] = {
    TEXT_NODE_TOKEN: NodeType.MESSAGE,
}


@runtime_checkable
class CanvasTransform(Protocol):
    def screen_to_graph(self, x: float, y: float) -> Position:
        ...


@dataclass(frozen=True)
class ViewportTransform:
    """
    Screen -> graph mapping for a canvas panned by (pan_x, pan_y) and scaled
    by `zoom`, whose top-left corner sits at (origin_x, origin_y) on screen.
    The defaults are the identity transform.
    """
    pan_x: float = 0.0
    pan_y: float = 0.0
    zoom: float = 1.0
    origin_x: float = 0.0
    origin_y: float = 0.0

    def screen_to_graph(self, x: float, y: float) -> Position:
        zoom = self.zoom or 1.0
        return Position(
            x=(x - self.origin_x - self.pan_x) / zoom,
            y=(y - self.origin_y - self.pan_y) / zoom,
        )

    def panned(self, dx: float, dy: float) -> "ViewportTransform":
        return ViewportTransform(self.pan_x + dx, self.pan_y + dy, self.zoom, self.origin_x, self.origin_y)

    def zoomed(self, factor: float, around_x: float = 0.0, around_y: float = 0.0) -> "ViewportTransform":
        """Scale by `factor` keeping the screen point (around_x, around_y) fixed."""
        ox = around_x - self.origin_x
        oy = around_y - self.origin_y
        return ViewportTransform(
            pan_x=ox - (ox - self.pan_x) * factor,
            pan_y=oy - (oy - self.pan_y) * factor,
            zoom=self.zoom * factor,
            origin_x=self.origin_x,
            origin_y=self.origin_y,
        )


def drag_start_payload(node_kind: str = TEXT_NODE_TOKEN) -> Dict[str, str]:
    """Payload the nodes panel attaches to a drag gesture."""
    return {DRAG_MIME_TYPE: node_kind}


class PlacementTranslator:
    """Mints new nodes where the user drops them."""

    def __init__(self, store: FlowStore, canvas: CanvasTransform = None):
        self.store = store
        self._canvas = canvas

    @property
    def canvas(self) -> Optional[CanvasTransform]:
        return self._canvas

    @property
    def is_ready(self) -> bool:
        return self._canvas is not None

    def attach_canvas(self, canvas: CanvasTransform) -> None:
        self._canvas = canvas

    def detach_canvas(self) -> None:
        self._canvas = None

    def drag_over(self) -> str:
        """Drop effect to advertise while something is dragged over the canvas."""
        return "move"

    def check_drop(self, payload: Optional[Mapping[str, str]]) -> NodeType:
        """
        Resolve the node type a drop would create.

        Raises MissingDragPayload or UninitializedCanvas when the drop must be
        ignored.
        """
        token = (payload or {}).get(DRAG_MIME_TYPE)
        if not token or token not in NODE_KINDS:
            raise MissingDragPayload()
        if self._canvas is None:
            raise UninitializedCanvas()
        return NODE_KINDS[token]

    def drop(self, payload: Optional[Mapping[str, str]], screen_x: float, screen_y: float) -> Optional[Node]:
        """
        Create a node at the graph position under (screen_x, screen_y).

        Returns None, silently, if the payload carries no known token or the
        canvas has not initialised its transform yet.
        """
        try:
            node_type = self.check_drop(payload)
        except (MissingDragPayload, UninitializedCanvas) as e:
            logger.debug(f"{e.message} (payload={payload!r})")
            return None

        position = self._canvas.screen_to_graph(screen_x, screen_y)
        return self.store.create_node(position, NodeData(), node_type)
