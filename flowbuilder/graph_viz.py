"""
Graph visualizer that produces an ECharts-compatible configuration for
rendering the flow on the canvas.

Nodes keep the positions stored in the flow (layout 'none'), so what the user
sees is exactly where they dropped or dragged each message. The output is a
plain dict that can be passed to NiceGUI's ui.echart.
"""

from typing import Any, Dict, Optional

import networkx as nx

from flowbuilder.edit.constants import (
    EDGE_COLOR,
    EMPTY_MESSAGE_PLACEHOLDER,
    MESSAGE_PREVIEW_CHARS,
    NODE_COLOR,
    NODE_HEIGHT,
    NODE_WIDTH,
    SELECTED_NODE_COLOR,
)
from flowbuilder.models import FlowSnapshot


def message_preview(message: str, limit: int = MESSAGE_PREVIEW_CHARS) -> str:
    text = (message or '').strip()
    if not text:
        return EMPTY_MESSAGE_PLACEHOLDER
    if len(text) > limit:
        return text[:limit - 1].rstrip() + '…'
    return text


class FlowVisualizer:
    """
    Build an ECharts configuration (dict) for a flow snapshot.

    The returned dict follows an ECharts option pattern with a single
    'graph' series:
      {
        "series": [
          {
            "type": "graph",
            "layout": "none",
            "roam": True,
            "data": [...],
            "links": [...],
            ...
          }
        ]
      }
    """

    def __init__(self):
        self.G = nx.DiGraph()

    def generate_echarts(self, snapshot: FlowSnapshot, selected_id: Optional[str] = None) -> Dict[str, Any]:
        # Clear and rebuild graph
        self.G = nx.DiGraph()
        for node in snapshot.nodes:
            self.G.add_node(
                node.id,
                label=node.data.label,
                message=node.data.message,
                x=node.position.x,
                y=node.position.y,
            )
        for edge in snapshot.edges:
            # Only add edges if both nodes exist
            if edge.source in self.G.nodes and edge.target in self.G.nodes:
                self.G.add_edge(edge.source, edge.target, id=edge.id)

        data = []
        for n, attrs in self.G.nodes(data=True):
            is_selected = n == selected_id
            data.append({
                "id": n,
                "name": n,
                "x": attrs["x"],
                "y": attrs["y"],
                "symbol": "roundRect",
                "symbolSize": [NODE_WIDTH, NODE_HEIGHT],
                "itemStyle": {
                    "color": SELECTED_NODE_COLOR if is_selected else NODE_COLOR,
                    "borderColor": "#ffffff" if is_selected else NODE_COLOR,
                    "borderWidth": 2 if is_selected else 0,
                },
                "label": {
                    "show": True,
                    "formatter": f"{attrs['label']}\n{message_preview(attrs['message'])}",
                    "color": "#ffffff",
                },
            })

        links = []
        for src, tgt, attrs in self.G.edges(data=True):
            links.append({
                "id": attrs.get("id"),
                "source": src,
                "target": tgt,
                "lineStyle": {"color": EDGE_COLOR, "width": 2, "opacity": 0.9},
            })

        return {
            "animation": False,
            "series": [
                {
                    "type": "graph",
                    "layout": "none",
                    "coordinateSystem": None,
                    "roam": True,
                    "draggable": True,
                    "edgeSymbol": ["none", "arrow"],
                    "edgeSymbolSize": 10,
                    "data": data,
                    "links": links,
                    "emphasis": {"focus": "adjacency"},
                }
            ]
        }


# Event keys we request from ECharts click events
REQUESTED_EVENT_KEYS = ['componentType', 'name', 'dataType', 'value']


def normalize_click_payload(raw: Any) -> Dict[str, Any]:
    """
    Bring a componentClick payload into dict form.

    NiceGUI sends the requested keys either as a dict or positionally, in
    REQUESTED_EVENT_KEYS order; a bare string is taken as the node name.
    """
    if isinstance(raw, dict):
        return raw
    if isinstance(raw, str):
        return {'name': raw}
    if isinstance(raw, (list, tuple)):
        # zip stops at the shorter side, extra positions are dropped
        return dict(zip(REQUESTED_EVENT_KEYS, raw))
    return {}


def resolve_node_id_from_payload(payload: Dict[str, Any], snapshot: FlowSnapshot) -> Optional[str]:
    """Return the clicked node id, or None for edges, background and unknown names."""
    if not isinstance(payload, dict):
        return None
    if payload.get('componentType') != 'series':
        return None
    if payload.get('dataType') == 'edge':
        return None

    node_id = payload.get('name')
    if not node_id:
        return None

    if node_id in snapshot.node_ids():
        return node_id
    return None
