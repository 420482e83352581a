"""
Shared constants for the flow editing surface.

These values are used by both Python (graph_viz, handlers) and the
JavaScript snippets injected by handlers.py. Keep them in sync!
"""

# Node colors (selected vs. regular)
NODE_COLOR = '#6366f1'
SELECTED_NODE_COLOR = '#818cf8'
EDGE_COLOR = '#94a3b8'

# Node box size in pixels (ECharts 'rect' symbol)
NODE_WIDTH = 180
NODE_HEIGHT = 60

# Characters of the message shown on the node before truncation
MESSAGE_PREVIEW_CHARS = 40

# Shown on a node whose message is empty
EMPTY_MESSAGE_PLACEHOLDER = 'Click to edit message'

# CSS class marking the canvas wrapper that receives drop events
CANVAS_CLASS = 'flow-canvas'
