"""
Editing surface for the flow graph.

This package connects user gestures to the flow state:
- SelectionCoordinator: which node is being edited, and routing of edits
- FlowActions: one method per gesture (drop, connect, click, edit, save)
- flow handlers: NiceGUI/ECharts event plumbing for app.py

Usage:
    from flowbuilder.edit import FlowActions, SelectionCoordinator
    from flowbuilder.edit.handlers import setup_flow_handlers
"""

from flowbuilder.edit.controller import SelectionCoordinator, SelectionState
from flowbuilder.edit.actions import FlowActions
from flowbuilder.edit.handlers import setup_flow_handlers

__all__ = [
    'SelectionCoordinator',
    'SelectionState',
    'FlowActions',
    'setup_flow_handlers',
]
