"""
Flow Actions - the gesture surface of the editor.

Each method handles one user gesture coming from the rendering layer
(drop, connect, click, edit, save), applies it to the FlowStore through the
owning component and raises a transient notification where the user needs
to hear about the outcome.
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from flowbuilder.connection import ConnectionVerdict
from flowbuilder.edit.controller import SelectionCoordinator, SelectionState
from flowbuilder.errors import ExportFailed
from flowbuilder.export import ExportSink, log_sink, read_flow_file
from flowbuilder.models import ConnectionProposal, Node
from flowbuilder.notifications import NotificationCenter
from flowbuilder.placement import CanvasTransform, PlacementTranslator
from flowbuilder.save_validation import SaveResult, validate_save
from flowbuilder.store import FlowStore

logger = logging.getLogger(__name__)


class FlowActions:
    """
    Wires the store, placement, selection and notifications together.

    All methods run synchronously on the UI thread; the only deferred work
    is the notification auto-clear owned by NotificationCenter.
    """

    def __init__(self, store: FlowStore, notifications: NotificationCenter,
                 export_sink: ExportSink = None):
        self.store = store
        self.notifications = notifications
        self.placement = PlacementTranslator(store)
        self.selection = SelectionCoordinator(store)
        self.export_sink = export_sink or log_sink

    # --- Canvas lifecycle ---

    def on_init(self, canvas: CanvasTransform) -> None:
        self.placement.attach_canvas(canvas)

    # --- Drag and drop ---

    def on_drag_over(self) -> str:
        return self.placement.drag_over()

    def on_drop(self, payload: Optional[Mapping[str, str]], screen_x: float, screen_y: float) -> Optional[Node]:
        return self.placement.drop(payload, screen_x, screen_y)

    # --- Connections ---

    def on_connect(self, proposal: ConnectionProposal) -> ConnectionVerdict:
        verdict = self.store.add_edge(proposal)
        if not verdict.accepted:
            self.notifications.error(verdict.reason)
        return verdict

    # --- Selection and editing ---

    def on_node_click(self, node_id: str) -> SelectionState:
        return self.selection.select_node(node_id)

    def on_pane_click(self) -> SelectionState:
        return self.selection.click_pane()

    def close_settings(self) -> SelectionState:
        return self.selection.close()

    def edit_message(self, text: str) -> bool:
        return self.selection.edit_message(text)

    # --- Changes emitted by the canvas ---

    def on_nodes_change(self, changes: List[Dict[str, Any]]) -> None:
        self.store.apply_node_changes(changes)

    def on_edges_change(self, changes: List[Dict[str, Any]]) -> None:
        self.store.apply_edge_changes(changes)

    def delete_node(self, node_id: str) -> None:
        self.on_nodes_change([{"type": "remove", "id": node_id}])

    def delete_selected(self) -> bool:
        """Delete the node open in the settings panel, if any."""
        node = self.selection.selected_node
        if node is None:
            return False
        self.delete_node(node.id)
        return True

    def delete_edge(self, edge_id: str) -> None:
        self.on_edges_change([{"type": "remove", "id": edge_id}])

    # --- Save and restore ---

    def save(self) -> SaveResult:
        """
        Validate the flow and hand it to the export sink when valid.

        Success is only reported once the sink has returned. A failing sink
        turns the save into an ExportFailed result.
        """
        snapshot = self.store.snapshot()
        result = validate_save(snapshot.nodes, snapshot.edges)
        if not result.ok:
            logger.warning(f"Save rejected: {result.reason}")
            self.notifications.error(result.reason)
            return result

        try:
            self.export_sink(snapshot.to_dict())
        except Exception as e:
            logger.error(f"Export failed: {e}")
            error = ExportFailed(f"{ExportFailed.message}: {e}")
            self.notifications.error(error.message)
            return SaveResult(ok=False, error=error)

        self.notifications.success(result.reason)
        return result

    def load_flow_file(self, path: Path) -> bool:
        """
        Replace the graph with a previously saved flow.

        An unreadable or malformed file leaves the current graph alone and
        raises an error notification.
        """
        try:
            snapshot = read_flow_file(path)
        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.warning(f"Could not load flow from {path}: {e}")
            self.notifications.error(f"Could not load flow: {e}")
            return False
        self.selection.close()
        self.store.load(snapshot)
        return True
