"""
Selection Controller - single source of truth for which node is being edited.

Two states: Idle (nothing selected) and Editing(node_id). Edits made in the
settings panel go straight to the store on every change, so switching the
selection never loses anything. The only local copy is the panel's draft
text, which is re-read from the store whenever the selected node changes.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from flowbuilder.models import FlowSnapshot, Node
from flowbuilder.store import FlowStore

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ('label', 'message')


@dataclass(frozen=True)
class SelectionState:
    """Immutable snapshot of current selection state."""
    node_id: Optional[str] = None
    draft_message: str = ''

    @property
    def is_editing(self) -> bool:
        return self.node_id is not None


IDLE = SelectionState()


class SelectionCoordinator:
    """Tracks the selected node and routes panel edits into the store."""

    def __init__(self, store: FlowStore):
        self.store = store
        self._state = IDLE
        self._on_state_change: Optional[Callable[[SelectionState], None]] = None
        store.subscribe(self._on_store_change)

    @property
    def state(self) -> SelectionState:
        return self._state

    @property
    def selected_node(self) -> Optional[Node]:
        if not self._state.is_editing:
            return None
        return self.store.get_node(self._state.node_id)

    def set_on_state_change(self, callback: Callable[[SelectionState], None]):
        self._on_state_change = callback

    def _transition(self, state: SelectionState) -> SelectionState:
        if state != self._state:
            self._state = state
            if self._on_state_change:
                self._on_state_change(state)
        return self._state

    # --- Transitions ---

    def select_node(self, node_id: str) -> SelectionState:
        node = self.store.get_node(node_id)
        if node is None:
            logger.warning(f"Click on unknown node {node_id}; staying idle")
            return self._transition(IDLE)
        if node_id == self._state.node_id:
            return self._state
        return self._transition(SelectionState(node_id=node_id, draft_message=node.data.message))

    def click_pane(self) -> SelectionState:
        return self._transition(IDLE)

    def close(self) -> SelectionState:
        return self._transition(IDLE)

    # --- Edits ---

    def edit_field(self, field: str, value: str) -> bool:
        """Commit one field of the selected node's data to the store."""
        if field not in EDITABLE_FIELDS:
            raise ValueError(f"Unknown node field: {field}")
        node = self.selected_node
        if node is None:
            return False
        return self.store.patch_node_data(node.id, node.data.replace(**{field: value}))

    def edit_message(self, text: str) -> bool:
        if not self._state.is_editing:
            return False
        self._transition(SelectionState(node_id=self._state.node_id, draft_message=text))
        return self.edit_field('message', text)

    def edit_label(self, text: str) -> bool:
        return self.edit_field('label', text)

    def _on_store_change(self, snapshot: FlowSnapshot) -> None:
        # Selected node was removed from the graph
        if self._state.is_editing and self._state.node_id not in snapshot.node_ids():
            self._transition(IDLE)
