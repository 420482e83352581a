"""
Main NiceGUI application for the Chatbot Flow Builder.

Each browser session gets its own FlowStore/FlowActions pair; the page only
renders snapshots and forwards gestures. The graph is drawn with ui.echart.
"""

import logging
import sys

from dotenv import load_dotenv
from nicegui import ui

load_dotenv()

from flowbuilder.config import load_settings
from flowbuilder.edit import FlowActions, setup_flow_handlers
from flowbuilder.edit.constants import CANVAS_CLASS
from flowbuilder.edit.handlers import (
    DROP_EVENT,
    NODE_MOVED_EVENT,
    PANE_CLICK_EVENT,
    VIEW_EVENT,
    install_canvas_scripts,
)
from flowbuilder.export import json_file_sink, log_sink
from flowbuilder.graph_viz import REQUESTED_EVENT_KEYS, FlowVisualizer
from flowbuilder.models import ConnectionProposal
from flowbuilder.notifications import NotificationCenter
from flowbuilder.panels import (
    hosted_scheduler,
    render_header,
    render_nodes_panel,
    render_settings_panel,
    show_notification,
)
from flowbuilder.paths import resolve_export_path
from flowbuilder.store import FlowStore, NodeIdCounter

settings = load_settings()

logging.basicConfig(
    level=getattr(logging, settings.log_level, logging.INFO),
    format='%(asctime)s %(levelname)s %(name)s: %(message)s',
)
logger = logging.getLogger(__name__)


def build_actions(timer_host) -> FlowActions:
    store = FlowStore(id_counter=NodeIdCounter(start=1, prefix=settings.node_id_prefix))
    notifications = NotificationCenter(
        scheduler=hosted_scheduler(timer_host),
        timeout_ms=settings.notification_timeout_ms,
    )
    sink = json_file_sink(resolve_export_path(settings.export_path)) if settings.export_path else log_sink
    return FlowActions(store, notifications, export_sink=sink)


def restore_saved_flow(actions: FlowActions) -> None:
    """Open the page on the last saved flow when an export file exists."""
    if not settings.export_path:
        return
    path = resolve_export_path(settings.export_path)
    if path.exists():
        actions.load_flow_file(path)


@ui.page('/')
def main_page():
    ui.dark_mode().enable()
    ui.query('.nicegui-content').classes('p-0 gap-0')

    # Notification timers live here, outside every refreshable panel
    timer_host = ui.element('div').classes('hidden')

    actions = build_actions(timer_host)
    visualizer = FlowVisualizer()
    state = {
        'chart': None,
        'panel_node_id': None,
    }

    def get_current_options():
        return visualizer.generate_echarts(
            actions.store.snapshot(),
            selected_id=actions.selection.state.node_id,
        )

    def refresh_chart_ui(*_):
        if state['chart']:
            state['chart'].options.clear()
            state['chart'].options.update(get_current_options())
            state['chart'].update()

    def handle_save():
        try:
            actions.save()
        except Exception as e:
            logger.error(f"Save failed: {e}")
            ui.notify(f'Save failed: {e}', type='negative', position='bottom')

    def handle_connect(target_id: str) -> bool:
        node = actions.selection.selected_node
        if node is None:
            return False
        verdict = actions.on_connect(ConnectionProposal(source=node.id, target=target_id))
        if verdict.accepted:
            left_panel.refresh()
        return verdict.accepted

    def handle_disconnect():
        node = actions.selection.selected_node
        if node is None:
            return
        for edge in actions.store.outgoing_edges(node.id):
            actions.delete_edge(edge.id)
        left_panel.refresh()

    @ui.refreshable
    def left_panel():
        node = actions.selection.selected_node
        state['panel_node_id'] = node.id if node else None
        if node is None:
            render_nodes_panel()
            return

        snapshot = actions.store.snapshot()
        next_options = {
            n.id: f'{n.data.label} ({n.id})'
            for n in snapshot.nodes
        }
        outgoing = actions.store.outgoing_edges(node.id)
        render_settings_panel(
            node=node,
            draft_message=actions.selection.state.draft_message,
            next_options=next_options,
            current_next=outgoing[0].target if outgoing else None,
            on_message_change=actions.edit_message,
            on_connect=handle_connect,
            on_disconnect=handle_disconnect,
            on_delete=actions.delete_selected,
            on_close=actions.close_settings,
        )

    def on_selection_change(selection_state):
        # Rebuild only when the selected identity changes, not per keystroke
        if selection_state.node_id != state['panel_node_id']:
            left_panel.refresh()
            refresh_chart_ui()

    actions.selection.set_on_state_change(on_selection_change)
    actions.store.subscribe(refresh_chart_ui)

    # --- Layout Construction ---

    header = render_header(settings.title, handle_save)
    actions.notifications.subscribe(lambda n: show_notification(header['banner'], n))
    restore_saved_flow(actions)

    with ui.row().classes('w-full no-wrap gap-0').style('height: calc(100vh - 64px)'):
        left_panel()
        with ui.element('div').classes(f'{CANVAS_CLASS} grow h-full relative'):
            state['chart'] = ui.echart(get_current_options())
            state['chart'].classes('w-full h-full')

    handlers = setup_flow_handlers(actions=actions, refresh_chart_ui=refresh_chart_ui)

    # Delete/Backspace on the selected node; ui.keyboard skips text inputs
    ui.keyboard(on_key=handlers['handle_keyboard'])

    # 'componentClick' captures node clicks; background clicks come from the zrender hook
    state['chart'].on('componentClick', handlers['handle_chart_click'], REQUESTED_EVENT_KEYS)
    state['chart'].on('chart:graphroam', handlers['handle_roam'])
    ui.on(DROP_EVENT, handlers['handle_drop'])
    ui.on(PANE_CLICK_EVENT, handlers['handle_pane_click'])
    ui.on(VIEW_EVENT, handlers['handle_view'])
    ui.on(NODE_MOVED_EVENT, handlers['handle_node_moved'])

    install_canvas_scripts(state['chart'].id)


if __name__ in {"__main__", "__mp_main__"}:
    ui.run(
        title=settings.title,
        port=settings.port,
        reload=not getattr(sys, 'frozen', False),
    )
