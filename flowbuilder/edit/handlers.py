"""
Flow Handlers - event handlers for the canvas in app.py

This module keeps the browser-event plumbing (ECharts clicks, pan/zoom,
HTML5 drag and drop, node dragging, delete keys) out of app.py. Every handler
translates a raw event into one FlowActions call and asks the page to
re-render.
"""

import logging
from typing import Any, Callable, Dict, Optional

from nicegui import ui

from flowbuilder.edit.actions import FlowActions
from flowbuilder.edit.constants import CANVAS_CLASS
from flowbuilder.graph_viz import normalize_click_payload, resolve_node_id_from_payload
from flowbuilder.placement import DRAG_MIME_TYPE, ViewportTransform

logger = logging.getLogger(__name__)

# Custom DOM events forwarded to Python with emitEvent()
DROP_EVENT = 'flow_drop'
PANE_CLICK_EVENT = 'flow_pane_click'
VIEW_EVENT = 'flow_view'
NODE_MOVED_EVENT = 'flow_node_moved'

# Keys that delete the node open in the settings panel
DELETE_KEYS = ('Delete', 'Backspace')


def position_change_from_event(args: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """
    Turn a drag-end report {id, x, y} (graph coordinates) into a node change.
    Returns None when the report is incomplete.
    """
    if not isinstance(args, dict):
        return None
    node_id = args.get('id')
    x, y = args.get('x'), args.get('y')
    if not node_id or x is None or y is None:
        return None
    return {'type': 'position', 'id': node_id, 'position': {'x': float(x), 'y': float(y)}}


def viewport_from_event(view: Dict[str, Any]) -> ViewportTransform:
    """
    Build the canvas transform from what the browser reports.

    `view` carries the canvas rect origin plus two probe points converted
    from pixel to graph space by ECharts: p0 for pixel (0, 0) and p1 for
    pixel (100, 100) relative to the canvas. Missing probes (empty chart)
    give the identity transform anchored at the canvas origin.
    """
    origin_x = float(view.get('left', 0) or 0)
    origin_y = float(view.get('top', 0) or 0)
    p0, p1 = view.get('p0'), view.get('p1')
    if not p0 or not p1:
        return ViewportTransform(origin_x=origin_x, origin_y=origin_y)

    span = float(p1[0]) - float(p0[0])
    if span == 0:
        return ViewportTransform(origin_x=origin_x, origin_y=origin_y)
    zoom = 100.0 / span
    return ViewportTransform(
        pan_x=-float(p0[0]) * zoom,
        pan_y=-float(p0[1]) * zoom,
        zoom=zoom,
        origin_x=origin_x,
        origin_y=origin_y,
    )


def install_canvas_scripts(chart_id: int) -> None:
    """
    Inject the JS glue: dragstart on palette cards, drop on the canvas, node
    drag-end reports and background clicks on the chart.
    """
    ui.add_body_html(f'''
        <script>
            window.flowViewState = function() {{
                const el = document.querySelector('.{CANVAS_CLASS}');
                const rect = el ? el.getBoundingClientRect() : {{left: 0, top: 0}};
                const view = {{left: rect.left, top: rect.top, p0: null, p1: null}};
                try {{
                    const chart = getElement({chart_id}).chart;
                    view.p0 = chart.convertFromPixel({{seriesIndex: 0}}, [0, 0]) || null;
                    view.p1 = chart.convertFromPixel({{seriesIndex: 0}}, [100, 100]) || null;
                }} catch (e) {{}}
                return view;
            }};

            document.addEventListener('dragstart', function(e) {{
                const card = e.target.closest ? e.target.closest('[data-node-kind]') : null;
                if (!card) return;
                e.dataTransfer.setData('{DRAG_MIME_TYPE}', card.dataset.nodeKind);
                e.dataTransfer.effectAllowed = 'move';
            }});

            document.addEventListener('dragover', function(e) {{
                if (!e.target.closest || !e.target.closest('.{CANVAS_CLASS}')) return;
                e.preventDefault();
                e.dataTransfer.dropEffect = 'move';
            }});

            document.addEventListener('drop', function(e) {{
                if (!e.target.closest || !e.target.closest('.{CANVAS_CLASS}')) return;
                e.preventDefault();
                const payload = {{}};
                const kind = e.dataTransfer.getData('{DRAG_MIME_TYPE}');
                if (kind) payload['{DRAG_MIME_TYPE}'] = kind;
                emitEvent('{DROP_EVENT}', {{
                    payload: payload,
                    clientX: e.clientX,
                    clientY: e.clientY,
                    view: window.flowViewState(),
                }});
            }});

            setTimeout(function() {{
                try {{
                    const chart = getElement({chart_id}).chart;
                    chart.getZr().on('click', function(e) {{
                        if (!e.target) emitEvent('{PANE_CLICK_EVENT}', {{}});
                    }});
                    chart.on('mouseup', function(params) {{
                        if (params.dataType !== 'node' || !params.data) return;
                        const data = chart.getModel().getSeriesByIndex(0).getData();
                        const layout = data.getItemLayout(params.dataIndex);
                        if (!layout) return;
                        if (layout[0] === params.data.x && layout[1] === params.data.y) return;
                        emitEvent('{NODE_MOVED_EVENT}', {{id: params.data.id, x: layout[0], y: layout[1]}});
                    }});
                    emitEvent('{VIEW_EVENT}', window.flowViewState());
                }} catch (e) {{
                    console.log('Flow canvas not ready', e);
                }}
            }}, 300);
        </script>
    ''')


def setup_flow_handlers(
    actions: FlowActions,
    refresh_chart_ui: Callable,
):
    """
    Set up all canvas event handlers.

    Selection changes reach the side panel through the coordinator's
    state-change callback, so only the chart needs an explicit refresh here.

    Args:
        actions: FlowActions instance owning the flow state
        refresh_chart_ui: Function to redraw the chart from the store

    Returns:
        Dict with handler functions for binding to UI events
    """

    def handle_chart_click(event):
        raw = event.args if hasattr(event, 'args') else event
        payload = normalize_click_payload(raw)
        node_id = resolve_node_id_from_payload(payload, actions.store.snapshot())
        if node_id:
            actions.on_node_click(node_id)
            refresh_chart_ui()

    def handle_pane_click(event=None):
        if actions.selection.state.is_editing:
            actions.on_pane_click()
            refresh_chart_ui()

    def handle_view(event):
        view = event.args if hasattr(event, 'args') else event
        actions.on_init(viewport_from_event(view or {}))

    def handle_drop(event):
        args = event.args if hasattr(event, 'args') else event
        try:
            view = args.get('view')
            if view:
                actions.on_init(viewport_from_event(view))
            node = actions.on_drop(args.get('payload'), args.get('clientX', 0), args.get('clientY', 0))
        except Exception as e:
            logger.error(f"Drop failed: {e}")
            ui.notify(f'Drop failed: {e}', type='negative', position='bottom')
            return
        # The store listener redraws the chart for a created node
        if node is None:
            logger.debug("Drop produced no node")

    def handle_roam(event):
        """Pan/zoom changed; ask the browser for the new transform."""
        ui.run_javascript(f"emitEvent('{VIEW_EVENT}', window.flowViewState());")

    def handle_node_moved(event):
        args = event.args if hasattr(event, 'args') else event
        change = position_change_from_event(args)
        if change is None:
            logger.debug(f"Ignoring incomplete drag report: {args!r}")
            return
        actions.on_nodes_change([change])

    def handle_keyboard(e):
        """Delete/Backspace removes the selected node; text inputs are ignored by ui.keyboard."""
        if not e.action.keydown or e.action.repeat:
            return
        if e.key in DELETE_KEYS:
            actions.delete_selected()

    return {
        'handle_chart_click': handle_chart_click,
        'handle_pane_click': handle_pane_click,
        'handle_view': handle_view,
        'handle_drop': handle_drop,
        'handle_roam': handle_roam,
        'handle_node_moved': handle_node_moved,
        'handle_keyboard': handle_keyboard,
    }
