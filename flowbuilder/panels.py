from typing import Callable, Dict, Optional

from nicegui import ui

from flowbuilder.models import Node
from flowbuilder.notifications import ERROR, Notification
from flowbuilder.placement import TEXT_NODE_TOKEN

NOTIFICATION_CLASSES = {
    'success': 'bg-green-900/60 text-green-300 border border-green-600',
    'error': 'bg-red-900/60 text-red-300 border border-red-600',
}


def render_header(title: str, on_save: Callable[[], None]) -> Dict[str, ui.label]:
    """
    Renders the top bar: title, notification banner and the save button.
    Returns the banner label so the page can update it via show_notification().
    """
    with ui.row().classes('w-full items-center justify-between px-6 py-3 bg-slate-900 border-b border-slate-700'):
        with ui.row().classes('items-center gap-2'):
            ui.label('💬').classes('text-xl')
            ui.label(title).classes('text-lg font-bold text-gray-100')

        banner = ui.label('').classes('px-4 py-1 rounded text-sm')
        banner.set_visibility(False)

        ui.button('Save Changes', icon='save', on_click=lambda _: on_save()).props('color=primary')

    return {'banner': banner}


def show_notification(banner: ui.label, notification: Optional[Notification]) -> None:
    """Show `notification` in the banner, or hide the banner for None."""
    if notification is None:
        banner.set_visibility(False)
        return
    for classes in NOTIFICATION_CLASSES.values():
        banner.classes(remove=classes)
    banner.classes(add=NOTIFICATION_CLASSES.get(notification.kind, NOTIFICATION_CLASSES[ERROR]))
    banner.set_text(notification.text)
    banner.set_visibility(True)


def render_nodes_panel():
    """
    Renders the palette of node kinds. Cards are plain HTML5 draggables; the
    dragstart script in handlers.py copies data-node-kind into the drag payload.
    """
    with ui.column().classes('w-72 h-full p-4 gap-3 bg-slate-900 border-r border-slate-700'):
        ui.label('Nodes').classes('text-base font-bold text-gray-100')
        ui.label('Drag to add').classes('text-xs text-gray-400')

        with ui.card().classes('w-full cursor-grab bg-slate-800 border border-indigo-500') \
                .props(f'draggable=true data-node-kind={TEXT_NODE_TOKEN}'):
            with ui.row().classes('items-center gap-3 no-wrap'):
                ui.label('💬').classes('text-2xl')
                with ui.column().classes('gap-0'):
                    ui.label('Message').classes('text-sm font-bold text-gray-100')
                    ui.label('Send a text message').classes('text-xs text-gray-400')


def hosted_scheduler(host, timer_factory=ui.timer):
    """
    Scheduler for NotificationCenter whose one-shot timers live in `host`.

    NiceGUI parents a new element to the slot of whatever fired the event, and
    a timer deleted with its parent never fires. `host` must outlive every
    refreshable panel on the page.
    """
    def schedule(delay: float, callback: Callable[[], None]):
        with host:
            return timer_factory(delay, callback, once=True)
    return schedule


def connect_choice(value: Optional[str], on_connect: Callable[[str], bool]) -> Optional[str]:
    """Value the target select should keep after a pick: cleared on rejection."""
    if not value:
        return None
    return value if on_connect(value) else None


def render_settings_panel(
    node: Node,
    draft_message: str,
    next_options: Dict[str, str],
    current_next: Optional[str],
    on_message_change: Callable[[str], None],
    on_connect: Callable[[str], bool],
    on_disconnect: Callable[[], None],
    on_delete: Callable[[], None],
    on_close: Callable[[], None],
):
    """
    Renders the editor for the selected message node.

    The textarea starts from `draft_message` and pushes every change to
    on_message_change. `next_options` maps candidate target node ids to
    display names for the outgoing connection selector; on_connect returns
    whether the connection was accepted.
    """
    with ui.column().classes('w-72 h-full p-4 gap-3 bg-slate-900 border-r border-slate-700'):
        with ui.row().classes('items-center gap-2'):
            ui.button(icon='arrow_back', on_click=lambda _: on_close()).props('flat round dense')
            ui.label('Message Settings').classes('text-base font-bold text-gray-100')

        ui.label('Text').classes('text-xs font-bold text-gray-400 mt-2')
        ui.textarea(
            value=draft_message,
            placeholder='Enter your message here...',
            on_change=lambda e: on_message_change(e.value or ''),
        ).props('filled rows=6').classes('w-full text-sm')
        ui.label('This message will be sent in the chatbot flow').classes('text-xs text-gray-500')

        ui.label('Next message').classes('text-xs font-bold text-gray-400 mt-4')
        if current_next:
            with ui.row().classes('items-center gap-1 no-wrap'):
                ui.label(f'→ {next_options.get(current_next, current_next)}').classes('text-sm text-gray-200')
                ui.button(icon='link_off', on_click=lambda _: on_disconnect()) \
                    .props('flat round dense size=sm').tooltip('Remove connection')

        def handle_pick(e):
            kept = connect_choice(e.value, on_connect)
            if e.value and kept is None:
                e.sender.set_value(None)

        ui.select(
            options=next_options,
            label='Connect to...',
            on_change=handle_pick,
        ).props('filled dense').classes('w-full')

        ui.button('Delete node', icon='delete', on_click=lambda _: on_delete()) \
            .props('flat color=negative').classes('mt-4')
        ui.label(f'Node id: {node.id}').classes('text-xs text-gray-600 mt-auto')
