import asyncio

from flowbuilder.notifications import NotificationCenter


def test_notification_clears_after_timeout(notifications, scheduler):
    n = notifications.error("boom")
    assert notifications.current == n
    assert n.kind == "error"

    scheduler.advance(2.5)
    assert notifications.current == n

    scheduler.advance(0.5)
    assert notifications.current is None


def test_new_notification_supersedes_pending_clear(notifications, scheduler):
    notifications.error("first")
    scheduler.advance(2.0)
    second = notifications.success("second")

    # the first timer would have fired here
    scheduler.advance(1.5)
    assert notifications.current == second

    scheduler.advance(1.5)
    assert notifications.current is None


def test_stale_clear_cannot_remove_newer_message():
    # scheduler whose handles ignore cancel(), like a fire-and-forget timeout
    fired = []

    class Uncancellable:
        def cancel(self):
            pass

    def leaky_scheduler(delay, callback):
        fired.append(callback)
        return Uncancellable()

    center = NotificationCenter(scheduler=leaky_scheduler)
    center.error("old")
    newer = center.success("new")

    fired[0]()  # stale clear for "old"
    assert center.current == newer
    fired[1]()
    assert center.current is None


def test_ids_increase(notifications):
    a = notifications.error("a")
    b = notifications.error("a")
    assert b.id > a.id
    assert a != b


def test_dismiss_cancels_timer(notifications, scheduler):
    notifications.success("saved")
    notifications.dismiss()
    assert notifications.current is None
    assert scheduler.pending() == []


def test_subscribers_see_show_and_clear(notifications, scheduler):
    seen = []
    notifications.subscribe(seen.append)
    n = notifications.success("ok")
    scheduler.advance(3)
    assert seen == [n, None]


def test_custom_timeout(scheduler):
    center = NotificationCenter(scheduler=scheduler, timeout_ms=500)
    center.error("quick")
    scheduler.advance(0.5)
    assert center.current is None


def test_default_scheduler_uses_event_loop():
    async def scenario():
        center = NotificationCenter(timeout_ms=10)
        center.error("async")
        assert center.current is not None
        await asyncio.sleep(0.05)
        return center.current

    assert asyncio.run(scenario()) is None
