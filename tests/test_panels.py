from flowbuilder.panels import connect_choice, hosted_scheduler


class FakeHost:
    """Stands in for a NiceGUI container; records whether it is the active slot."""

    def __init__(self):
        self.active = False

    def __enter__(self):
        self.active = True
        return self

    def __exit__(self, *exc):
        self.active = False


def test_notification_timer_created_inside_host():
    host = FakeHost()
    created = []

    def timer_factory(delay, callback, once):
        created.append((delay, once, host.active))
        return 'timer'

    schedule = hosted_scheduler(host, timer_factory=timer_factory)

    assert schedule(3.0, lambda: None) == 'timer'
    assert created == [(3.0, True, True)]
    assert not host.active


class TestConnectChoice:

    def test_accepted_pick_is_kept(self):
        assert connect_choice('node-2', lambda target: True) == 'node-2'

    def test_rejected_pick_is_cleared(self):
        picked = []

        def reject(target):
            picked.append(target)
            return False

        assert connect_choice('node-2', reject) is None
        # the same target can be picked again afterwards
        assert connect_choice('node-2', reject) is None
        assert picked == ['node-2', 'node-2']

    def test_cleared_select_proposes_nothing(self):
        assert connect_choice(None, _must_not_connect) is None


def _must_not_connect(target):
    raise AssertionError("on_connect must not be called for an empty pick")
