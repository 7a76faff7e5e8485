import pytest

pytest.importorskip("tkinter")

import viewer
from conftest import FakeBackend, FakeSurface, make_snapshot
from controller import InteractionController
from settings import THEMES
from snapshot import DanglingReference, SnapshotError
from viewer import DEFAULT_POLL_MS, DebuggerWindow


class Var:
    def __init__(self, value=None):
        self.value = value

    def get(self):
        return self.value

    def set(self, value):
        self.value = value


class StatusLabel:
    def __init__(self):
        self.options = {}

    def config(self, **kw):
        self.options.update(kw)


class StubSettings:
    poll_ms = 0

    def get(self, key):
        return THEMES["dark"][key]


class WindowStub:
    """Just enough of DebuggerWindow to drive its logic without a display."""

    _dispatch = DebuggerWindow._dispatch
    _deliver = DebuggerWindow._deliver
    _show_error = DebuggerWindow._show_error
    _poll_tick = DebuggerWindow._poll_tick
    _schedule_poll = DebuggerWindow._schedule_poll

    def __init__(self, controller=None, poll=True):
        self.settings = StubSettings()
        self.status_var = Var("")
        self.status_label = StatusLabel()
        self.poll_var = Var(poll)
        self.after_id = None
        self.scheduled = []
        self.controller = controller

    def after(self, delay, fn, *args):
        self.scheduled.append((delay, fn, args))
        return f"after#{len(self.scheduled)}"

    def run_pending(self):
        while self.scheduled:
            _, fn, args = self.scheduled.pop(0)
            fn(*args)


class InlineThread:
    def __init__(self, target, daemon=False):
        self.target = target

    def start(self):
        self.target()


@pytest.fixture
def inline_threads(monkeypatch):
    monkeypatch.setattr(viewer.threading, "Thread", InlineThread)


def _wired(backend):
    win = WindowStub()
    win.controller = InteractionController(
        backend, FakeSurface(), dispatch=win._dispatch, on_error=win._show_error)
    return win


def test_dispatch_delivers_snapshot_on_ui_thread(inline_threads):
    win = _wired(FakeBackend(make_snapshot(to_delete=20)))
    win.controller.refresh()

    assert win.controller.busy
    assert win.status_var.get().startswith("⏳")
    win.run_pending()

    assert not win.controller.busy
    assert [c.key for c in win.controller.layout.cells] == [10, 20]
    assert "delete 20" in win.status_var.get()
    assert win.status_label.options["fg"] == THEMES["dark"]["FG"]


def test_dispatch_reports_backend_failure(inline_threads):
    win = _wired(FakeBackend(make_snapshot(), fail_on="step"))
    win.controller.request_step()
    win.run_pending()

    assert not win.controller.busy
    assert win.status_var.get().startswith("✖ step failed")
    assert win.status_label.options["fg"] == THEMES["dark"]["RED_C"]


def test_layout_error_goes_to_status_bar(inline_threads):
    bad = make_snapshot(root_node={"node_type": "leaf", "index": 9})
    win = _wired(FakeBackend(bad))
    win.controller.refresh()
    win.run_pending()

    assert not win.controller.busy
    assert win.controller.snapshot is None
    assert "refresh failed" in win.status_var.get()


def test_deliver_converts_snapshot_error():
    win = WindowStub()
    failures = []

    def on_done(snapshot):
        raise DanglingReference("leaf[9] is outside the leaf table")

    win._deliver(make_snapshot(), on_done, failures.append)
    assert len(failures) == 1 and isinstance(failures[0], SnapshotError)
    assert win.status_var.get() == ""


class PollController:
    def __init__(self, busy=False, dragging=None):
        self.busy = busy
        self.dragging = dragging
        self.refreshes = 0

    def refresh(self):
        self.refreshes += 1


@pytest.mark.parametrize("busy, dragging, expected", [
    (False, None, 1),
    (True, None, 0),
    (False, 0, 0),
])
def test_poll_tick_skips_while_busy_or_dragging(busy, dragging, expected):
    ctl = PollController(busy, dragging)
    win = WindowStub(ctl)
    win._poll_tick()

    assert ctl.refreshes == expected
    assert len(win.scheduled) == 1
    delay, fn, _ = win.scheduled[0]
    assert delay == DEFAULT_POLL_MS
    assert fn == win._poll_tick
    assert win.after_id is not None


def test_poll_tick_stops_when_toggled_off():
    ctl = PollController()
    win = WindowStub(ctl, poll=False)
    win._poll_tick()
    assert ctl.refreshes == 0
    assert win.scheduled == []
    assert win.after_id is None


def test_poll_period_comes_from_settings():
    win = WindowStub(PollController())
    win.settings.poll_ms = 250
    win._poll_tick()
    assert win.scheduled[0][0] == 250
