"""
╔══════════════════════════════════════════════════════════════════╗
║            B-Tree Debugger — INTERACTION CONTROLLER              ║
║                                                                  ║
║  Owns the live Snapshot/Layout pair and turns pointer events     ║
║  into layout lookups or backend requests.                        ║
║                                                                  ║
║  Backend actions                                                 ║
║  ───────────────                                                 ║
║  step / reset / delete / refresh are each ONE unit of work:      ║
║      mutate (optional) → GET /data → rebuild layout → render     ║
║  The unit is handed to a dispatcher:                             ║
║      run_inline        — synchronous (tests, scripts)            ║
║      DebuggerWindow    — worker thread + after(0, …) back to Tk  ║
║  While one unit is in flight (``busy``) new ones are refused.    ║
║                                                                  ║
║  Dragging only moves one cell's (x, y) locally; it is never      ║
║  sent to the backend and is lost on the next rebuild.            ║
╚══════════════════════════════════════════════════════════════════╝
"""

import logging

from layout import Layout, LayoutConfig, build_layout

log = logging.getLogger(__name__)


def run_inline(work, on_done, on_failed):
    """Run ``work`` now; errors are reported and then re-raised."""
    try:
        result = work()
    except Exception as exc:
        on_failed(exc)
        raise
    on_done(result)


class InteractionController:
    """
    Interactive state machine over one layout.

    Args:
        client  (BackendClient): Backend collaborator.
        surface (RenderSurface): Where layouts are painted.
        config  (LayoutConfig) : Geometry shared with the surface.
        dispatch (callable)    : ``dispatch(work, on_done, on_failed)``.
        on_error (callable)    : Extra hook called with a failed
                                 action's exception.

    Attributes:
        snapshot (Snapshot | None): Last snapshot received.
        layout   (Layout)         : Current positioned nodes and cells.
        dragging (int | None)     : Index into ``layout.cells``.
        busy     (bool)           : A backend action is in flight.
    """

    PLACEHOLDER = "Waiting for backend…"

    def __init__(self, client, surface, config=None, dispatch=run_inline,
                 on_error=None):
        self.client = client
        self.surface = surface
        self.config = config or LayoutConfig()
        self.dispatch = dispatch
        self.on_error = on_error
        self.snapshot = None
        self.layout = Layout()
        self.dragging = None
        self.busy = False

    # ══════════════════════════════════════════════════════════
    #  LAYOUT + RENDER
    # ══════════════════════════════════════════════════════════

    def apply_snapshot(self, snapshot):
        """
        Install a fresh snapshot, rebuild from scratch and repaint.

        The layout is built before anything is replaced, so a malformed
        snapshot leaves the previous picture untouched.
        """
        layout = build_layout(snapshot, self.config)
        self.snapshot = snapshot
        self.layout = layout
        self.dragging = None
        self.render()

    def relayout(self):
        """Rebuild from the current snapshot, discarding drag offsets."""
        if self.snapshot is None:
            self.layout = Layout()
            self.dragging = None
            self.render()
            return
        self.apply_snapshot(self.snapshot)

    def render(self):
        if self.snapshot is None:
            self.surface.placeholder(self.PLACEHOLDER)
            return
        self.surface.render(self.layout, self.snapshot.node_capacity)

    # ══════════════════════════════════════════════════════════
    #  HIT-TESTING + DRAG
    # ══════════════════════════════════════════════════════════

    def hit_test_cell(self, x, y):
        """
        Index of the first cell whose square contains ``(x, y)``.

        Cells are scanned in emission order, so when squares overlap
        the earliest-emitted cell wins.

        Returns:
            int | None
        """
        for i, cell in enumerate(self.layout.cells):
            if cell.contains(x, y, self.config):
                return i
        return None

    def begin_drag(self, x, y):
        self.dragging = self.hit_test_cell(x, y)
        if self.dragging is not None:
            log.debug("drag start: cell %d (%r)", self.dragging,
                      self.layout.cells[self.dragging].key)

    def on_pointer_move(self, x, y):
        if self.dragging is None:
            return
        cell = self.layout.cells[self.dragging]
        cell.x = x
        cell.y = y
        self.render()

    def end_drag(self):
        self.dragging = None

    # ══════════════════════════════════════════════════════════
    #  BACKEND ACTIONS
    # ══════════════════════════════════════════════════════════

    def _run(self, name, work):
        if self.busy:
            log.warning("ignoring %s: another backend action is in flight", name)
            return False
        self.busy = True

        def done(snapshot):
            self.busy = False
            self.apply_snapshot(snapshot)

        def failed(exc):
            self.busy = False
            log.error("%s failed: %s", name, exc, exc_info=exc)
            if self.on_error is not None:
                self.on_error(name, exc)

        self.dispatch(work, done, failed)
        return True

    def refresh(self):
        """Re-fetch the snapshot; the layout is rebuilt from scratch."""
        return self._run("refresh", self.client.fetch_snapshot)

    def request_step(self):
        def work():
            self.client.step()
            return self.client.fetch_snapshot()
        return self._run("step", work)

    def request_reset(self):
        def work():
            self.client.reset()
            return self.client.fetch_snapshot()
        return self._run("reset", work)

    def request_delete(self, x, y):
        """
        Ask the backend to delete the key under ``(x, y)``.

        Only the key value is sent; with duplicate keys the backend
        decides which one goes.

        Returns:
            bool: True if a request was issued.
        """
        idx = self.hit_test_cell(x, y)
        if idx is None:
            return False
        key = self.layout.cells[idx].key

        def work():
            self.client.delete(key)
            return self.client.fetch_snapshot()
        return self._run(f"delete {key!r}", work)
