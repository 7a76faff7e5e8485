"""
╔══════════════════════════════════════════════════════════════════╗
║            B-Tree Debugger — VIEWER WINDOW                       ║
║                                                                  ║
║  ┌──────────────────────────────────────────────────────────┐    ║
║  │ ▶ Step  ⟲ Reset  ↻ Refresh  ⊞ Reset Layout  ☐ Auto  PNG  │    ║
║  ├──────────────────────────────────────────────────────────┤    ║
║  │                                                          │    ║
║  │   canvas  (left-drag: move a key · right-click: delete)  │    ║
║  │                                                          │    ║
║  ├──────────────────────────────────────────────────────────┤    ║
║  │ status: snapshot summary or last error                   │    ║
║  └──────────────────────────────────────────────────────────┘    ║
║                                                                  ║
║  Backend round-trips run on a daemon thread; results come back   ║
║  to the Tk thread through ``after(0, …)``, which is the only     ║
║  thread that touches the layout or the canvas.                   ║
╚══════════════════════════════════════════════════════════════════╝
"""

import logging
import threading
from tkinter import (Tk, Toplevel, Frame, Canvas, Label, Button, Checkbutton,
                     BooleanVar, StringVar, BOTH, X, LEFT, RIGHT, TOP, BOTTOM, W,
                     messagebox, filedialog)

from backend import BackendClient
from controller import InteractionController
from layout import LayoutConfig
from render import CanvasContext, RenderSurface, export_png
from settings import Settings
from snapshot import SnapshotError, describe

log = logging.getLogger(__name__)

DEFAULT_POLL_MS = 1000


class DebuggerWindow(Toplevel):
    """Main debugger window.

    Attributes:
        settings (Settings):               Persisted preferences.
        config (LayoutConfig):             Geometry shared by layout and canvas.
        client (BackendClient):            HTTP collaborator.
        controller (InteractionController): Live layout + pointer handling.
        poll_var (BooleanVar):             Auto-refresh toggle.
        after_id (str | None):             Pending poll callback, for cancellation.
    """

    def __init__(self, master, settings, client=None, config=None):
        super().__init__(master)
        self.settings = settings
        self.config = config or LayoutConfig()
        self.client = client or BackendClient(settings.backend_url)
        self.title(f"B-Tree Debugger — {self.client.base_url}")
        self.geometry("1280x820")
        self.minsize(800, 500)
        self.configure(bg=settings.get("BG"))

        self.after_id = None
        self.poll_var = BooleanVar(value=settings.poll_ms > 0)
        self.status_var = StringVar(value="Connecting…")

        self._build_ui()

        surface = RenderSurface(CanvasContext(self.canvas), self.config,
                                settings.palette(),
                                background=settings.get("CANVAS_BG"),
                                text_color=settings.get("CELL_TEXT"))
        self.controller = InteractionController(
            self.client, surface, self.config,
            dispatch=self._dispatch, on_error=self._show_error)

        self.protocol("WM_DELETE_WINDOW", self._on_close)
        self.controller.render()
        self.controller.refresh()
        if self.poll_var.get():
            self._schedule_poll()

    def _on_close(self):
        if self.after_id:
            self.after_cancel(self.after_id)
            self.after_id = None
        self.client.close()
        self.destroy()
        if isinstance(self.master, Tk):
            self.master.quit()

    # ═══════════════════════════════════════════════════════════════
    #  BUILD UI
    # ═══════════════════════════════════════════════════════════════
    def _build_ui(self):
        s = self.settings
        btn = dict(bg=s.get("BTN_BG"), fg=s.get("FG"), relief="flat",
                   activebackground=s.get("ACCENT"), padx=10, pady=4,
                   font=("Consolas", 10, "bold"))

        # ── 1. toolbar ──
        top = Frame(self, bg=s.get("BG2"))
        top.pack(side=TOP, fill=X)
        Button(top, text="▶ Step", command=self._on_step, **btn).pack(side=LEFT, padx=4, pady=4)
        Button(top, text="⟲ Reset", command=self._on_reset, **btn).pack(side=LEFT, padx=4)
        Button(top, text="↻ Refresh", command=self._on_refresh, **btn).pack(side=LEFT, padx=4)
        Button(top, text="⊞ Reset Layout", command=self._on_reset_layout,
               **btn).pack(side=LEFT, padx=4)
        Checkbutton(top, text="Auto-poll", variable=self.poll_var,
                    command=self._toggle_poll, bg=s.get("BG2"), fg=s.get("FG"),
                    selectcolor=s.get("BTN_BG"), activebackground=s.get("BG2"),
                    font=("Consolas", 10)).pack(side=LEFT, padx=8)
        Button(top, text="🖼 PNG", command=self._export_png, **btn).pack(side=RIGHT, padx=4)

        # ── 2. status bar ──
        self.status_label = Label(self, textvariable=self.status_var, anchor=W,
                                  bg=s.get("BG2"), fg=s.get("FG"),
                                  font=("Consolas", 10), padx=8, pady=3)
        self.status_label.pack(side=BOTTOM, fill=X)

        # ── 3. canvas ──
        self.canvas = Canvas(self, bg=s.get("CANVAS_BG"), highlightthickness=0)
        self.canvas.pack(fill=BOTH, expand=True)
        self.canvas.bind("<ButtonPress-1>", self._on_press)
        self.canvas.bind("<B1-Motion>", self._on_motion)
        self.canvas.bind("<ButtonRelease-1>", self._on_release)
        self.canvas.bind("<Button-3>", self._on_context)
        self.canvas.bind("<Configure>", lambda e: self.controller.render())

    # ═══════════════════════════════════════════════════════════════
    #  BACKGROUND DISPATCH
    # ═══════════════════════════════════════════════════════════════
    def _dispatch(self, work, on_done, on_failed):
        """Run ``work`` on a worker thread; finish on the Tk thread."""
        self.status_var.set("⏳ Waiting for backend…")

        def worker():
            try:
                result = work()
            except Exception as exc:
                self.after(0, on_failed, exc)
                return
            self.after(0, self._deliver, result, on_done, on_failed)

        threading.Thread(target=worker, daemon=True).start()

    def _deliver(self, snapshot, on_done, on_failed):
        try:
            on_done(snapshot)
        except SnapshotError as exc:
            on_failed(exc)
            return
        self.status_label.config(fg=self.settings.get("FG"))
        self.status_var.set(describe(snapshot))

    def _show_error(self, name, exc):
        self.status_label.config(fg=self.settings.get("RED_C"))
        self.status_var.set(f"✖ {name} failed: {exc}")

    # ═══════════════════════════════════════════════════════════════
    #  TOOLBAR ACTIONS
    # ═══════════════════════════════════════════════════════════════
    def _on_step(self):
        self.controller.request_step()

    def _on_reset(self):
        self.controller.request_reset()

    def _on_refresh(self):
        self.controller.refresh()

    def _on_reset_layout(self):
        try:
            self.controller.relayout()
        except SnapshotError as exc:
            self._show_error("layout", exc)

    def _export_png(self):
        snap = self.controller.snapshot
        if snap is None:
            messagebox.showinfo("Info", "No snapshot loaded yet.", parent=self)
            return
        path = filedialog.asksaveasfilename(
            parent=self, defaultextension=".png",
            filetypes=[("PNG", "*.png")], title="Export Layout as PNG")
        if not path:
            return  # user cancelled
        s = self.settings
        export_png(path, self.controller.layout, snap.node_capacity,
                   config=self.config, palette=s.palette(),
                   background=s.get("CANVAS_BG"), text_color=s.get("CELL_TEXT"))
        messagebox.showinfo("Exported", f"PNG saved:\n{path}", parent=self)

    # ═══════════════════════════════════════════════════════════════
    #  AUTO-POLL
    # ═══════════════════════════════════════════════════════════════
    def _toggle_poll(self):
        if self.poll_var.get():
            self._schedule_poll()
        elif self.after_id:
            self.after_cancel(self.after_id)
            self.after_id = None

    def _schedule_poll(self):
        self.after_id = self.after(self.settings.poll_ms or DEFAULT_POLL_MS,
                                   self._poll_tick)

    def _poll_tick(self):
        self.after_id = None
        if not self.poll_var.get():
            return
        # a refresh mid-drag would yank the cell out from under the pointer
        if not self.controller.busy and self.controller.dragging is None:
            self.controller.refresh()
        self._schedule_poll()

    # ═══════════════════════════════════════════════════════════════
    #  POINTER EVENTS
    # ═══════════════════════════════════════════════════════════════
    def _on_press(self, event):
        self.controller.begin_drag(event.x, event.y)

    def _on_motion(self, event):
        self.controller.on_pointer_move(event.x, event.y)

    def _on_release(self, event):
        self.controller.end_drag()

    def _on_context(self, event):
        self.controller.request_delete(event.x, event.y)


def open_viewer(root=None, settings=None):
    """
    Launch the debugger window and run the Tk event loop.

    Args:
        root (Tk | None): Existing root; a hidden one is created if omitted.
        settings (Settings | None): Loaded from ``~/.btree_debugger.json``
            when omitted.
    """
    settings = settings or Settings()
    if root is None:
        root = Tk()
        root.withdraw()           # only the debugger window is visible
    DebuggerWindow(root, settings)
    if root.winfo_exists():
        root.mainloop()
