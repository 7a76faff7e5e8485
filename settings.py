"""
╔══════════════════════════════════════════════════════════════════╗
║            B-Tree Debugger — THEMES & SETTINGS                   ║
║                                                                  ║
║  Two Catppuccin-inspired palettes plus persisted preferences     ║
║  (backend URL, poll interval, per-colour overrides) saved as     ║
║  JSON in the user's home directory.                              ║
╚══════════════════════════════════════════════════════════════════╝
"""

import json
import logging
import os

from highlight import HighlightKind

log = logging.getLogger(__name__)

DEFAULT_URL = "http://127.0.0.1:8080"


# ═════════════════════════════════════════════════════════════════
#  THEME DEFINITIONS
# ═════════════════════════════════════════════════════════════════
THEMES = {
    # ── Dark theme (Catppuccin Mocha) ────────────────────────────
    "dark": {
        "BG": "#1e1e2e",                # Main window background
        "BG2": "#2a2a3d",               # Toolbar / status bar
        "FG": "#cdd6f4",                # Primary foreground text
        "ACCENT": "#89b4fa",            # Buttons, headings
        "RED_C": "#f38ba8",             # Error text
        "BTN_BG": "#45475a",            # Button face colour
        "CANVAS_BG": "#1e1e2e",         # Tree-drawing canvas
        "NODE_INNER": "#89b4fa",        # Inner node background
        "NODE_LEAF": "#cba6f7",         # Leaf node background
        "NODE_TARGET": "#fab387",       # Node the backend is working on
        "NODE_MERGE_TARGET": "#a6e3a1", # Nodes about to be merged
        "CELL": "#9399b2",              # Plain key cell
        "CELL_TO_DELETE": "#f38ba8",    # Key about to be deleted
        "CELL_TO_MERGE": "#f9e2af",     # Separator key pulled down by a merge
        "CELL_TEXT": "#11111b",         # Key labels
    },
    # ── Light theme (Catppuccin Latte) ───────────────────────────
    "light": {
        "BG": "#eff1f5",
        "BG2": "#dce0e8",
        "FG": "#4c4f69",
        "ACCENT": "#1e66f5",
        "RED_C": "#d20f39",
        "BTN_BG": "#ccd0da",
        "CANVAS_BG": "#ffffff",
        "NODE_INNER": "#1e66f5",
        "NODE_LEAF": "#8839ef",
        "NODE_TARGET": "#fe640b",
        "NODE_MERGE_TARGET": "#40a02b",
        "CELL": "#999999",
        "CELL_TO_DELETE": "#d20f39",
        "CELL_TO_MERGE": "#df8e1d",
        "CELL_TEXT": "#000000",
    },
}

# HighlightKind → theme colour key
HIGHLIGHT_KEYS = {
    HighlightKind.NONE: "CELL",
    HighlightKind.INNER: "NODE_INNER",
    HighlightKind.LEAF: "NODE_LEAF",
    HighlightKind.TARGET: "NODE_TARGET",
    HighlightKind.MERGE_TARGET: "NODE_MERGE_TARGET",
    HighlightKind.TO_DELETE: "CELL_TO_DELETE",
    HighlightKind.TO_MERGE: "CELL_TO_MERGE",
}


# ═════════════════════════════════════════════════════════════════
#  SETTINGS — persisted user preferences
# ═════════════════════════════════════════════════════════════════
class Settings:
    """
    Persistent user preferences manager.

    Attributes:
        theme        (str) : Active theme name ("dark" / "light").
        backend_url  (str) : Base URL of the tree backend.
        poll_ms      (int) : Auto-refresh period in ms (0 = off).
        custom_colors(dict): Key→hex overrides on top of the theme.

    File location:  ~/.btree_debugger.json
    """
    _PATH = os.path.join(os.path.expanduser("~"), ".btree_debugger.json")

    def __init__(self, path=None):
        self.path          = path or self._PATH
        self.theme         = "dark"
        self.backend_url   = DEFAULT_URL
        self.poll_ms       = 0
        self.custom_colors = {}
        self._load()

    # ── Load from disk ──────────────────────────────────────────
    def _load(self):
        if not os.path.exists(self.path):
            return
        try:
            with open(self.path) as f:
                d = json.load(f)
        except (OSError, ValueError) as exc:
            log.warning("ignoring unreadable settings file %s: %s", self.path, exc)
            return
        if not isinstance(d, dict):
            log.warning("ignoring settings file %s: expected an object, got %s",
                        self.path, type(d).__name__)
            return

        self.theme       = d.get("theme", self.theme)
        self.backend_url = d.get("backend_url", self.backend_url)
        try:
            self.poll_ms = int(d.get("poll_ms", self.poll_ms))
        except (TypeError, ValueError):
            log.warning("invalid poll_ms %r, polling stays off", d.get("poll_ms"))
        colors = d.get("custom_colors", {})
        if isinstance(colors, dict):
            self.custom_colors = colors
        else:
            log.warning("invalid custom_colors %r, using theme colours", colors)
        if not isinstance(self.theme, str) or self.theme not in THEMES:
            log.warning("unknown theme %r, using dark", self.theme)
            self.theme = "dark"

    # ── Save to disk ────────────────────────────────────────────
    def save(self):
        try:
            with open(self.path, "w") as f:
                json.dump({"theme": self.theme,
                           "backend_url": self.backend_url,
                           "poll_ms": self.poll_ms,
                           "custom_colors": self.custom_colors}, f, indent=2)
        except OSError as exc:
            log.warning("could not save settings to %s: %s", self.path, exc)

    # ── Colour lookup ───────────────────────────────────────────
    def get(self, key):
        """
        Resolve a colour key to its hex value.

        Priority: custom_colors[key]  →  THEMES[theme][key]  →  "#ffffff"
        """
        if key in self.custom_colors:
            return self.custom_colors[key]
        return THEMES[self.theme].get(key, "#ffffff")

    def palette(self):
        """Map every HighlightKind to its fill colour."""
        return {kind: self.get(key) for kind, key in HIGHLIGHT_KEYS.items()}
