#!/usr/bin/env python3
"""
╔══════════════════════════════════════════════════════════════════╗
║            B-Tree Debugger — Entry Point                         ║
║                                                                  ║
║  Run     : python main.py [--url URL] [--poll-ms N]              ║
║            btree-debugger ...        (after pip install)         ║
║                                                                  ║
║  Architecture:                                                   ║
║    main.py ──► Settings ──► viewer.DebuggerWindow                ║
║                               ├── controller (drag / delete)     ║
║                               ├── layout + highlight             ║
║                               ├── render (canvas / PNG)          ║
║                               └── backend (HTTP)                 ║
╚══════════════════════════════════════════════════════════════════╝
"""

import argparse
import logging

from settings import THEMES, Settings


def parse_args(argv=None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Interactive visual debugger for a B-tree backend")
    p.add_argument("--url", default=None, help="Backend base URL (saved for next time)")
    p.add_argument("--poll-ms", type=int, default=None,
                   help="Auto-refresh period in ms, 0 disables")
    p.add_argument("--theme", choices=sorted(THEMES), default=None)
    p.add_argument("--log-level", default="INFO",
                   choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return p.parse_args(argv)


def apply_overrides(settings: Settings, args: argparse.Namespace) -> bool:
    """Copy command-line overrides into settings; True if anything changed."""
    changed = False
    if args.url is not None:
        settings.backend_url = args.url
        changed = True
    if args.poll_ms is not None:
        settings.poll_ms = max(0, args.poll_ms)
        changed = True
    if args.theme is not None:
        settings.theme = args.theme
        changed = True
    return changed


def main(argv=None) -> None:
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    settings = Settings()
    if apply_overrides(settings, args):
        settings.save()

    # tkinter is only needed once a window is actually opened
    from viewer import open_viewer
    open_viewer(settings=settings)


if __name__ == "__main__":
    main()
