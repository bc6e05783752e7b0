"""
Terminal log viewer for logctl.

Modules:
    - views: Curses rendering loop and layout
    - tailer: Polling tails over an app's per-process log files
    - merger: Timestamp ordering of entries from several files
    - app_index: Discovery of apps that have log files
    - model: LogEntry data structure

Usage:
    python -m logctl logs ModuleSync
"""
