"""
Filesystem utilities for logctl.

Modules:
    - paths: Platform classification and the log root directory
    - logfile: Per-app, per-day, per-process log files and the file sink
"""
