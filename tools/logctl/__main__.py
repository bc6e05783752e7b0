"""
Entry point for running logctl as a Python module.

    python -m logctl <command>
"""

from .cli import main

if __name__ == "__main__":
    main()
