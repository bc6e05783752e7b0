"""Standalone diagnostic apps bundled with logctl."""
