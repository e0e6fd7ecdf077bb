"""Reloader - rebuild and restart a Go program, or rerun its tests, on every change."""

__version__ = "0.1.0"
