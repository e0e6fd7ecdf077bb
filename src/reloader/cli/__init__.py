"""Reloader CLI."""
