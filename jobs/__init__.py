"""Standalone job entry points."""
