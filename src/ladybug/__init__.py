"""Ladybug — auto-discovered REST API host."""

__version__ = "1.0.0"
