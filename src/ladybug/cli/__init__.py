"""ladybug — command-line interface."""

from ladybug import __version__

__all__ = ["__version__"]
