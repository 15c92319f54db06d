"""Release automation for cross-platform command-line binaries."""

__version__ = "0.1.0"
