"""Documentation generator for CLI tool catalogues."""

__version__ = "0.1.0"
