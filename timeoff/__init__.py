"""Time-off request policy engine for marina staff scheduling."""

__version__ = "0.1.0"
