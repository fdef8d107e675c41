"""Nova: a small modal terminal text editor."""

__version__ = "0.1.0"
