"""Media reliability reports for Reddit submissions."""

__version__ = "0.1.0"
