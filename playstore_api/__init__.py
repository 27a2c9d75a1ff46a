"""REST facade exposing Play Store metadata as JSON."""

__version__ = "1.0.0"
