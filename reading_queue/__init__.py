"""Spaced-repetition scheduling core for an incremental reading queue."""

__version__ = "0.3.0"
