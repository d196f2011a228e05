"""Utility modules for the reading queue."""
