"""Configuration for the reading queue."""
