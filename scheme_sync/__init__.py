"""Aggregate terminal color schemes from remote sources into one catalog."""

__version__ = "0.1.0"
