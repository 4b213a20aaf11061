"""Tick-driven horse race simulation."""

__version__ = "0.1.0"
