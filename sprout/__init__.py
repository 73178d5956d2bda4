"""Sprout: a focus/break interval timer that grows a garden."""

__version__ = "0.1.0"
