"""Automated article generation and publishing."""

__version__ = "1.0.0"
