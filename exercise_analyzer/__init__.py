"""Automated first-pass review of exercise submissions."""

__version__ = "0.1.0"
