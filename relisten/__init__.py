"""Resilient always-on listening sessions over single-shot speech engines."""

__version__ = "0.1.0"
