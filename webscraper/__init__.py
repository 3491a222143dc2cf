"""Concurrent web scraper: shared link frontier, resizable worker pool and bounded content cache."""

__version__ = "0.1.0"
