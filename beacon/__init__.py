"""Beacon policy service: per-page ALLOW/BLOCK decisions for the browser agent."""

__version__ = "1.0.0"
