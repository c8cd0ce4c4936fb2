"""
Models package.
Exports all models for easier access.
"""

from .audit import BlockingLog
from .rules import Rule

__all__ = [
    "BlockingLog",
    "Rule",
]
