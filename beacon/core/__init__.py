"""
Beacon Core Module
==================

Deterministic building blocks of the decision pipeline.

Structure:
- config.py: Application settings and environment configuration
- exceptions.py: Error taxonomy mapped onto HTTP status codes
- domains.py: URL to registrable-domain normalization and matching
- categories.py: Static blocked-category table used by the AI prompt
- verdicts.py: Decision, audit reason and rule snapshot types
- system_policy.py: Hard-coded allow rules evaluated before user policy
"""

from .config import Settings, get_settings, settings
from .verdicts import AuditEntry, AuditReason, Decision, RuleData, Verdict

__all__ = [
    "AuditEntry",
    "AuditReason",
    "Decision",
    "RuleData",
    "Settings",
    "Verdict",
    "get_settings",
    "settings",
]
