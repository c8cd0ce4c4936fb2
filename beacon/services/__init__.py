"""
Beacon Services Module
======================

Stateful-at-the-edges services behind the ``/check-url`` endpoint.

- rule_store.py: Per-key policy lookup and heartbeat updates
- audit.py: Best-effort decision audit log
- completion.py: Text-completion backends (Gemini, Ollama)
- judge.py: Prompt construction and verdict parsing
- pipeline.py: Ordered decision pipeline
"""

from .audit import AuditLogger
from .completion import CompletionClient, build_completion_client
from .judge import AIJudge
from .pipeline import DecisionPipeline
from .rule_store import RuleStoreGateway

__all__ = [
    "AIJudge",
    "AuditLogger",
    "CompletionClient",
    "DecisionPipeline",
    "RuleStoreGateway",
    "build_completion_client",
]
