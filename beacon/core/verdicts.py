"""Decision, audit and rule snapshot types shared by the pipeline components."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class Decision(str, Enum):
    """The only two verdicts ever returned to the browser agent."""

    ALLOW = "ALLOW"
    BLOCK = "BLOCK"


class AuditReason(str, Enum):
    """Closed set of reason tags written to the audit log."""

    INFRA = "infra"  # never persisted
    SEARCH = "search"
    NAVIGATION = "navigation"
    ALLOW_LIST = "allow-list"
    BLOCK_LIST = "block-list"
    AI_DECISION = "ai-decision"
    SERVER_ERROR = "server-error"


@dataclass(frozen=True)
class RuleData:
    """Read-only snapshot of one user's policy, fetched per request."""

    user_id: str
    prompt: str
    allow_list: tuple[str, ...] = ()
    block_list: tuple[str, ...] = ()
    blocked_categories: Mapping[str, bool] = field(default_factory=dict)


@dataclass(frozen=True)
class Verdict:
    """Outcome of one pipeline evaluation.

    ``page_title`` is the title recorded in the audit log, which the system
    policy rules may synthesize (e.g. ``Google Search: "cats"``).
    """

    decision: Decision
    reason: AuditReason
    page_title: str | None = None


@dataclass(frozen=True)
class AuditEntry:
    user_id: str | None
    url: str | None
    domain: str | None
    decision: Decision
    reason: AuditReason
    page_title: str | None = None
    timestamp: datetime | None = None
