"""
Audit Logger

Best-effort persistence of every decision returned to the browser agent.
Failures are logged locally and never reach the caller.
"""

import logging
from datetime import UTC, datetime

from sqlalchemy.orm import sessionmaker

from ..core.config import Settings
from ..core.exceptions import StoreError
from ..core.verdicts import AuditEntry, AuditReason
from ..database import SessionLocal, get_db_session
from ..models import BlockingLog
from .rule_store import run_store_call

logger = logging.getLogger(__name__)

UNKNOWN_URL = "Unknown URL"
UNKNOWN_DOMAIN = "Unknown Domain"


class AuditLogger:
    """Writes ``blocking_log`` rows."""

    def __init__(self, settings: Settings, session_factory: sessionmaker = SessionLocal):
        self.settings = settings
        self.session_factory = session_factory

    def _insert(self, entry: AuditEntry, timestamp: datetime) -> None:
        with get_db_session(self.session_factory) as session:
            session.add(
                BlockingLog(
                    user_id=entry.user_id,
                    url=entry.url or UNKNOWN_URL,
                    domain=entry.domain or UNKNOWN_DOMAIN,
                    decision=entry.decision.value,
                    reason=entry.reason.value,
                    page_title=entry.page_title or "",
                    created_at=timestamp,
                )
            )

    async def record(self, entry: AuditEntry) -> None:
        """Persist ``entry``; skipped for infra allows and unknown users."""
        if entry.reason is AuditReason.INFRA:
            return
        if not entry.user_id:
            logger.error("Cannot log event: userId is missing.")
            return

        timestamp = entry.timestamp or datetime.now(UTC)
        try:
            await run_store_call(
                lambda: self._insert(entry, timestamp),
                self.settings.STORE_TIMEOUT,
                "audit insert",
            )
        except StoreError as e:
            logger.error("Error logging event: %s", e.detail)
        except Exception as e:
            logger.exception("Exception during logging: %s", e)
