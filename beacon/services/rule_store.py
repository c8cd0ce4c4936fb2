"""
Rule Store Gateway

Fetches a user's policy snapshot by API key and records heartbeats.

A missing or unknown key yields ``None``; the caller maps that to an
authentication error rather than falling back to a default policy, so a
mistyped key is never silently accepted.
"""

import asyncio
import logging
from collections.abc import Callable, Mapping
from datetime import UTC, datetime
from typing import Any, TypeVar

from sqlalchemy import select, update
from sqlalchemy.orm import sessionmaker

from ..core.config import Settings
from ..core.exceptions import StoreError
from ..core.verdicts import RuleData
from ..database import SessionLocal, get_db_session
from ..models import Rule
from ..utils.logging import mask_key

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def run_store_call(
    func: Callable[[], T], timeout: float, operation: str = "store call"
) -> T:
    """Run blocking session work in a worker thread, bounded by ``timeout``.

    Raises:
        StoreError: on timeout or any database failure
    """
    try:
        return await asyncio.wait_for(asyncio.to_thread(func), timeout=timeout)
    except TimeoutError as e:
        raise StoreError(f"{operation} timed out after {timeout}s") from e
    except StoreError:
        raise
    except Exception as e:
        raise StoreError(f"{operation} failed: {e}") from e


def _domain_list(value: Any, column: str, user_id: str) -> tuple[str, ...]:
    if value is None:
        return ()
    if not isinstance(value, list | tuple):
        logger.warning("Ignoring malformed %s for user %s: %s", column, user_id, type(value).__name__)
        return ()
    return tuple(entry for entry in value if isinstance(entry, str))


def _category_flags(value: Any, user_id: str) -> dict[str, bool]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        logger.warning(
            "Ignoring malformed blocked_categories for user %s: %s", user_id, type(value).__name__
        )
        return {}
    return {str(key): flag for key, flag in value.items() if isinstance(flag, bool)}


class RuleStoreGateway:
    """Read access to ``rules`` plus the heartbeat ``last_seen`` update."""

    def __init__(self, settings: Settings, session_factory: sessionmaker = SessionLocal):
        self.settings = settings
        self.session_factory = session_factory

    def _to_rule_data(self, row: Rule) -> RuleData:
        """Coerce absent or malformed columns to empty collections and the default prompt.

        A badly shaped column never fails the lookup; the key stays valid.
        """
        user_id = str(row.user_id)
        return RuleData(
            user_id=user_id,
            prompt=row.prompt if isinstance(row.prompt, str) else self.settings.DEFAULT_RULE_PROMPT,
            allow_list=_domain_list(row.allow_list, "allow_list", user_id),
            block_list=_domain_list(row.block_list, "block_list", user_id),
            blocked_categories=_category_flags(row.blocked_categories, user_id),
        )

    def _lookup(self, api_key: str) -> RuleData | None:
        with get_db_session(self.session_factory) as session:
            row = session.execute(
                select(Rule).where(Rule.api_key == api_key)
            ).scalar_one_or_none()
            return self._to_rule_data(row) if row is not None else None

    async def fetch_rule(self, api_key: str | None) -> RuleData | None:
        """Return the rule snapshot for ``api_key``, or None if it is unusable."""
        if not api_key:
            logger.error("No API key provided.")
            return None

        logger.info("Fetching rule data for key: %s", mask_key(api_key))
        try:
            rule = await run_store_call(
                lambda: self._lookup(api_key),
                self.settings.STORE_TIMEOUT,
                "rule lookup",
            )
        except StoreError as e:
            logger.error("Error fetching rule data for %s: %s", mask_key(api_key), e.detail)
            return None

        if rule is None:
            logger.warning("API key not found: %s", mask_key(api_key))
            return None

        logger.debug("Fetched rule data for user %s", rule.user_id)
        return rule

    def _touch(self, api_key: str, now: datetime) -> int:
        with get_db_session(self.session_factory) as session:
            result = session.execute(
                update(Rule).where(Rule.api_key == api_key).values(last_seen=now)
            )
            return result.rowcount

    async def touch_last_seen(self, api_key: str | None) -> bool:
        """Record a heartbeat for ``api_key``. Never raises.

        Returns True if a rule row was updated.
        """
        if not api_key:
            return False

        try:
            updated = await run_store_call(
                lambda: self._touch(api_key, datetime.now(UTC)),
                self.settings.STORE_TIMEOUT,
                "heartbeat update",
            )
        except StoreError as e:
            logger.warning("Error updating last_seen for %s: %s", mask_key(api_key), e.detail)
            return False

        if updated:
            logger.info("Heartbeat received for key: %s", mask_key(api_key))
        return bool(updated)
