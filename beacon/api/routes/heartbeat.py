"""Heartbeat endpoint: the browser agent reports it is still installed."""

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse

from ...services.rule_store import RuleStoreGateway
from ..dependencies import get_rule_store

router = APIRouter(tags=["heartbeat"])


@router.post("/heartbeat", response_class=PlainTextResponse)
async def heartbeat(
    key: str | None = None,
    rule_store: RuleStoreGateway = Depends(get_rule_store),
) -> str:
    """Touch ``last_seen`` for ``key``. Always answers 200 OK."""
    await rule_store.touch_last_seen(key)
    return "OK"
