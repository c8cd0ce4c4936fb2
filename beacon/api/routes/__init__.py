"""API route modules.

- check.py: per-page ALLOW/BLOCK decisions
- heartbeat.py: browser agent liveness pings
- health.py: service and database health
"""

from fastapi import APIRouter

from .check import router as check_router
from .health import router as health_router
from .heartbeat import router as heartbeat_router

router = APIRouter()
router.include_router(check_router)
router.include_router(heartbeat_router)
router.include_router(health_router)

__all__ = [
    "check_router",
    "health_router",
    "heartbeat_router",
    "router",
]
