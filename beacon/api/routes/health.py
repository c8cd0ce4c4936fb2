"""Health check endpoints."""

import asyncio
from datetime import UTC, datetime

from fastapi import APIRouter

from ...database import check_connection

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check():
    """Basic health check including a database connectivity check."""
    connected = await asyncio.to_thread(check_connection)
    return {
        "status": "healthy",
        "database": "connected" if connected else "disconnected",
        "timestamp": datetime.now(UTC).isoformat(),
    }
