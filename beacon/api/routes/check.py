"""URL check endpoint used by the browser agent on every navigation."""

import logging

from fastapi import APIRouter, Depends

from ...schemas.check import CheckResponse, ErrorResponse, PageDescriptor
from ...services.pipeline import DecisionPipeline
from ..dependencies import get_api_key, get_pipeline

logger = logging.getLogger(__name__)

router = APIRouter(tags=["check"])


@router.post(
    "/check-url",
    response_model=CheckResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Missing URL or API key"},
        401: {"model": ErrorResponse, "description": "Unknown API key"},
        500: {"model": ErrorResponse, "description": "Internal error (recorded as BLOCK)"},
    },
)
async def check_url(
    page: PageDescriptor,
    api_key: str | None = Depends(get_api_key),
    pipeline: DecisionPipeline = Depends(get_pipeline),
) -> CheckResponse:
    """Decide whether the described page may load."""
    decision = await pipeline.decide(page, api_key)
    return CheckResponse(decision=decision)
