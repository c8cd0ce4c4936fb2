"""FastAPI dependencies resolving the components built at startup."""

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ..services.pipeline import DecisionPipeline
from ..services.rule_store import RuleStoreGateway

# auto_error=False: a missing key is reported by the pipeline as a 400
bearer_scheme = HTTPBearer(auto_error=False)


def get_pipeline(request: Request) -> DecisionPipeline:
    return request.app.state.pipeline


def get_rule_store(request: Request) -> RuleStoreGateway:
    return request.app.state.rule_store


def get_api_key(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> str | None:
    """Extract ``<apiKey>`` from ``Authorization: Bearer <apiKey>``."""
    if credentials is None:
        return None
    return credentials.credentials.strip() or None
