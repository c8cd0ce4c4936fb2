"""URL check request/response schemas."""

from pydantic import BaseModel, ConfigDict, Field

from ..core.verdicts import Decision


class PageDescriptor(BaseModel):
    """Page metadata sent by the browser agent. All fields are untrusted.

    ``url`` is optional here so a missing value is reported as a client error
    by the pipeline rather than as a schema failure.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    url: str | None = None
    title: str | None = None
    description: str | None = None
    h1: str | None = None
    keywords: str | None = None
    body_text: str | None = Field(default=None, alias="bodyText")
    search_query: str | None = Field(default=None, alias="searchQuery")


class CheckResponse(BaseModel):
    decision: Decision


class ErrorResponse(BaseModel):
    error: str
    detail: str
    status_code: int
    timestamp: str
