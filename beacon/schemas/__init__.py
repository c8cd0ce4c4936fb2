"""Request/response schemas."""

from .check import CheckResponse, ErrorResponse, PageDescriptor

__all__ = [
    "CheckResponse",
    "ErrorResponse",
    "PageDescriptor",
]
