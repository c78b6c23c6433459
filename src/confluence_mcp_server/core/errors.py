"""
Error Taxonomy and Global Error Handling

This module defines the exceptions raised by the Confluence gateway and the
application-wide exception handler for the HTTP surface.

Design Goals
------------
- Distinguish not-found, API, and local contract failures
- Never leak internal exception details to HTTP clients
- Log full stack traces internally for debugging
"""

from __future__ import annotations

import logging
from typing import Dict, Any, Optional

from fastapi import Request
from fastapi.responses import JSONResponse

logger = logging.getLogger("mcp.errors")


# ---------------------------------------------------------------------
# Gateway Exceptions
# ---------------------------------------------------------------------

class ConfluenceError(RuntimeError):
    """Base exception for Confluence gateway failures."""


class ContentNotFoundError(ConfluenceError):
    """Raised when a numeric content id returns HTTP 404."""

    def __init__(self, content_id: str) -> None:
        super().__init__(f"Content not found: {content_id}")
        self.content_id = content_id


class ConfluenceApiError(ConfluenceError):
    """Raised for any other non-success HTTP status from the wiki."""

    def __init__(
        self,
        message: str,
        status_code: int,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(f"Confluence API Error: {message} (Status: {status_code})")
        self.message = message
        self.status_code = status_code
        self.details = details or {}


class ContractViolationError(ConfluenceError):
    """Raised when a successful response lacks a field we depend on."""


# ---------------------------------------------------------------------
# Public Exception Handlers
# ---------------------------------------------------------------------

async def unhandled_exception_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    """
    Catch-all handler for uncaught exceptions.

    Logs the full stack trace and returns a generic 500 error with no
    internal details.
    """
    logger.exception(
        "Unhandled MCP exception during request: %s %s",
        request.method,
        request.url.path,
        exc_info=exc,
    )

    payload: Dict[str, Any] = {
        "error": "internal_server_error",
        "detail": "Internal server error",
    }

    return JSONResponse(
        status_code=500,
        content=payload,
    )
