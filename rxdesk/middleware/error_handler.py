"""Global error handlers for the application."""
import logging

from fastapi import Request
from fastapi.responses import JSONResponse

from rxdesk.utils.errors import StorageError

logger = logging.getLogger(__name__)


async def http_exception_handler(request: Request, exc):
    if isinstance(exc, StorageError):
        logger.error(f"{request.method} {request.url.path} failed: {exc.detail}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})
