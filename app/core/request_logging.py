"""Per-request logging middleware."""

import logging
import time
import uuid
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from app.core.logging import get_logger, log_with_context

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Tag each request with an id and log it on the way in and out."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id
        started = time.perf_counter()

        log_with_context(
            logger,
            logging.INFO,
            "Incoming request",
            request_id=request_id,
            method=request.method,
            path=request.url.path,
            query=str(request.query_params) or None,
            user_agent=request.headers.get("user-agent"),
            client_ip=request.client.host if request.client else None,
        )

        try:
            response = await call_next(request)
        except Exception:
            log_with_context(
                logger,
                logging.ERROR,
                "Request failed",
                request_id=request_id,
                method=request.method,
                path=request.url.path,
                duration_ms=round((time.perf_counter() - started) * 1000, 1),
                exc_info=True,
            )
            raise

        response.headers[REQUEST_ID_HEADER] = request_id
        log_with_context(
            logger,
            logging.INFO,
            "Response sent",
            request_id=request_id,
            method=request.method,
            path=request.url.path,
            status=response.status_code,
            duration_ms=round((time.perf_counter() - started) * 1000, 1),
        )
        return response
