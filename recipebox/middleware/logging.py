"""Request/response logging middleware."""

import logging
import time
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from recipebox.core.request_id import REQUEST_ID_HEADER, generate_request_id, set_request_id

logger = logging.getLogger(__name__)


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 2)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Assigns a request ID and logs each request and its outcome."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = generate_request_id(request.headers.get(REQUEST_ID_HEADER))
        set_request_id(request_id)
        request.state.request_id = request_id

        started = time.perf_counter()
        fields = {"request_id": request_id, "method": request.method, "path": request.url.path}
        label = f"{request.method} {request.url.path}"

        # Bodies are photos and audio; only metadata is logged
        logger.info(
            f"Request started: {label}",
            extra={
                **fields,
                "content_type": request.headers.get("content-type"),
                "content_length": request.headers.get("content-length"),
                "client_ip": request.client.host if request.client else None,
            },
        )

        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(
                f"Request failed: {label} - {e}",
                extra={**fields, "process_time_ms": _elapsed_ms(started)},
                exc_info=True,
            )
            raise

        logger.info(
            f"Request finished: {label} -> {response.status_code}",
            extra={**fields, "status_code": response.status_code, "process_time_ms": _elapsed_ms(started)},
        )
        response.headers[REQUEST_ID_HEADER] = request_id
        return response
