"""
Request logging middleware.
Assigns request ids, enforces the request size limit and records timings.
"""

from typing import Callable
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp
import logging
import time
import uuid

from homeverse.services.error_handler import ErrorHandlerService
from homeverse.utils.exceptions import PayloadTooLargeError, BadRequestError

logger = logging.getLogger(__name__)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Middleware that tags every request with an id and logs its outcome.
    Bodies announced larger than max_request_size are rejected with 413.
    """

    def __init__(
        self,
        app: ASGIApp,
        max_request_size: int = 50 * 1024 * 1024,
        enable_request_logging: bool = True,
        slow_request_threshold: float = 2.0
    ):
        super().__init__(app)
        self.max_request_size = max_request_size
        self.enable_request_logging = enable_request_logging
        self.slow_request_threshold = slow_request_threshold

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """
        Process request through the logging middleware.

        Args:
            request: Incoming request
            call_next: Next middleware/handler in chain

        Returns:
            Response with X-Request-ID and X-Processing-Time headers
        """
        request_id = str(uuid.uuid4())[:8]
        request.state.request_id = request_id
        start_time = time.perf_counter()

        rejection = self._check_request_size(request)
        if rejection is not None:
            response = ErrorHandlerService.handle_api_exception(rejection, request)
        else:
            response = await call_next(request)

        processing_time = time.perf_counter() - start_time
        response.headers["X-Request-ID"] = request_id
        response.headers["X-Processing-Time"] = f"{processing_time:.4f}"

        self._log_response(request, response, request_id, processing_time)
        return response

    def _check_request_size(self, request: Request):
        content_length = request.headers.get("content-length")
        if not content_length:
            return None

        try:
            size = int(content_length)
        except ValueError:
            return BadRequestError("Invalid Content-Length header")

        if size > self.max_request_size:
            return PayloadTooLargeError(size, self.max_request_size)
        return None

    def _log_response(self, request: Request, response: Response, request_id: str, processing_time: float) -> None:
        message = (
            f"[{request_id}] {request.method} {request.url.path} "
            f"-> {response.status_code} in {processing_time * 1000:.1f}ms"
        )

        if processing_time > self.slow_request_threshold:
            logger.warning(f"Slow request {message}")
        elif self.enable_request_logging:
            logger.info(message)
        else:
            logger.debug(message)
