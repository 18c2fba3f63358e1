"""
Request timeout middleware for QuizMentor Backend
Bounds the time a single request may take
"""

import asyncio
import logging
from typing import Callable

from fastapi import Request, Response, status
from starlette.concurrency import run_in_threadpool
from starlette.middleware.base import BaseHTTPMiddleware

from quizmentor.core.deadline import reset_deadline, start_deadline
from quizmentor.core.exceptions import create_error_response

logger = logging.getLogger(__name__)


class TimeoutMiddleware(BaseHTTPMiddleware):
    """
    Answer 503 when a request exceeds ``timeout`` seconds

    The handler may still be running in the threadpool when the deadline
    passes. Closing the deadline stops any later commit, so the error is
    only marked retryable when the request wrote nothing.
    """

    def __init__(self, app, timeout: float):
        super().__init__(app)
        self.timeout = timeout

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        deadline, token = start_deadline(self.timeout)
        try:
            return await asyncio.wait_for(call_next(request), timeout=self.timeout)
        except asyncio.TimeoutError:
            # Waits for an in-flight commit to settle
            committed = await run_in_threadpool(deadline.expire)
            logger.warning(
                "Request timed out",
                extra={
                    "method": request.method,
                    "path": request.url.path,
                    "timeout": self.timeout,
                    "committed": committed,
                },
            )
            if committed:
                message = "The request took too long to complete but its changes were saved"
            else:
                message = "The request took too long to complete, please retry"
            return create_error_response(
                request=request,
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                error_code="REQUEST_TIMEOUT",
                message=message,
                details={"retryable": not committed, "timeout_seconds": self.timeout},
            )
        finally:
            reset_deadline(token)
