"""
Per-request write deadline

The timeout middleware opens a deadline for each request and database commits
run inside its commit window. Once the deadline has passed no further commit is
allowed, so a request answered with a timeout either wrote nothing or is
reported as having written.
"""

import threading
import time
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator, Optional

from quizmentor.core.exceptions import RequestTimeoutException


class RequestDeadline:
    """Deadline shared by the request handler and the timeout middleware"""

    def __init__(self, timeout: float):
        self.timeout = timeout
        self.expires_at = time.monotonic() + timeout
        self.expired = False
        self.committed = False
        self._lock = threading.Lock()

    def expire(self) -> bool:
        """
        Close the deadline.

        Blocks while a commit is in flight. Returns True if the request had
        already committed a write.
        """
        with self._lock:
            self.expired = True
            return self.committed

    @contextmanager
    def commit_window(self) -> Iterator[None]:
        """
        Hold the deadline open for the duration of one commit

        Raises:
            RequestTimeoutException: If the deadline has already passed
        """
        with self._lock:
            if self.expired or time.monotonic() >= self.expires_at:
                self.expired = True
                raise RequestTimeoutException(self.timeout)
            yield
            self.committed = True


_request_deadline: ContextVar[Optional[RequestDeadline]] = ContextVar(
    "request_deadline", default=None
)


def start_deadline(timeout: float):
    """Open a deadline for the current request; returns it with the reset token"""
    deadline = RequestDeadline(timeout)
    return deadline, _request_deadline.set(deadline)


def reset_deadline(token) -> None:
    _request_deadline.reset(token)


def current_deadline() -> Optional[RequestDeadline]:
    return _request_deadline.get()
