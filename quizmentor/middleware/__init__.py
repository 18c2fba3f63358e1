"""Middleware modules for QuizMentor Backend"""

from .logging_middleware import LoggingMiddleware
from .rate_limit import add_rate_limiting
from .request_id import RequestIDMiddleware
from .timeout import TimeoutMiddleware

__all__ = [
    "add_rate_limiting",
    "LoggingMiddleware",
    "RequestIDMiddleware",
    "TimeoutMiddleware",
]
