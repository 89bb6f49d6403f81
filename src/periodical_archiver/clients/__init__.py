"""Network clients for the archive site."""

from .exceptions import (
    APIError,
    ClientError,
    ExhaustedRetriesError,
    IntegrityError,
    LoginError,
    NotFoundError,
    RateLimitError,
    SessionError,
)
from .fetcher import Fetcher, SizeGuardedFetcher
from .session import SessionManager

__all__ = [
    "Fetcher",
    "SizeGuardedFetcher",
    "SessionManager",
    "ClientError",
    "APIError",
    "RateLimitError",
    "NotFoundError",
    "ExhaustedRetriesError",
    "IntegrityError",
    "LoginError",
    "SessionError",
]
