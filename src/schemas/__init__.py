"""Schema definitions for Periodical Archiver."""

from .fetch import FetchOutcome, FetchStatus, FetchTarget
from .issue import ArticleKey, IssueKey
from .session import LoginResponse, RemoteLogin, RemoteLoginData, SessionState, StoredCookie

__all__ = [
    "ArticleKey",
    "FetchOutcome",
    "FetchStatus",
    "FetchTarget",
    "IssueKey",
    "LoginResponse",
    "RemoteLogin",
    "RemoteLoginData",
    "SessionState",
    "StoredCookie",
]
