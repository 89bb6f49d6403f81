"""Custom exceptions for network clients."""


class ClientError(Exception):
    """Base exception for all client errors."""

    def __init__(self, message: str, *args, **kwargs):
        self.message = message
        super().__init__(message, *args, **kwargs)


class APIError(ClientError):
    """Raised when the server returns a non-2xx response."""

    def __init__(self, message: str, status_code: int, *args, **kwargs):
        self.status_code = status_code
        super().__init__(message, *args, **kwargs)


class RateLimitError(APIError):
    """Raised when the server returns a 429 rate limit response."""

    def __init__(self, message: str = "Rate limit exceeded"):
        super().__init__(message, status_code=429)


class NotFoundError(APIError):
    """Raised when the server returns a 404 not found response.

    A 404 is terminal: the resource is confirmed absent and is never retried.
    """

    def __init__(self, message: str = "Resource not found"):
        super().__init__(message, status_code=404)


class ExhaustedRetriesError(ClientError):
    """Raised when every attempt of a fetch failed with a transient error.

    The last underlying error is chained as ``__cause__``.
    """

    def __init__(self, message: str, url: str, attempts: int):
        self.url = url
        self.attempts = attempts
        super().__init__(message)


class IntegrityError(ClientError):
    """Raised when a fetched file stays implausibly small after all refetches."""

    def __init__(self, message: str, url: str, size: int, min_bytes: int):
        self.url = url
        self.size = size
        self.min_bytes = min_bytes
        super().__init__(message)


class LoginError(ClientError):
    """Raised when the login protocol fails. Fatal for the run."""

    pass


class SessionError(ClientError):
    """Raised when a persisted session cannot be read."""

    pass
