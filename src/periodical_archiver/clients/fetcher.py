"""Retrying fetcher for downloading archive resources."""

import logging
import os
from pathlib import Path
from time import sleep
from typing import Callable, TypeVar

import httpx

from schemas.fetch import FetchOutcome, FetchTarget

from .exceptions import (
    APIError,
    ExhaustedRetriesError,
    IntegrityError,
    NotFoundError,
    RateLimitError,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

PARTIAL_SUFFIX = ".part"
STAGING_SUFFIX = ".download"


def partial_path(destination: Path) -> Path:
    """Temporary path a download is written to before it is moved into place."""
    return destination.with_name(destination.name + PARTIAL_SUFFIX)


class Fetcher:
    """Downloads resources through an authenticated httpx client.

    Each fetch is retried a bounded number of times with a fixed delay.
    A 404 is classified as NotFound and never retried. Bodies are streamed
    to ``<destination>.part`` and renamed onto the destination only once
    fully flushed, so a failed attempt never leaves a file behind.

    Example:
        fetcher = Fetcher(session.ensure_session())
        outcome = fetcher.fetch(url, Path("ct/2023/ct.2023.01.jpg"))
        if outcome.is_not_found:
            ...
    """

    def __init__(
        self,
        client: httpx.Client,
        retry_attempts: int = 3,
        retry_delay: float = 5.0,
        chunk_size: int = 64 * 1024,
    ):
        """Initialize the fetcher.

        Args:
            client: Authenticated HTTP client; it is read but never reconfigured
            retry_attempts: Default number of attempts per fetch
            retry_delay: Fixed delay between attempts in seconds
            chunk_size: Size of streamed body chunks in bytes
        """
        self.client = client
        self.retry_attempts = retry_attempts
        self.retry_delay = retry_delay
        self.chunk_size = chunk_size

    def fetch(
        self, url: str, destination: Path, max_attempts: int | None = None
    ) -> FetchOutcome:
        """Download a URL to a file.

        Args:
            url: URL to download
            destination: File to write the body to
            max_attempts: Attempts allowed (default: retry_attempts)

        Returns:
            FetchOutcome with SUCCESS or NOT_FOUND status

        Raises:
            ExhaustedRetriesError: If every attempt failed with a transient error
        """
        target = FetchTarget(
            url=url,
            destination=destination,
            max_attempts=self.retry_attempts if max_attempts is None else max_attempts,
        )
        return self.fetch_target(target)

    def fetch_target(self, target: FetchTarget) -> FetchOutcome:
        """Download a FetchTarget, classifying 404s as NotFound."""
        try:
            written = self._with_retries(
                target.url,
                target.max_attempts,
                lambda: self._download(target.url, target.destination),
            )
        except NotFoundError:
            logger.warning(f"Resource not found: {target.url}")
            return FetchOutcome.not_found(target)

        logger.debug(f"Fetched {target.url} ({written} bytes) to {target.destination}")
        return FetchOutcome.success(target, written)

    def fetch_text(self, url: str, max_attempts: int | None = None) -> str:
        """Fetch a URL and return its decoded body.

        Raises:
            NotFoundError: If the server returns 404
            ExhaustedRetriesError: If every attempt failed with a transient error
        """
        return self._with_retries(
            url,
            self.retry_attempts if max_attempts is None else max_attempts,
            lambda: self._handle_response(self.client.get(url)).text,
        )

    def _with_retries(self, url: str, max_attempts: int, operation: Callable[[], T]) -> T:
        """Run an operation with fixed-delay retries for transient failures.

        NotFoundError propagates immediately; HTTP status errors, rate limits
        and transport errors are retried.

        Raises:
            ValueError: If max_attempts is less than 1
        """
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")

        last_exception: Exception | None = None

        for attempt in range(1, max_attempts + 1):
            try:
                return operation()
            except NotFoundError:
                raise
            except (APIError, httpx.HTTPError) as e:
                last_exception = e
                logger.warning(f"Attempt {attempt}/{max_attempts} failed for {url}: {e}")
                if attempt < max_attempts:
                    sleep(self.retry_delay)

        raise ExhaustedRetriesError(
            f"Giving up on {url} after {max_attempts} attempts",
            url=url,
            attempts=max_attempts,
        ) from last_exception

    def _download(self, url: str, destination: Path) -> int:
        with self.client.stream("GET", url) as response:
            self._handle_response(response)
            return self._stream_to_file(response, destination)

    def _handle_response(self, response: httpx.Response) -> httpx.Response:
        """Map HTTP errors to exceptions.

        Raises:
            NotFoundError: For 404 responses
            RateLimitError: For 429 responses
            APIError: For other non-2xx responses
        """
        if response.is_success:
            return response

        status_code = response.status_code

        if status_code == 404:
            raise NotFoundError(f"Resource not found: {response.url}")
        elif status_code == 429:
            raise RateLimitError(f"Rate limit exceeded: {response.url}")
        else:
            raise APIError(
                f"HTTP error {status_code}: {response.url}",
                status_code=status_code,
            )

    def _stream_to_file(self, response: httpx.Response, destination: Path) -> int:
        """Stream a response body to disk, moving it into place once synced."""
        destination.parent.mkdir(parents=True, exist_ok=True)
        temp_path = partial_path(destination)
        written = 0
        try:
            with open(temp_path, "wb") as f:
                for chunk in response.iter_bytes(self.chunk_size):
                    f.write(chunk)
                    written += len(chunk)
                f.flush()
                os.fsync(f.fileno())
            temp_path.replace(destination)
        except Exception:
            temp_path.unlink(missing_ok=True)
            raise
        return written


class SizeGuardedFetcher:
    """Wraps a Fetcher with a minimum-size check on downloaded files.

    The server can answer 200 with a truncated placeholder body under load.
    Each download lands in ``<destination>.download`` first and is moved onto
    the destination only once it reaches ``min_bytes``; smaller files are
    deleted and fetched again, up to ``attempts`` times, independent of the
    wrapped fetcher's own retries.
    """

    def __init__(
        self,
        fetcher: Fetcher,
        min_bytes: int = 5_000_000,
        attempts: int = 10,
        delay: float = 2.0,
    ):
        self.fetcher = fetcher
        self.min_bytes = min_bytes
        self.attempts = attempts
        self.delay = delay

    def fetch(
        self, url: str, destination: Path, max_attempts: int | None = None
    ) -> FetchOutcome:
        """Download a URL, refetching while the result is too small.

        The destination never holds a file below ``min_bytes``.

        Raises:
            IntegrityError: If the file is still too small after all attempts
            ExhaustedRetriesError: If the wrapped fetcher gives up
        """
        staging_path = destination.with_name(destination.name + STAGING_SUFFIX)
        target = FetchTarget(url=url, destination=destination)
        size = 0
        for attempt in range(1, self.attempts + 1):
            outcome = self.fetcher.fetch(url, staging_path, max_attempts)
            if outcome.is_not_found:
                return FetchOutcome.not_found(target)

            size = staging_path.stat().st_size
            if size >= self.min_bytes:
                staging_path.replace(destination)
                return FetchOutcome.success(target, size)

            logger.warning(
                f"Downloaded file too small ({size} < {self.min_bytes} bytes), "
                f"attempt {attempt}/{self.attempts}: {url}"
            )
            staging_path.unlink(missing_ok=True)
            if attempt < self.attempts:
                sleep(self.delay)

        raise IntegrityError(
            f"File at {url} still below {self.min_bytes} bytes after {self.attempts} attempts",
            url=url,
            size=size,
            min_bytes=self.min_bytes,
        )

    def fetch_text(self, url: str, max_attempts: int | None = None) -> str:
        return self.fetcher.fetch_text(url, max_attempts)
