"""Fetch request and result types."""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path


class FetchStatus(str, Enum):
    SUCCESS = "success"
    NOT_FOUND = "not_found"


@dataclass(frozen=True)
class FetchTarget:
    """A single resource to retrieve.

    Attributes:
        url: Absolute URL to GET
        destination: Local file path the body is written to
        max_attempts: Attempts allowed for transient failures
    """

    url: str
    destination: Path
    max_attempts: int = 3


@dataclass(frozen=True)
class FetchOutcome:
    """Result of a fetch that did not exhaust its retries.

    Exhausted retries are raised as ExhaustedRetriesError instead of being
    returned, so an outcome is always either a written file or a confirmed 404.
    """

    status: FetchStatus
    url: str
    destination: Path
    bytes_written: int = 0

    @classmethod
    def success(cls, target: FetchTarget, bytes_written: int) -> "FetchOutcome":
        return cls(FetchStatus.SUCCESS, target.url, target.destination, bytes_written)

    @classmethod
    def not_found(cls, target: FetchTarget) -> "FetchOutcome":
        return cls(FetchStatus.NOT_FOUND, target.url, target.destination)

    @property
    def ok(self) -> bool:
        return self.status is FetchStatus.SUCCESS

    @property
    def is_not_found(self) -> bool:
        return self.status is FetchStatus.NOT_FOUND
