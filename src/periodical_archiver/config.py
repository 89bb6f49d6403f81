"""Runtime configuration for periodical-archiver.

Settings are resolved once at startup from ``ARCHIVE_*`` environment
variables (and an optional ``.env`` file). Site URL templates live in
``SiteSettings`` and can be overridden with ``ARCHIVE_SITE__<FIELD>``.
"""

import re
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, ValidationError, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from schemas.issue import ArticleKey, IssueKey

ENV_PREFIX = "ARCHIVE_"

# Issues per year tried by the size-checked whole-issue deployment
SIZE_CHECKED_LAST_ISSUE = 10


class ConfigurationError(Exception):
    """Raised when required settings are missing or invalid."""


class SiteSettings(BaseModel):
    """URL templates and markup patterns of the archive site.

    Templates are ``str.format`` strings with the placeholders
    ``{publication}``, ``{year}``, ``{issue}`` and ``{article}``.
    ``article_link_pattern`` is a regular expression whose first group
    captures the article token; its placeholders are filled with
    regex-escaped values.
    """

    login_url: str = "https://www.heise.de/sso/login"
    login_submit_url: str = "https://www.heise.de/sso/login/login"
    thumbnail_url: str = (
        "https://heise.cloudimg.io/v7/_www-heise-de_/select/thumbnail/"
        "{publication}/{year}/{issue}.jpg"
    )
    index_url: str = "https://www.heise.de/select/{publication}/archiv/{year}/{issue}"
    issue_pdf_url: str = (
        "https://www.heise.de/select/{publication}/archiv/{year}/{issue}/download"
    )
    article_print_url: str = (
        "https://www.heise.de/select/{publication}/archiv/{year}/{issue}"
        "/seite-{article}?view=print"
    )
    article_pdf_url: str = (
        "https://www.heise.de/select/{publication}/archiv/{year}/{issue}"
        "/seite-{article}/pdf"
    )
    article_link_pattern: str = r'/select/{publication}/archiv/{year}/{issue}/seite-([^/"?#]+)"'
    article_pdf_link: str = '/select/{publication}/archiv/{year}/{issue}/seite-{article}/pdf"'

    def _issue_fields(self, key: IssueKey) -> dict[str, str | int]:
        return {"publication": key.publication, "year": key.year, "issue": key.issue}

    def _article_fields(self, article: ArticleKey) -> dict[str, str | int]:
        return {**self._issue_fields(article.issue), "article": article.article_id}

    def thumbnail_url_for(self, key: IssueKey) -> str:
        return self.thumbnail_url.format(**self._issue_fields(key))

    def index_url_for(self, key: IssueKey) -> str:
        return self.index_url.format(**self._issue_fields(key))

    def issue_pdf_url_for(self, key: IssueKey) -> str:
        return self.issue_pdf_url.format(**self._issue_fields(key))

    def article_print_url_for(self, article: ArticleKey) -> str:
        return self.article_print_url.format(**self._article_fields(article))

    def article_pdf_url_for(self, article: ArticleKey) -> str:
        return self.article_pdf_url.format(**self._article_fields(article))

    def article_pdf_link_for(self, article: ArticleKey) -> str:
        return self.article_pdf_link.format(**self._article_fields(article))

    def article_link_regex(self, key: IssueKey) -> re.Pattern[str]:
        """Compile the article link pattern for one issue."""
        return re.compile(
            self.article_link_pattern.format(
                publication=re.escape(key.publication),
                year=key.year,
                issue=key.issue,
            )
        )


class ArchiveSettings(BaseSettings):
    """Settings for one archiver run.

    Attributes:
        username: Archive account username (ARCHIVE_USERNAME)
        password: Archive account password (ARCHIVE_PASSWORD)
        session_path: JSON file holding the persisted session cookies
        output_dir: Root directory for downloaded artifacts
        strategy: "articles" renders and merges articles, "issue" downloads whole-issue PDFs
        first_issue: First issue number to try each year
        last_issue: Last issue number to try each year (10 for size-checked
            whole-issue runs unless set explicitly)
        timeout: HTTP timeout in seconds
        retry_attempts: Attempts per fetch for transient failures
        retry_delay: Fixed delay between fetch attempts in seconds
        min_issue_bytes: Smallest acceptable whole-issue PDF, None disables the check
        size_check_attempts: Refetches allowed when an issue PDF is too small
        size_check_delay: Delay between size-check refetches in seconds
        merger: PDF merge backend
        prefer_article_pdf: Fetch an article's PDF endpoint instead of rendering when linked
        render_timeout: Page navigation timeout for rendering in seconds
        user_agent: User-Agent header for HTTP requests
        site: Site URL templates
    """

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    username: str
    password: str
    session_path: Path = Path("cookiejar.json")
    output_dir: Path = Path(".")
    strategy: Literal["articles", "issue"] = "articles"
    first_issue: int = Field(default=1, ge=1)
    last_issue: int = Field(default=32, ge=1)
    timeout: float = 30
    retry_attempts: int = Field(default=3, ge=1)
    retry_delay: float = 5
    min_issue_bytes: int | None = None
    size_check_attempts: int = Field(default=10, ge=1)
    size_check_delay: float = 2
    merger: Literal["pymupdf", "ghostscript"] = "pymupdf"
    prefer_article_pdf: bool = True
    render_timeout: float = 60
    user_agent: str = "periodical-archiver/1.0"
    site: SiteSettings = SiteSettings()

    @model_validator(mode="after")
    def _default_size_checked_range(self) -> "ArchiveSettings":
        """Size-checked whole-issue runs stop at issue 10 unless told otherwise."""
        if (
            self.strategy == "issue"
            and self.min_issue_bytes is not None
            and "last_issue" not in self.model_fields_set
        ):
            self.last_issue = SIZE_CHECKED_LAST_ISSUE
        return self


def load_settings(**overrides) -> ArchiveSettings:
    """Resolve settings from the environment, applying explicit overrides.

    Args:
        **overrides: Values taking precedence over the environment. Keys whose
            value is None are ignored.

    Returns:
        The resolved ArchiveSettings

    Raises:
        ConfigurationError: If credentials are missing or a value is invalid
    """
    values = {k: v for k, v in overrides.items() if v is not None}
    try:
        return ArchiveSettings(**values)
    except ValidationError as e:
        missing = [
            f"{ENV_PREFIX}{'__'.join(str(p) for p in err['loc']).upper()}"
            for err in e.errors()
            if err["type"] == "missing"
        ]
        if missing:
            raise ConfigurationError(
                f"Missing required environment variable(s): {', '.join(missing)}"
            ) from e
        details = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise ConfigurationError(f"Invalid configuration: {details}") from e
