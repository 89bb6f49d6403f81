"""Archive walker enumerating issues and their articles."""

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, Iterable

from periodical_archiver.assemblers import DocumentAssembler
from periodical_archiver.clients import Fetcher, NotFoundError
from periodical_archiver.config import SiteSettings
from schemas.issue import ArticleKey, IssueKey

logger = logging.getLogger(__name__)


class IssueStatus(str, Enum):
    COMPLETED = "completed"
    SKIPPED = "skipped"
    MISSING = "missing"
    FAILED = "failed"


@dataclass
class WalkSummary:
    """Issues visited during a walk, grouped by status."""

    completed: list[IssueKey] = field(default_factory=list)
    skipped: list[IssueKey] = field(default_factory=list)
    missing: list[IssueKey] = field(default_factory=list)
    failed: list[IssueKey] = field(default_factory=list)

    def record(self, key: IssueKey, status: IssueStatus) -> None:
        getattr(self, status.value).append(key)


def extract_article_ids(markup: str, key: IssueKey, site: SiteSettings) -> list[str]:
    """Extract article tokens linked from an issue index page.

    The same article is usually linked several times (teaser, table of
    contents, navigation); tokens are deduplicated preserving first-seen
    order.

    Args:
        markup: HTML of the issue index page
        key: Issue the page belongs to
        site: Site settings holding the article link pattern

    Returns:
        Distinct article tokens in order of first appearance
    """
    matches = site.article_link_regex(key).findall(markup)

    # Deduplicate while preserving order
    seen: set[str] = set()
    article_ids: list[str] = []
    for article_id in matches:
        if article_id not in seen:
            seen.add(article_id)
            article_ids.append(article_id)

    return article_ids


class ArchiveWalker:
    """Walks the (year, issue) space of a publication.

    For every issue without a finished issue PDF the walker probes the
    thumbnail, discovers the issue's articles when the assembler needs
    them, and hands the issue to the assembler. A failure is contained to
    its issue; the walk always continues with the next one.

    Example:
        walker = ArchiveWalker(fetcher, assembler, settings.site, Path("."))
        summary = walker.walk("ct", 2022, 2023)
    """

    def __init__(
        self,
        fetcher: Fetcher,
        assembler: DocumentAssembler,
        site: SiteSettings,
        output_dir: Path,
        first_issue: int = 1,
        last_issue: int = 32,
    ):
        """Initialize the archive walker.

        Args:
            fetcher: Fetcher for thumbnails and index pages
            assembler: Strategy producing the issue PDF
            site: Site URL templates
            output_dir: Root directory for artifacts
            first_issue: First issue number tried each year
            last_issue: Last issue number tried each year (inclusive)
        """
        self.fetcher = fetcher
        self.assembler = assembler
        self.site = site
        self.output_dir = output_dir
        self.first_issue = first_issue
        self.last_issue = last_issue

    def walk(
        self, publication: str, start_year: int, end_year: int | None = None
    ) -> WalkSummary:
        """Process every issue of a publication in a year range.

        Args:
            publication: Publication short name
            start_year: First year (inclusive)
            end_year: Last year (inclusive, default: start_year)

        Returns:
            WalkSummary of the visited issues
        """
        end_year = start_year if end_year is None else end_year
        return self.for_each_issue(
            publication,
            range(start_year, end_year + 1),
            range(self.first_issue, self.last_issue + 1),
            self.process_issue,
        )

    def for_each_issue(
        self,
        publication: str,
        years: Iterable[int],
        issues: Iterable[int],
        visit: Callable[[IssueKey], IssueStatus],
    ) -> WalkSummary:
        """Visit each issue that has no issue PDF yet.

        Exceptions raised by ``visit`` are logged and recorded as failures.
        When ``visit`` reports an issue as missing and the assembler treats a
        missing issue as the end of the year, the remaining issues of that
        year are not visited.
        """
        summary = WalkSummary()
        issue_numbers = list(issues)

        for year in years:
            for issue in issue_numbers:
                key = IssueKey(publication, year, issue)
                artifact_path = key.artifact_path(self.output_dir)

                if artifact_path.exists():
                    logger.debug(f"Skipping existing issue: {artifact_path}")
                    summary.record(key, IssueStatus.SKIPPED)
                    continue

                try:
                    status = visit(key)
                except Exception as e:
                    logger.error(f"Failed to process issue {key}: {e}")
                    summary.record(key, IssueStatus.FAILED)
                    continue

                summary.record(key, status)
                if status is IssueStatus.MISSING and self.assembler.stop_on_missing_probe:
                    logger.info(f"Issue {key} does not exist, no further issues in {year}")
                    break

        return summary

    def process_issue(self, key: IssueKey) -> IssueStatus:
        """Probe, discover and assemble a single issue.

        Returns:
            COMPLETED if the issue PDF was produced, MISSING if the issue
            does not exist
        """
        probe = self.fetcher.fetch(
            self.site.thumbnail_url_for(key), key.thumbnail_path(self.output_dir)
        )
        if probe.is_not_found:
            if self.assembler.stop_on_missing_probe:
                return IssueStatus.MISSING
            logger.info(f"No thumbnail for issue {key}, looking for articles anyway")

        articles: list[ArticleKey] = []
        if self.assembler.requires_articles:
            try:
                articles = self.discover_articles(key)
            except NotFoundError:
                logger.warning(f"No index page for issue {key}")
                return IssueStatus.MISSING
            if not articles:
                logger.warning(f"No articles found for issue {key}")
                return IssueStatus.MISSING
            logger.debug(f"Found {len(articles)} articles in issue {key}")

        issue_path = self.assembler.materialize_issue(key, articles)
        logger.info(f"Completed issue: {issue_path}")
        return IssueStatus.COMPLETED

    def discover_articles(self, key: IssueKey) -> list[ArticleKey]:
        """Fetch an issue's index page and list its articles.

        Raises:
            NotFoundError: If the index page does not exist
        """
        markup = self.fetcher.fetch_text(self.site.index_url_for(key))
        return [
            ArticleKey(key, article_id, self._links_article_pdf(markup, key, article_id))
            for article_id in extract_article_ids(markup, key, self.site)
        ]

    def _links_article_pdf(self, markup: str, key: IssueKey, article_id: str) -> bool:
        return self.site.article_pdf_link_for(ArticleKey(key, article_id)) in markup
