"""Assembler downloading ready-made issue PDFs."""

import logging
from pathlib import Path

from periodical_archiver.clients import Fetcher, NotFoundError, SizeGuardedFetcher
from periodical_archiver.config import SiteSettings
from schemas.issue import ArticleKey, IssueKey

from .assembler import DocumentAssembler

logger = logging.getLogger(__name__)


class WholeIssueAssembler(DocumentAssembler):
    """Fetch each issue as a single PDF from the site's download endpoint.

    Issues are numbered without gaps, so a missing thumbnail means the
    year has no further issues.
    """

    requires_articles = False
    stop_on_missing_probe = True

    def __init__(
        self,
        fetcher: Fetcher | SizeGuardedFetcher,
        site: SiteSettings,
        output_dir: Path,
    ):
        """Initialize the assembler.

        Args:
            fetcher: Fetcher for the issue PDF, size-guarded when configured
            site: Site URL templates
            output_dir: Root directory for artifacts
        """
        self.fetcher = fetcher
        self.site = site
        self.output_dir = output_dir

    def materialize_issue(self, key: IssueKey, articles: list[ArticleKey]) -> Path:
        issue_path = key.artifact_path(self.output_dir)
        outcome = self.fetcher.fetch(self.site.issue_pdf_url_for(key), issue_path)
        if outcome.is_not_found:
            raise NotFoundError(f"Issue PDF not found: {outcome.url}")

        logger.debug(f"Downloaded issue {key} ({outcome.bytes_written} bytes)")
        return issue_path
