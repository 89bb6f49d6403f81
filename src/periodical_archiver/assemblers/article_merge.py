"""Assembler building issue PDFs from individual articles."""

import logging
from pathlib import Path

from periodical_archiver.clients import Fetcher
from periodical_archiver.config import SiteSettings
from periodical_archiver.transformers import AssemblyError, PageRenderer, PDFMerger
from schemas.issue import ArticleKey, IssueKey

from .assembler import DocumentAssembler

logger = logging.getLogger(__name__)


class ArticleMergeAssembler(DocumentAssembler):
    """Materialize every article as a PDF and merge them into the issue PDF.

    The ArticleMergeAssembler:
    1. For each article, in index order:
       a. Fetches the article's PDF endpoint if the index links one
       b. Otherwise renders the article's print view with the session cookies
    2. Merges the article PDFs into the issue PDF
    3. Deletes the article PDFs and their directory

    Article PDFs are deleted when the issue fails as well; the next run
    starts the issue from scratch.
    """

    requires_articles = True
    stop_on_missing_probe = False

    def __init__(
        self,
        fetcher: Fetcher,
        renderer: PageRenderer,
        merger: PDFMerger,
        site: SiteSettings,
        output_dir: Path,
        prefer_article_pdf: bool = True,
    ):
        """Initialize the assembler.

        Args:
            fetcher: Fetcher for article PDF endpoints
            renderer: Renderer for article print views; closed with the assembler
            merger: PDF merge backend
            site: Site URL templates
            output_dir: Root directory for artifacts
            prefer_article_pdf: Use linked article PDFs instead of rendering
        """
        self.fetcher = fetcher
        self.renderer = renderer
        self.merger = merger
        self.site = site
        self.output_dir = output_dir
        self.prefer_article_pdf = prefer_article_pdf

    def close(self) -> None:
        self.renderer.close()

    def materialize_issue(self, key: IssueKey, articles: list[ArticleKey]) -> Path:
        if not articles:
            raise AssemblyError(f"No articles to assemble for issue {key}")

        article_dir = key.article_dir(self.output_dir)
        article_paths: list[Path] = []
        try:
            for article in articles:
                article_paths.append(self.materialize_article(article))
            return self.assemble_issue(article_paths, key.artifact_path(self.output_dir))
        except Exception:
            self._discard(article_paths, article_dir)
            raise

    def materialize_article(self, article: ArticleKey) -> Path:
        """Produce the PDF for a single article.

        Args:
            article: Article to materialize

        Returns:
            Path of the article PDF

        Raises:
            RenderError: If the print view cannot be rendered
        """
        article_path = article.artifact_path(self.output_dir)

        if self.prefer_article_pdf and article.pdf_available:
            outcome = self.fetcher.fetch(self.site.article_pdf_url_for(article), article_path)
            if outcome.ok:
                logger.debug(f"Fetched PDF for {article}")
                return article_path
            logger.info(f"PDF endpoint missing for {article}, rendering instead")

        logger.debug(f"Rendering {article}")
        return self.renderer.render(self.site.article_print_url_for(article), article_path)

    def assemble_issue(self, article_paths: list[Path], issue_path: Path) -> Path:
        """Merge article PDFs into the issue PDF and remove the inputs.

        Args:
            article_paths: Article PDFs in issue order
            issue_path: Canonical path of the issue PDF

        Returns:
            The issue path

        Raises:
            MergeError: If the merge fails; no issue PDF is written
        """
        self.merger.merge(article_paths, issue_path)
        self._discard(article_paths, article_paths[0].parent)
        return issue_path

    def _discard(self, article_paths: list[Path], article_dir: Path) -> None:
        """Delete article PDFs and their directory."""
        for path in article_paths:
            path.unlink(missing_ok=True)
        if article_dir.exists():
            try:
                article_dir.rmdir()
            except OSError as e:
                logger.warning(f"Could not remove article directory {article_dir}: {e}")
