"""Issue and article domain objects.

All on-disk paths are derived from these keys:

    {root}/
    └── {publication}/
        └── {year}/
            ├── {publication}.{year}.{issue:02}.jpg    # thumbnail
            ├── {publication}.{year}.{issue:02}.pdf    # issue artifact
            └── {issue:02}/                            # transient
                └── {publication}.{year}.{issue:02}.{article_id}.pdf
"""

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class IssueKey:
    """Identifies one periodical issue.

    Attributes:
        publication: Publication short name (e.g., "ct", "ix")
        year: Publication year
        issue: Issue number within the year (1-based)
    """

    publication: str
    year: int
    issue: int

    def __str__(self) -> str:
        return f"{self.publication} {self.year}/{self.issue:02d}"

    @property
    def stem(self) -> str:
        return f"{self.publication}.{self.year}.{self.issue:02d}"

    def year_dir(self, root: Path) -> Path:
        return root / self.publication / str(self.year)

    def artifact_path(self, root: Path) -> Path:
        """Path of the merged issue PDF, the only marker of completed work."""
        return self.year_dir(root) / f"{self.stem}.pdf"

    def thumbnail_path(self, root: Path) -> Path:
        return self.year_dir(root) / f"{self.stem}.jpg"

    def article_dir(self, root: Path) -> Path:
        """Transient directory holding per-article PDFs until they are merged."""
        return self.year_dir(root) / f"{self.issue:02d}"


@dataclass(frozen=True)
class ArticleKey:
    """Identifies one article within an issue.

    Attributes:
        issue: Parent issue
        article_id: Opaque token scraped from the issue index page
        pdf_available: Whether the index page links a PDF endpoint for the article
    """

    issue: IssueKey
    article_id: str
    pdf_available: bool = False

    def __str__(self) -> str:
        return f"{self.issue} article {self.article_id}"

    def artifact_path(self, root: Path) -> Path:
        return self.issue.article_dir(root) / f"{self.issue.stem}.{self.article_id}.pdf"
