"""Base class for issue assemblers.

Assemblers turn a discovered issue into its merged issue PDF. Two
strategies exist:

- WholeIssueAssembler: downloads the site's ready-made issue PDF
- ArticleMergeAssembler: produces one PDF per article and merges them
"""

from abc import ABC, abstractmethod
from pathlib import Path

from schemas.issue import ArticleKey, IssueKey


class DocumentAssembler(ABC):
    """Abstract base class for issue assembly strategies.

    Attributes:
        requires_articles: Whether the walker must discover articles first
        stop_on_missing_probe: Whether a missing thumbnail ends the year's
            issue loop (issues are numbered without gaps)
    """

    requires_articles: bool = False
    stop_on_missing_probe: bool = False

    @abstractmethod
    def materialize_issue(self, key: IssueKey, articles: list[ArticleKey]) -> Path:
        """Produce the issue PDF at its canonical path.

        Args:
            key: Issue to assemble
            articles: Discovered articles (empty unless requires_articles)

        Returns:
            Path of the completed issue PDF
        """
        pass

    def close(self) -> None:
        """Release resources held by the assembler."""
        pass

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
