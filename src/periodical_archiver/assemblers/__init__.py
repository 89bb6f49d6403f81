"""Issue assembly strategies."""

from .article_merge import ArticleMergeAssembler
from .assembler import DocumentAssembler
from .whole_issue import WholeIssueAssembler

__all__ = ["ArticleMergeAssembler", "DocumentAssembler", "WholeIssueAssembler"]
