"""Aggregators walking the archive for issues and articles."""

from .archive_walker import ArchiveWalker, IssueStatus, WalkSummary, extract_article_ids

__all__ = ["ArchiveWalker", "IssueStatus", "WalkSummary", "extract_article_ids"]
