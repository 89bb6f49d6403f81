"""Transformers producing PDF documents from pages and article PDFs."""

from .cookies import cookies_for_url, to_browser_cookie, to_browser_cookies
from .exceptions import AssemblyError, MergeError, RenderError
from .page_renderer import PageRenderer
from .pdf_merger import GhostscriptMerger, PDFMerger, PyMuPDFMerger, get_merger

__all__ = [
    "AssemblyError",
    "GhostscriptMerger",
    "MergeError",
    "PDFMerger",
    "PageRenderer",
    "PyMuPDFMerger",
    "RenderError",
    "cookies_for_url",
    "get_merger",
    "to_browser_cookie",
    "to_browser_cookies",
]
