"""Exceptions raised while producing PDF documents."""


class AssemblyError(Exception):
    """Base exception for render and merge failures.

    Fatal for the issue being assembled, never for the whole run.
    """


class RenderError(AssemblyError):
    """Raised when a page cannot be rendered to PDF."""


class MergeError(AssemblyError):
    """Raised when article PDFs cannot be merged into an issue PDF."""
