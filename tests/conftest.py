"""Pytest fixtures for Periodical Archiver tests."""

import fitz
import pytest

from periodical_archiver.config import ArchiveSettings, SiteSettings
from schemas.issue import IssueKey


@pytest.fixture
def site():
    """Default site settings."""
    return SiteSettings()


@pytest.fixture
def settings(tmp_path):
    """Archive settings writing into a temporary directory."""
    return ArchiveSettings(
        username="reader@example.com",
        password="s3cret",
        session_path=tmp_path / "cookiejar.json",
        output_dir=tmp_path / "archive",
        retry_delay=0,
        size_check_delay=0,
    )


@pytest.fixture
def issue_key():
    """First issue of the test publication."""
    return IssueKey("xx", 2023, 1)


@pytest.fixture
def index_markup():
    """Issue index page linking two articles, each more than once."""
    return """<!DOCTYPE html>
<html>
<body>
    <nav>
        <a href="/select/xx/archiv/2023/1/seite-12">Editorial</a>
        <a href="/select/xx/archiv/2023/1/seite-30">Feature</a>
    </nav>
    <main>
        <article>
            <a href="/select/xx/archiv/2023/1/seite-12">Editorial</a>
            <a href="/select/xx/archiv/2023/1/seite-12/pdf">PDF</a>
        </article>
        <article>
            <a href="/select/xx/archiv/2023/1/seite-30">Feature</a>
        </article>
        <a href="/select/xx/archiv/2023/2/seite-99">Next issue</a>
        <a href="/select/yy/archiv/2023/1/seite-77">Other publication</a>
    </main>
</body>
</html>
"""


@pytest.fixture
def make_pdf():
    """Factory writing a PDF with the given number of pages."""

    def _make_pdf(path, pages=1, label="page"):
        path.parent.mkdir(parents=True, exist_ok=True)
        doc = fitz.open()
        for i in range(pages):
            page = doc.new_page(width=595, height=842)
            page.insert_text((72, 72), f"{label} {i + 1}", fontsize=12)
        doc.save(str(path))
        doc.close()
        return path

    return _make_pdf
