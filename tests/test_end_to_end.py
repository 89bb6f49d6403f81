"""End-to-end runs of the walker against a simulated archive site."""

from unittest.mock import MagicMock

import fitz
import httpx
import pytest

from periodical_archiver.aggregators import ArchiveWalker
from periodical_archiver.assemblers import ArticleMergeAssembler, WholeIssueAssembler
from periodical_archiver.clients import Fetcher
from periodical_archiver.transformers import PageRenderer, PyMuPDFMerger
from schemas.issue import IssueKey

ARCHIVE = "https://www.heise.de/select/xx/archiv/2023"
THUMBNAILS = "https://heise.cloudimg.io/v7/_www-heise-de_/select/thumbnail/xx/2023"

ISSUE_ONE_INDEX = """<html><body>
<a href="/select/xx/archiv/2023/1/seite-12">Editorial</a>
<a href="/select/xx/archiv/2023/1/seite-30">Feature</a>
<a href="/select/xx/archiv/2023/1/seite-12">Editorial</a>
</body></html>"""


class FakeArchiveSite:
    """MockTransport handler serving issue 1 of "xx" 2023 only."""

    def __init__(self, issue_pdf: bytes = b""):
        self.issue_pdf = issue_pdf
        self.requested: list[str] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        self.requested.append(url)
        routes = {
            f"{THUMBNAILS}/1.jpg": lambda: httpx.Response(200, content=b"\xff\xd8jpeg"),
            f"{ARCHIVE}/1": lambda: httpx.Response(200, text=ISSUE_ONE_INDEX),
            f"{ARCHIVE}/1/download": lambda: httpx.Response(200, content=self.issue_pdf),
        }
        if url in routes:
            return routes[url]()
        return httpx.Response(404)


@pytest.fixture
def output_dir(tmp_path):
    return tmp_path / "archive"


@pytest.fixture
def renderer(make_pdf):
    mock_renderer = MagicMock(spec=PageRenderer)
    mock_renderer.render.side_effect = lambda url, destination: make_pdf(destination)
    return mock_renderer


class TestArticleAssemblyRun:
    """Walk using the render-and-merge strategy."""

    def test_issue_one_merged_issue_two_missing(self, output_dir, site, renderer):
        """Issue 1 becomes one PDF with no leftovers; issue 2 produces nothing."""
        fake = FakeArchiveSite()
        with httpx.Client(transport=httpx.MockTransport(fake)) as client:
            fetcher = Fetcher(client, retry_delay=0)
            assembler = ArticleMergeAssembler(
                fetcher, renderer, PyMuPDFMerger(), site, output_dir
            )
            walker = ArchiveWalker(fetcher, assembler, site, output_dir, last_issue=2)

            summary = walker.walk("xx", 2023)

        issue_one = IssueKey("xx", 2023, 1)
        issue_two = IssueKey("xx", 2023, 2)
        assert summary.completed == [issue_one]
        assert summary.missing == [issue_two]
        assert summary.failed == []

        with fitz.open(str(issue_one.artifact_path(output_dir))) as doc:
            assert len(doc) == 2
        assert renderer.render.call_count == 2
        assert not issue_one.article_dir(output_dir).exists()
        assert not issue_two.artifact_path(output_dir).exists()
        assert f"{ARCHIVE}/2" in fake.requested

        year_dir = output_dir / "xx" / "2023"
        assert sorted(p.name for p in year_dir.iterdir()) == [
            "xx.2023.01.jpg",
            "xx.2023.01.pdf",
        ]

    def test_second_run_makes_no_requests_for_finished_issue(
        self, output_dir, site, renderer
    ):
        """A rerun skips issue 1 entirely."""
        fake = FakeArchiveSite()
        with httpx.Client(transport=httpx.MockTransport(fake)) as client:
            fetcher = Fetcher(client, retry_delay=0)
            assembler = ArticleMergeAssembler(
                fetcher, renderer, PyMuPDFMerger(), site, output_dir
            )
            walker = ArchiveWalker(fetcher, assembler, site, output_dir, last_issue=2)
            walker.walk("xx", 2023)
            fake.requested.clear()

            summary = walker.walk("xx", 2023)

        assert summary.skipped == [IssueKey("xx", 2023, 1)]
        assert fake.requested == [f"{THUMBNAILS}/2.jpg", f"{ARCHIVE}/2"]


class TestWholeIssueRun:
    """Walk using the whole-issue download strategy."""

    def test_issue_one_downloaded_loop_halts_at_issue_two(self, output_dir, site, make_pdf):
        """Issue 1 is downloaded and nothing after issue 2 is requested."""
        issue_pdf = make_pdf(output_dir.parent / "source.pdf", pages=3).read_bytes()
        fake = FakeArchiveSite(issue_pdf=issue_pdf)
        with httpx.Client(transport=httpx.MockTransport(fake)) as client:
            fetcher = Fetcher(client, retry_delay=0)
            assembler = WholeIssueAssembler(fetcher, site, output_dir)
            walker = ArchiveWalker(fetcher, assembler, site, output_dir, last_issue=32)

            summary = walker.walk("xx", 2023)

        issue_one = IssueKey("xx", 2023, 1)
        assert summary.completed == [issue_one]
        assert summary.missing == [IssueKey("xx", 2023, 2)]
        assert issue_one.artifact_path(output_dir).read_bytes() == issue_pdf
        assert not IssueKey("xx", 2023, 2).artifact_path(output_dir).exists()

        assert fake.requested == [
            f"{THUMBNAILS}/1.jpg",
            f"{ARCHIVE}/1/download",
            f"{THUMBNAILS}/2.jpg",
        ]
