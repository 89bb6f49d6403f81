"""Tests for the CLI module."""

from http.cookiejar import CookieJar
from unittest.mock import MagicMock, patch

import pytest

from periodical_archiver.aggregators import WalkSummary
from periodical_archiver.assemblers import ArticleMergeAssembler, WholeIssueAssembler
from periodical_archiver.cli import build_assembler, main
from periodical_archiver.clients import Fetcher, LoginError, SizeGuardedFetcher
from periodical_archiver.transformers import GhostscriptMerger, PyMuPDFMerger
from schemas.issue import IssueKey


@pytest.fixture
def credentials(monkeypatch, tmp_path):
    """Credentials in the environment, working directory without .env."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("ARCHIVE_USERNAME", "reader@example.com")
    monkeypatch.setenv("ARCHIVE_PASSWORD", "s3cret")
    return monkeypatch


def mock_context(mock_class):
    """Make the mocked class return itself from ``with``."""
    instance = MagicMock()
    instance.__enter__ = MagicMock(return_value=instance)
    instance.__exit__ = MagicMock(return_value=False)
    mock_class.return_value = instance
    return instance


class TestCLIRun:
    """Tests for the run command."""

    def test_no_command_prints_help(self, capsys):
        """Without a command, help is printed."""
        result = main([])

        assert result == 0
        assert "periodical-archiver" in capsys.readouterr().out

    def test_rejects_reversed_year_range(self, credentials, caplog):
        """An end year before the start year is an error."""
        result = main(["run", "ct", "2023", "2021"])

        assert result == 1
        assert "before start year" in caplog.text

    def test_missing_credentials(self, monkeypatch, tmp_path, caplog):
        """Missing credentials fail before any network activity."""
        monkeypatch.chdir(tmp_path)
        monkeypatch.delenv("ARCHIVE_USERNAME", raising=False)
        monkeypatch.delenv("ARCHIVE_PASSWORD", raising=False)

        with patch("periodical_archiver.cli.SessionManager") as mock_sessions:
            result = main(["run", "ct", "2023"])

        assert result == 1
        assert "ARCHIVE_USERNAME" in caplog.text
        mock_sessions.assert_not_called()

    @patch("periodical_archiver.cli.ArchiveWalker")
    @patch("periodical_archiver.cli.SessionManager")
    def test_login_failure(self, mock_sessions_class, mock_walker_class, credentials, caplog):
        """A failed login aborts the run."""
        sessions = mock_context(mock_sessions_class)
        sessions.ensure_session.side_effect = LoginError("Login failed: 401")

        result = main(["run", "ct", "2023"])

        assert result == 1
        assert "Login failed" in caplog.text
        mock_walker_class.assert_not_called()

    @patch("periodical_archiver.cli.build_assembler")
    @patch("periodical_archiver.cli.ArchiveWalker")
    @patch("periodical_archiver.cli.SessionManager")
    def test_single_year(
        self, mock_sessions_class, mock_walker_class, mock_build, credentials, tmp_path
    ):
        """run walks the start year when no end year is given."""
        sessions = mock_context(mock_sessions_class)
        mock_context(mock_build)
        walker = mock_walker_class.return_value
        walker.walk.return_value = WalkSummary(completed=[IssueKey("ct", 2023, 1)])

        result = main(["run", "ct", "2023", "--output", str(tmp_path / "out")])

        assert result == 0
        sessions.ensure_session.assert_called_once_with(force_login=False)
        walker.walk.assert_called_once_with("ct", 2023, 2023)
        settings = mock_sessions_class.call_args.args[0]
        assert settings.output_dir == tmp_path / "out"

    @patch("periodical_archiver.cli.build_assembler")
    @patch("periodical_archiver.cli.ArchiveWalker")
    @patch("periodical_archiver.cli.SessionManager")
    def test_year_range_and_options(
        self, mock_sessions_class, mock_walker_class, mock_build, credentials
    ):
        """Command-line options reach the settings and the walker."""
        sessions = mock_context(mock_sessions_class)
        assembler = mock_context(mock_build)
        walker = mock_walker_class.return_value
        walker.walk.return_value = WalkSummary()

        result = main([
            "run", "ix", "2020", "2022",
            "--strategy", "issue",
            "--first-issue", "3",
            "--last-issue", "13",
            "--min-size", "5000000",
            "--login",
        ])

        assert result == 0
        sessions.ensure_session.assert_called_once_with(force_login=True)
        walker.walk.assert_called_once_with("ix", 2020, 2022)
        settings = mock_build.call_args.args[0]
        assert settings.strategy == "issue"
        assert settings.min_issue_bytes == 5_000_000
        kwargs = mock_walker_class.call_args.kwargs
        assert kwargs == {"first_issue": 3, "last_issue": 13}
        assert mock_walker_class.call_args.args[1] is assembler
        assembler.__exit__.assert_called_once()

    @patch("periodical_archiver.cli.build_assembler")
    @patch("periodical_archiver.cli.ArchiveWalker")
    @patch("periodical_archiver.cli.SessionManager")
    def test_min_size_limits_issue_range(
        self, mock_sessions_class, mock_walker_class, mock_build, credentials
    ):
        """--min-size with the issue strategy tries issues 1 to 10 by default."""
        credentials.delenv("ARCHIVE_LAST_ISSUE", raising=False)
        mock_context(mock_sessions_class)
        mock_context(mock_build)
        mock_walker_class.return_value.walk.return_value = WalkSummary()

        result = main(["run", "ct", "2023", "--strategy", "issue", "--min-size", "5000000"])

        assert result == 0
        assert mock_walker_class.call_args.kwargs == {"first_issue": 1, "last_issue": 10}

    @patch("periodical_archiver.cli.build_assembler")
    @patch("periodical_archiver.cli.ArchiveWalker")
    @patch("periodical_archiver.cli.SessionManager")
    def test_failed_issues_reported(
        self, mock_sessions_class, mock_walker_class, mock_build, credentials, caplog
    ):
        """Failed issues are listed but do not change the exit code."""
        mock_context(mock_sessions_class)
        mock_context(mock_build)
        mock_walker_class.return_value.walk.return_value = WalkSummary(
            failed=[IssueKey("ct", 2023, 4)]
        )

        result = main(["run", "ct", "2023"])

        assert result == 0
        assert "Failed: 1" in caplog.text
        assert "ct 2023/04" in caplog.text


class TestBuildAssembler:
    """Tests for build_assembler()."""

    def test_article_strategy(self, settings):
        """The default strategy renders and merges articles."""
        fetcher = MagicMock(spec=Fetcher)

        assembler = build_assembler(settings, fetcher, CookieJar())

        assert isinstance(assembler, ArticleMergeAssembler)
        assert isinstance(assembler.merger, PyMuPDFMerger)
        assert assembler.fetcher is fetcher
        assert assembler.renderer.timeout == settings.render_timeout

    def test_ghostscript_merger(self, settings):
        """The merger backend follows the settings."""
        settings = settings.model_copy(update={"merger": "ghostscript"})

        assembler = build_assembler(settings, MagicMock(spec=Fetcher), CookieJar())

        assert isinstance(assembler.merger, GhostscriptMerger)

    def test_issue_strategy(self, settings):
        """The issue strategy downloads with the plain fetcher."""
        settings = settings.model_copy(update={"strategy": "issue"})
        fetcher = MagicMock(spec=Fetcher)

        assembler = build_assembler(settings, fetcher, CookieJar())

        assert isinstance(assembler, WholeIssueAssembler)
        assert assembler.fetcher is fetcher

    def test_issue_strategy_with_size_check(self, settings):
        """A minimum size wraps the fetcher in a size guard."""
        settings = settings.model_copy(
            update={"strategy": "issue", "min_issue_bytes": 5_000_000}
        )

        assembler = build_assembler(settings, MagicMock(spec=Fetcher), CookieJar())

        assert isinstance(assembler.fetcher, SizeGuardedFetcher)
        assert assembler.fetcher.min_bytes == 5_000_000
        assert assembler.fetcher.attempts == 10
