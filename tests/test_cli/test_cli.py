"""Tests for the media-reliability CLI."""

import json
from unittest.mock import AsyncMock, patch

import pytest
from click.testing import CliRunner

from media_reliability.cli import main


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture(autouse=True)
def no_logging_setup():
    with patch("media_reliability.cli.setup_logging") as setup:
        yield setup


@pytest.fixture
def registry_file(tmp_path, registry_json):
    path = tmp_path / "sources.json"
    path.write_text(registry_json, encoding="utf-8")
    return path


class TestValidateSources:
    """Test the `validate-sources` command."""

    def test_valid(self, runner: CliRunner, registry_file) -> None:
        result = runner.invoke(main, ["validate-sources", str(registry_file)])

        assert result.exit_code == 0, result.output
        assert "4 sources valid (3 tiered)" in result.output

    def test_invalid(self, runner: CliRunner, tmp_path) -> None:
        path = tmp_path / "bad.json"
        path.write_text(json.dumps([{"id": "a", "name": "A", "type": "blog"}]), encoding="utf-8")

        result = runner.invoke(main, ["validate-sources", str(path)])

        assert result.exit_code == 1
        assert 'Invalid value for "sources" setting' in result.output

    def test_missing_file(self, runner: CliRunner, tmp_path) -> None:
        result = runner.invoke(main, ["validate-sources", str(tmp_path / "nope.json")])
        assert result.exit_code == 2


class TestScan:
    """Test the `scan` command."""

    def test_prints_report_and_flair(self, runner: CliRunner, registry_file) -> None:
        result = runner.invoke(
            main,
            [
                "scan",
                "--sources", str(registry_file),
                "--title", "Striker signs",
                "--url", "https://www.acme.example/story",
            ],
        )

        assert result.exit_code == 0, result.output
        assert "**Media reliability report:**" in result.output
        assert "**Tier 2**: Acme News" in result.output
        assert "Flair: Tier 2" in result.output

    def test_no_sources(self, runner: CliRunner, registry_file) -> None:
        result = runner.invoke(main, ["scan", "--sources", str(registry_file), "--title", "Nothing here"])

        assert result.exit_code == 0, result.output
        assert "No sources found" in result.output

    def test_body_needs_flag(self, runner: CliRunner, registry_file) -> None:
        args = ["scan", "--sources", str(registry_file), "--title", "Rumour", "--body", "via @janereports"]

        without = runner.invoke(main, args)
        with_flag = runner.invoke(main, args + ["--analyze-body"])

        assert "No sources found" in without.output
        assert "Jane Reporter" in with_flag.output
        # Self-posts are never flaired
        assert "Flair:" not in with_flag.output

    def test_registry_from_environment(self, runner: CliRunner, monkeypatch, registry_json) -> None:
        monkeypatch.setenv("RELIABILITY_SOURCES", registry_json)
        monkeypatch.delenv("RELIABILITY_SOURCES_FILE", raising=False)

        result = runner.invoke(main, ["scan", "--title", "[Scoops] deal agreed"])

        assert result.exit_code == 0, result.output
        assert "**Aggregator**: Scoops" in result.output


class TestHandlePost:
    """Test the `handle-post` command."""

    @pytest.fixture
    def reddit(self, link_post):
        client = AsyncMock()
        client.__aenter__.return_value = client
        client.get_post_by_id.return_value = link_post
        client.submit_comment.return_value = "t1_report"
        return client

    def test_reports(self, runner: CliRunner, reddit, monkeypatch, registry_json) -> None:
        monkeypatch.setenv("RELIABILITY_SOURCES", registry_json)
        monkeypatch.delenv("RELIABILITY_SOURCES_FILE", raising=False)
        monkeypatch.delenv("RELIABILITY_IGNORED_USERS", raising=False)

        with patch("media_reliability.reddit.client.RedditClient", return_value=reddit):
            result = runner.invoke(main, ["handle-post", "t3_abc123"])

        assert result.exit_code == 0, result.output
        assert "Reported 1 sources on t3_abc123" in result.output
        assert "Comment: t1_report" in result.output
        assert "Flair: Tier 2" in result.output
        reddit.lock.assert_awaited_once_with("t1_report")

    def test_failure_exits_nonzero(self, runner: CliRunner, reddit, monkeypatch, registry_json) -> None:
        monkeypatch.setenv("RELIABILITY_SOURCES", registry_json)
        monkeypatch.delenv("RELIABILITY_SOURCES_FILE", raising=False)
        monkeypatch.delenv("RELIABILITY_ERROR_REPORT_SUBREDDIT_NAME", raising=False)
        reddit.submit_comment.side_effect = RuntimeError("thread locked")

        with patch("media_reliability.reddit.client.RedditClient", return_value=reddit):
            result = runner.invoke(main, ["handle-post", "t3_abc123"])

        assert result.exit_code == 1
        assert "thread locked" in result.output
