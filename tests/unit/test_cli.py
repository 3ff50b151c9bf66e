"""Tests for the semrel command line."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

import pytest
from click.testing import CliRunner

from semrel import __version__
from semrel.cli.main import cli

if TYPE_CHECKING:
    from pathlib import Path


COMMITS = [
    {"message": "feat(api): add export", "author": "me", "hash": "c0000001"},
    {"message": "fix: close files", "author": "me", "hash": "c0000002"},
    {"message": "Merge branch 'main'", "author": "me", "hash": "c0000003"},
]


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def commits_json() -> str:
    return json.dumps(COMMITS)


def _last_line(output: str) -> str:
    return output.strip().splitlines()[-1]


class TestCli:
    """Tests for the command group."""

    def test_version(self, runner: CliRunner):
        """--version prints the package version."""
        result = runner.invoke(cli, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.output

    def test_help(self, runner: CliRunner):
        """Both commands are listed."""
        result = runner.invoke(cli, ["--help"])

        assert "next-version" in result.output
        assert "changelog" in result.output


class TestNextVersionCommand:
    """Tests for 'semrel next-version'."""

    def test_release(self, runner: CliRunner, commits_json: str, tmp_path: Path):
        """main releases a minor bump."""
        result = runner.invoke(
            cli,
            ["-q", "next-version", "--last-version", "1.4.2", "--path", str(tmp_path)],
            input=commits_json,
        )

        assert result.exit_code == 0, result.output
        assert _last_line(result.output) == "1.5.0"

    def test_channel_override(self, runner: CliRunner, commits_json: str, tmp_path: Path):
        """--channel replaces the branch mapping."""
        result = runner.invoke(
            cli,
            [
                "-q",
                "next-version",
                "--last-version",
                "1.5.0-beta.1",
                "--channel",
                "beta",
                "--path",
                str(tmp_path),
            ],
            input=commits_json,
        )

        assert result.exit_code == 0, result.output
        assert _last_line(result.output) == "1.5.0-beta.2"

    def test_first_release(self, runner: CliRunner, commits_json: str, tmp_path: Path):
        """Without --last-version the configured baseline is used."""
        (tmp_path / "pyproject.toml").write_text(
            '[tool.semrel.version]\ninitial_version = "0.1.0"\n'
        )
        result = runner.invoke(
            cli, ["-q", "next-version", "--path", str(tmp_path)], input=commits_json
        )

        assert result.exit_code == 0, result.output
        assert _last_line(result.output) == "0.1.0"

    def test_json_output(self, runner: CliRunner, commits_json: str, tmp_path: Path):
        """--json prints the whole decision."""
        result = runner.invoke(
            cli,
            [
                "-q",
                "next-version",
                "--last-version",
                "1.4.2",
                "--branch",
                "master",
                "--json",
                "--path",
                str(tmp_path),
            ],
            input=commits_json,
        )

        assert result.exit_code == 0, result.output
        payload = json.loads(result.output[result.output.index("{") :])
        assert payload["version"] == "1.5.0"
        assert payload["channel"] == "release"
        assert payload["draft"] is False
        assert payload["commits"] == {"major": 0, "minor": 1, "patch": 1, "none": 0}
        assert payload["dropped"] == 1

    def test_json_draft_flag(self, runner: CliRunner, commits_json: str, tmp_path: Path):
        """--json reports pre-release channels as drafts."""
        result = runner.invoke(
            cli,
            [
                "-q",
                "next-version",
                "--last-version",
                "1.5.0-beta.1",
                "--channel",
                "beta",
                "--json",
                "--path",
                str(tmp_path),
            ],
            input=commits_json,
        )

        assert result.exit_code == 0, result.output
        payload = json.loads(result.output[result.output.index("{") :])
        assert payload["version"] == "1.5.0-beta.2"
        assert payload["draft"] is True
        assert payload["new_release"] is True

    def test_json_first_release_on_unknown_channel(
        self, runner: CliRunner, commits_json: str, tmp_path: Path
    ):
        """An unknown channel never reports a first release."""
        result = runner.invoke(
            cli,
            ["-q", "next-version", "--channel", "nightly", "--json", "--path", str(tmp_path)],
            input=commits_json,
        )

        assert result.exit_code == 0, result.output
        payload = json.loads(result.output[result.output.index("{") :])
        assert payload["version"] == "1.0.0"
        assert payload["first_release"] is False
        assert payload["new_release"] is False

    def test_json_first_stable_release(
        self, runner: CliRunner, commits_json: str, tmp_path: Path
    ):
        """A first release on main publishes the baseline."""
        result = runner.invoke(
            cli, ["-q", "next-version", "--json", "--path", str(tmp_path)], input=commits_json
        )

        assert result.exit_code == 0, result.output
        payload = json.loads(result.output[result.output.index("{") :])
        assert payload["version"] == "1.0.0"
        assert payload["first_release"] is True
        assert payload["new_release"] is True

    def test_unconfigured_branch(self, runner: CliRunner, commits_json: str, tmp_path: Path):
        """Branches without a channel keep the version."""
        result = runner.invoke(
            cli,
            [
                "-q",
                "next-version",
                "--last-version",
                "1.4.2",
                "--branch",
                "feature/x",
                "--path",
                str(tmp_path),
            ],
            input=commits_json,
        )

        assert result.exit_code == 0
        assert _last_line(result.output) == "1.4.2"

    def test_commits_from_file(self, runner: CliRunner, tmp_path: Path):
        """--commits reads a file."""
        commits_file = tmp_path / "commits.json"
        commits_file.write_text(json.dumps([{"message": "feat!: new api"}]))
        result = runner.invoke(
            cli,
            [
                "-q",
                "next-version",
                "--commits",
                str(commits_file),
                "--last-version",
                "1.4.2",
                "--path",
                str(tmp_path),
            ],
        )

        assert result.exit_code == 0, result.output
        assert _last_line(result.output) == "2.0.0"

    def test_invalid_json(self, runner: CliRunner, tmp_path: Path):
        """Broken input exits with 1."""
        result = runner.invoke(
            cli,
            ["next-version", "--last-version", "1.0.0", "--path", str(tmp_path)],
            input="not json",
        )

        assert result.exit_code == 1
        assert "not valid JSON" in result.output

    def test_invalid_version(self, runner: CliRunner, commits_json: str, tmp_path: Path):
        """A bad --last-version exits with 1."""
        result = runner.invoke(
            cli,
            ["next-version", "--last-version", "one", "--path", str(tmp_path)],
            input=commits_json,
        )

        assert result.exit_code == 1
        assert "Invalid semantic version" in result.output

    def test_unknown_grammar(self, runner: CliRunner, commits_json: str, tmp_path: Path):
        """An unknown commit_format exits with 1."""
        (tmp_path / "pyproject.toml").write_text('[tool.semrel]\ncommit_format = "emoji"\n')
        result = runner.invoke(
            cli,
            ["next-version", "--last-version", "1.0.0", "--path", str(tmp_path)],
            input=commits_json,
        )

        assert result.exit_code == 1
        assert "Unknown commit format" in result.output


class TestChangelogCommand:
    """Tests for 'semrel changelog'."""

    def test_print(self, runner: CliRunner, commits_json: str, temp_project_with_pyproject: Path):
        """The changelog is printed with configured links."""
        result = runner.invoke(
            cli,
            [
                "-q",
                "changelog",
                "--last-version",
                "1.4.2",
                "--next-version",
                "1.5.0",
                "--path",
                str(temp_project_with_pyproject),
            ],
            input=commits_json,
        )

        assert result.exit_code == 0, result.output
        assert "## [1.5.0](https://github.com/acme/widget/compare/v1.4.2...v1.5.0)" in result.output
        assert "### Features" in result.output
        assert "* **`api`:** add export" in result.output
        assert "### Bug fixes" in result.output

    def test_output_prepends(self, runner: CliRunner, commits_json: str, tmp_path: Path):
        """--output prepends to an existing file."""
        (tmp_path / "CHANGELOG.md").write_text("## 1.4.2 (2024-01-01)\n")
        result = runner.invoke(
            cli,
            [
                "-q",
                "changelog",
                "--last-version",
                "1.4.2",
                "--next-version",
                "1.5.0",
                "--output",
                "CHANGELOG.md",
                "--path",
                str(tmp_path),
            ],
            input=commits_json,
        )

        assert result.exit_code == 0, result.output
        content = (tmp_path / "CHANGELOG.md").read_text()
        assert content.startswith("## 1.5.0 (")
        assert content.rstrip().endswith("## 1.4.2 (2024-01-01)")

    def test_missing_next_version(self, runner: CliRunner, commits_json: str):
        """--next-version is required."""
        result = runner.invoke(cli, ["changelog", "--last-version", "1.0.0"], input=commits_json)

        assert result.exit_code == 2
