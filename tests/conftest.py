"""Shared test fixtures."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
import structlog

from semrel.core.commits import Analyzer, Commit

if TYPE_CHECKING:
    from pathlib import Path


@pytest.fixture(autouse=True)
def _reset_structlog():
    """Undo logging configuration done by CLI invocations."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def feat_commit() -> Commit:
    """A feat commit."""
    return Commit(message="feat: add user authentication", author="me", hash="feat1234567")


@pytest.fixture
def fix_commit() -> Commit:
    """A fix commit with scope."""
    return Commit(message="fix(core): handle null response", author="me", hash="fix12345678")


@pytest.fixture
def breaking_commit() -> Commit:
    """A breaking change commit with a footer."""
    return Commit(
        message="feat(api): new endpoint layout\n\nBREAKING CHANGE: v1 routes are removed",
        author="me",
        hash="break123456",
    )


@pytest.fixture
def sample_commits() -> list[Commit]:
    """A realistic mix of commits, including noise."""
    return [
        Commit("feat: add login", "me", "a000001"),
        Commit("fix(auth): reject expired tokens", "me", "a000002"),
        Commit("Merge branch 'main' into feature", "me", "a000003"),
        Commit("docs: update readme", "me", "a000004"),
        Commit("feat!: drop python 3.10", "me", "a000005"),
        Commit("chore: bump dependencies", "me", "a000006"),
        Commit("wip: half done", "me", "a000007"),
        Commit("perf(db): batch inserts", "me", "a000008"),
    ]


@pytest.fixture
def analyzer() -> Analyzer:
    """Analyzer for conventional commits."""
    return Analyzer("conventional")


@pytest.fixture
def temp_project_with_pyproject(tmp_path: Path) -> Path:
    """Project directory with a [tool.semrel] table."""
    (tmp_path / "pyproject.toml").write_text(
        """\
[project]
name = "test-project"
version = "1.0.0"

[tool.semrel]
commit_format = "conventional"

[tool.semrel.branches]
main = "release"
beta = "beta"
"release/" = "rc"

[tool.semrel.changelog]
commit_url = "https://github.com/acme/widget/commit/{hash}"
compare_url = "https://github.com/acme/widget/compare/v{previous}...v{version}"

[tool.semrel.version]
initial_version = "0.1.0"
"""
    )
    return tmp_path
