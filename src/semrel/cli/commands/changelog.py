"""Implementation of the 'changelog' command.

Renders the changelog of exported commits. With ``--output`` the new
section is prepended to the file, otherwise it is printed.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from rich.console import Console
from rich.markup import escape

from semrel.cli._input import read_commits
from semrel.config import load_config
from semrel.core.changelog import ChangelogMetadata, generate_changelog
from semrel.core.commits import Analyzer
from semrel.core.version import Version
from semrel.exceptions import SemrelError

if TYPE_CHECKING:
    from typing import TextIO


def run_changelog(
    commits_file: TextIO,
    last_version: str,
    next_version: str,
    last_hash: str,
    output: str | None,
    path: str | None,
    console: Console | None = None,
    err_console: Console | None = None,
) -> None:
    """Run the changelog command.

    Args:
        commits_file: Stream with the JSON commit export
        last_version: Last released version
        next_version: Version being released
        last_hash: Commit hash of the last release
        output: Changelog file to prepend to, None to print
        path: Optional path to project directory
        console: Console for standard output
        err_console: Console for error output
    """
    console = console or Console()
    err_console = err_console or Console(stderr=True)
    project_path = Path(path) if path else Path.cwd()

    try:
        config = load_config(project_path)
        analyzer = Analyzer(config.commit_format, show_all=config.changelog.show_all)
        commits = read_commits(commits_file)
        previous = Version.parse(last_version)
        target = Version.parse(next_version)
    except SemrelError as e:
        err_console.print(f"[red]Error:[/] {escape(str(e))}")
        raise SystemExit(1) from e

    metadata = ChangelogMetadata(
        version=str(target),
        previous_version=str(previous),
        previous_hash=last_hash,
        commit_url=config.changelog.commit_url,
        compare_url=config.changelog.compare_url,
    )
    content = generate_changelog(metadata, analyzer.analyze(commits), analyzer.rules)

    if output is None:
        console.out(content, highlight=False)
        return

    changelog_path = project_path / output
    try:
        if changelog_path.exists():
            content = content + "\n" + changelog_path.read_text(encoding="utf-8")
        changelog_path.write_text(content, encoding="utf-8")
    except OSError as e:
        err_console.print(f"[red]Error writing {changelog_path}:[/] {escape(str(e))}")
        raise SystemExit(1) from e
    err_console.print(f"  [green]✓[/] Updated {changelog_path}")
