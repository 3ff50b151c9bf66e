"""Implementation of the 'next-version' command.

Analyzes exported commits and prints the version the branch's release
channel would produce.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import TYPE_CHECKING

from rich.console import Console
from rich.markup import escape

from semrel.cli._input import read_commits
from semrel.config import load_config
from semrel.core.calculator import calculate_next_version, channel_policy, publishes_baseline
from semrel.core.commits import Analyzer
from semrel.core.version import Version
from semrel.exceptions import SemrelError
from semrel.release import resolve_channel

if TYPE_CHECKING:
    from typing import TextIO


def run_next_version(
    commits_file: TextIO,
    last_version: str | None,
    branch: str,
    channel: str | None,
    as_json: bool,
    path: str | None,
    console: Console | None = None,
    err_console: Console | None = None,
) -> None:
    """Run the next-version command.

    Args:
        commits_file: Stream with the JSON commit export
        last_version: Last released version, None for a first release
        branch: Branch being built
        channel: Channel override (default: from the branch mapping)
        as_json: Print a JSON decision instead of the bare version
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
        first_release = last_version is None
        previous = config.version.baseline if first_release else Version.parse(last_version)
    except SemrelError as e:
        err_console.print(f"[red]Error:[/] {escape(str(e))}")
        raise SystemExit(1) from e

    effective_channel = channel or resolve_channel(config.branches, branch)
    if effective_channel is None:
        err_console.print(f"[yellow]No release channel configured for branch[/] [cyan]{branch}[/]")
    elif channel_policy(effective_channel) is None:
        err_console.print(f"[yellow]Unknown release channel[/] [cyan]{effective_channel}[/]")

    analyzed = analyzer.analyze(commits)
    next_version, draft = previous, False
    if effective_channel is not None:
        next_version, draft = calculate_next_version(
            analyzed,
            previous,
            effective_channel,
            first_release=first_release,
        )

    baseline_released = publishes_baseline(
        analyzed, effective_channel, first_release=first_release
    )

    if not as_json:
        console.out(str(next_version), highlight=False)
        return

    payload = {
        "version": str(next_version),
        "last_version": str(previous),
        "branch": branch,
        "channel": effective_channel,
        "draft": draft,
        "first_release": baseline_released,
        "new_release": baseline_released or next_version != previous,
        "commits": {str(bump): len(items) for bump, items in analyzed.items()},
        "dropped": len(analyzed.dropped),
    }
    console.out(json.dumps(payload, indent=2), highlight=False)
