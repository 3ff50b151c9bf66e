"""Entry point of the ``semrel`` command."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from semrel import __version__
from semrel.cli.commands.changelog import run_changelog
from semrel.cli.commands.next_version import run_next_version
from semrel.logging import configure_logging

if TYPE_CHECKING:
    from typing import TextIO

_path_option = click.option(
    "--path",
    type=click.Path(file_okay=False, exists=True),
    default=None,
    help="Project directory to load [tool.semrel] from (default: current directory).",
)
_commits_option = click.option(
    "--commits",
    "commits_file",
    type=click.File("r", encoding="utf-8"),
    default="-",
    show_default=True,
    help="JSON array of {message, author, hash} commits since the last release ('-' for stdin).",
)


@click.group()
@click.version_option(__version__, prog_name="semrel")
@click.option("-v", "--verbose", is_flag=True, help="Show debug output.")
@click.option("-q", "--quiet", is_flag=True, help="Only show warnings and errors.")
@click.option("--json-log", is_flag=True, help="Log JSON lines to stderr.")
def cli(verbose: bool, quiet: bool, json_log: bool) -> None:
    """Compute the next semantic version and changelog from commits."""
    configure_logging(verbose=verbose, quiet=quiet, json_log=json_log)


@cli.command("next-version")
@_commits_option
@click.option("--last-version", default=None, help="Version of the last release (none: first release).")
@click.option("--branch", default="main", show_default=True, help="Branch being built.")
@click.option("--channel", default=None, help="Release channel; overrides the branch mapping.")
@click.option("--json", "as_json", is_flag=True, help="Print the decision as JSON.")
@_path_option
def next_version(
    commits_file: TextIO,
    last_version: str | None,
    branch: str,
    channel: str | None,
    as_json: bool,
    path: str | None,
) -> None:
    """Print the next version for BRANCH."""
    run_next_version(
        commits_file=commits_file,
        last_version=last_version,
        branch=branch,
        channel=channel,
        as_json=as_json,
        path=path,
    )


@cli.command("changelog")
@_commits_option
@click.option("--last-version", required=True, help="Version of the last release.")
@click.option("--next-version", "next_version_", required=True, help="Version being released.")
@click.option("--last-hash", default="", help="Commit hash of the last release.")
@click.option(
    "--output",
    type=click.Path(dir_okay=False),
    default=None,
    help="Prepend the changelog to this file instead of printing it.",
)
@_path_option
def changelog(
    commits_file: TextIO,
    last_version: str,
    next_version_: str,
    last_hash: str,
    output: str | None,
    path: str | None,
) -> None:
    """Print the changelog between two versions."""
    run_changelog(
        commits_file=commits_file,
        last_version=last_version,
        next_version=next_version_,
        last_hash=last_hash,
        output=output,
        path=path,
    )


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
