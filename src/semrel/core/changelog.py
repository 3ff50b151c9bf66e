"""Changelog generation from analyzed commits.

The changelog is grouped into sections taken from the rule table, in
table order, so it uses exactly the classification that decided the
version. Commits hidden by their rule are left out, and so are sections
that end up empty.

Links are built from two ``str.format`` templates supplied by the
release host:

- commit URL: ``{hash}``
- compare URL: ``{previous}``, ``{version}``, ``{previous_hash}``

Changelog generation never blocks a release: unknown placeholders
render as empty text and a malformed template renders as no link.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from semrel.logging import get_logger

if TYPE_CHECKING:
    import structlog

    from semrel.core.commits import AnalyzedCommit, AnalyzedCommits
    from semrel.core.rules import Rule


class _BlankMissing(dict):
    def __missing__(self, key: str) -> str:
        return ""


@dataclass(frozen=True)
class ChangelogMetadata:
    """Release facts the changelog heading and links need."""

    version: str
    previous_version: str = ""
    previous_hash: str = ""
    commit_url: str = ""
    compare_url: str = ""
    now: datetime = field(default_factory=lambda: datetime.now(UTC))


def render_url(
    template: str,
    log: structlog.stdlib.BoundLogger | None = None,
    **values: str,
) -> str:
    """Fill a URL template, leaving unknown placeholders empty.

    Args:
        template: ``str.format`` style template
        log: Logger for malformed templates
        **values: Placeholder values

    Returns:
        The rendered URL, or an empty string if the template is malformed
    """
    if not template:
        return ""
    try:
        return template.format_map(_BlankMissing(values))
    except (ValueError, IndexError, AttributeError, KeyError, TypeError) as e:
        (log if log is not None else get_logger()).warning(
            "invalid url template", template=template, error=str(e)
        )
        return ""


def format_commit_for_changelog(
    ac: AnalyzedCommit,
    commit_url: str = "",
    log: structlog.stdlib.BoundLogger | None = None,
) -> list[str]:
    """Render one analyzed commit as changelog lines.

    Args:
        ac: Analyzed commit
        commit_url: Commit URL template
        log: Logger for malformed templates

    Returns:
        The commit line, followed by a breaking change line if any
    """
    scope = f"**`{ac.scope}`:** " if ac.scope else ""
    line = f"* {scope}{ac.parsed_message}".rstrip()

    link = render_url(commit_url, log, hash=ac.commit.hash)
    if link:
        line += f" ([{ac.commit.short_hash}]({link}))"
    elif ac.commit.hash:
        line += f" ({ac.commit.short_hash})"

    lines = [line]
    if ac.breaking_change_message:
        lines.append(f"  **BREAKING CHANGE:** {ac.breaking_change_message}")
    return lines


def group_commits_by_section(
    commits: AnalyzedCommits,
    rules: tuple[Rule, ...],
) -> dict[str, list[AnalyzedCommit]]:
    """Group visible commits by section title, in rule table order.

    Sections without visible commits are omitted. Commits keep their
    input order regardless of the bucket they are in.
    """
    grouped: dict[str, list[AnalyzedCommit]] = {}
    for rule in rules:
        if rule.title in grouped:
            continue
        section = [ac for ac in commits.all() if ac.section == rule.title and ac.in_changelog]
        if section:
            grouped[rule.title] = section
    return grouped


def generate_changelog(
    metadata: ChangelogMetadata,
    commits: AnalyzedCommits,
    rules: tuple[Rule, ...],
    log: structlog.stdlib.BoundLogger | None = None,
) -> str:
    """Generate the markdown changelog of one release.

    Args:
        metadata: Version, previous release and link templates
        commits: Analyzed commits of the release
        rules: Rule table the commits were analyzed with
        log: Logger for malformed templates

    Returns:
        Changelog content as string
    """
    date = metadata.now.strftime("%Y-%m-%d")
    compare = render_url(
        metadata.compare_url,
        log,
        previous=metadata.previous_version,
        version=metadata.version,
        previous_hash=metadata.previous_hash,
    )
    if compare:
        heading = f"## [{metadata.version}]({compare}) ({date})"
    else:
        heading = f"## {metadata.version} ({date})"

    lines = [heading, ""]
    for title, section in group_commits_by_section(commits, rules).items():
        lines.append(f"### {title}")
        lines.append("")
        for ac in section:
            lines.extend(format_commit_for_changelog(ac, metadata.commit_url, log))
        lines.append("")

    return "\n".join(lines)
