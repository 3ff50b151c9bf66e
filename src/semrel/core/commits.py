"""Commit message classification.

Turns raw commit messages into :class:`AnalyzedCommit` records bucketed
by release impact. The message structure is defined by a grammar:

- ``conventional`` - ``type(scope)!: description`` with an optional
  ``BREAKING CHANGE:`` footer (https://www.conventionalcommits.org)
- ``angular`` - ``type(scope): description``; breaking changes are only
  announced through the footer

Commits that do not fit the grammar, or whose type is not in the rule
table, are dropped rather than rejected. History always contains merge
commits and free-text messages and they must not stop a release.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, ClassVar

from semrel.core.rules import Rule, get_rules, rules_by_tag
from semrel.core.version import BumpType
from semrel.logging import get_logger

if TYPE_CHECKING:
    import structlog

BREAKING_CHANGE_FOOTER = "BREAKING CHANGE:"

_FOOTER_PATTERN = re.compile(
    rf"^{re.escape(BREAKING_CHANGE_FOOTER)}(?P<text>.*)",
    re.MULTILINE | re.DOTALL,
)


@dataclass(frozen=True, slots=True)
class Commit:
    """A commit as delivered by the repository."""

    message: str
    author: str
    hash: str

    @property
    def short_hash(self) -> str:
        return self.hash[:7]


@dataclass(frozen=True, slots=True)
class Decomposed:
    """Structural parts of a commit message matched by a grammar."""

    tag: str
    scope: str
    description: str
    breaking_marker: bool = False
    breaking_footer: str | None = None


def _split_message(message: str) -> tuple[str, str]:
    first_line, _, body = message.partition("\n")
    return first_line.rstrip("\r"), body


def _find_breaking_footer(body: str) -> str | None:
    match = _FOOTER_PATTERN.search(body)
    if match is None:
        return None
    return match["text"].strip()


class ConventionalGrammar:
    """``type(scope)!: description`` messages."""

    name: ClassVar[str] = "conventional"
    pattern: ClassVar[re.Pattern[str]] = re.compile(
        r"^(?P<tag>\w+)(?:\((?P<scope>[^()]*)\))?(?P<breaking>!)?: (?P<description>.*)$"
    )

    def decompose(self, message: str) -> Decomposed | None:
        """Split a message into its parts, or None if it does not match."""
        first_line, body = _split_message(message)
        match = self.pattern.match(first_line)
        if match is None:
            return None
        return Decomposed(
            tag=match["tag"].lower(),
            scope=match["scope"] or "",
            description=match["description"].strip(),
            breaking_marker=match.groupdict().get("breaking") is not None,
            breaking_footer=_find_breaking_footer(body),
        )


class AngularGrammar(ConventionalGrammar):
    """``type(scope): description`` messages without the ``!`` marker."""

    name: ClassVar[str] = "angular"
    pattern: ClassVar[re.Pattern[str]] = re.compile(
        r"^(?P<tag>\w+)(?:\((?P<scope>[^()]*)\))?: (?P<description>.*)$"
    )


Grammar = ConventionalGrammar | AngularGrammar

GRAMMARS: Mapping[str, type[Grammar]] = {
    ConventionalGrammar.name: ConventionalGrammar,
    AngularGrammar.name: AngularGrammar,
}


@dataclass(frozen=True, slots=True)
class AnalyzedCommit:
    """A commit classified against a rule table."""

    commit: Commit
    tag: str
    scope: str
    parsed_message: str
    section: str
    in_changelog: bool
    release: BumpType
    is_breaking: bool = False
    breaking_change_message: str = ""


class AnalyzedCommits(Mapping[BumpType, tuple[AnalyzedCommit, ...]]):
    """Analyzed commits bucketed by release impact.

    All four buckets are always present. Within a bucket, and in
    :meth:`all`, commits keep the order they were analyzed in. Commits
    the grammar rejected are kept in :attr:`dropped`.
    """

    __slots__ = ("_buckets", "_ordered", "dropped")

    def __init__(
        self,
        analyzed: Iterable[AnalyzedCommit] = (),
        dropped: Iterable[Commit] = (),
    ) -> None:
        self._ordered = tuple(analyzed)
        self.dropped = tuple(dropped)
        self._buckets = {
            bump: tuple(ac for ac in self._ordered if ac.release is bump) for bump in BumpType
        }

    def __getitem__(self, key: BumpType) -> tuple[AnalyzedCommit, ...]:
        return self._buckets[key]

    def __iter__(self) -> Iterator[BumpType]:
        return iter(self._buckets)

    def __len__(self) -> int:
        return len(self._buckets)

    def __repr__(self) -> str:
        counts = ", ".join(f"{bump}={len(items)}" for bump, items in self._buckets.items())
        return f"AnalyzedCommits({counts}, dropped={len(self.dropped)})"

    def all(self) -> tuple[AnalyzedCommit, ...]:
        """Every analyzed commit, in input order."""
        return self._ordered

    @property
    def has_release_commits(self) -> bool:
        """True if any commit warrants a major, minor or patch release."""
        return any(self._buckets[bump] for bump in (BumpType.MAJOR, BumpType.MINOR, BumpType.PATCH))


class Analyzer:
    """Classifies commits with one grammar and its rule table.

    Args:
        grammar: Registered grammar name
        show_all: Show every commit type in the changelog, ignoring the
            rule table's visibility flag
        log: Logger to report dropped commits to

    Raises:
        UnknownGrammarError: If the grammar is not registered
    """

    def __init__(
        self,
        grammar: str = "conventional",
        *,
        show_all: bool = False,
        log: structlog.stdlib.BoundLogger | None = None,
    ) -> None:
        self.rules: tuple[Rule, ...] = get_rules(grammar)
        self.grammar: Grammar = GRAMMARS[grammar]()
        self.show_all = show_all
        self._rules_by_tag = rules_by_tag(self.rules)
        self._log = log if log is not None else get_logger()

    def analyze(self, commits: Iterable[Commit]) -> AnalyzedCommits:
        """Classify commits into release buckets.

        Args:
            commits: Commits in history order

        Returns:
            Bucketed analyzed commits
        """
        analyzed: list[AnalyzedCommit] = []
        dropped: list[Commit] = []

        for commit in commits:
            result = self.analyze_commit(commit)
            if result is None:
                dropped.append(commit)
            else:
                analyzed.append(result)

        if dropped:
            self._log.debug(
                "dropped commits not matching grammar",
                grammar=self.grammar.name,
                count=len(dropped),
            )
        return AnalyzedCommits(analyzed, dropped)

    def analyze_commit(self, commit: Commit) -> AnalyzedCommit | None:
        """Classify one commit, or return None if it is dropped."""
        parts = self.grammar.decompose(commit.message)
        if parts is None:
            self._log.debug("commit does not match grammar", hash=commit.hash)
            return None

        rule = self._rules_by_tag.get(parts.tag)
        if rule is None:
            self._log.debug("unknown commit type", hash=commit.hash, tag=parts.tag)
            return None

        parsed_message = parts.description
        breaking_message = ""
        is_breaking = parts.breaking_marker or parts.breaking_footer is not None
        if parts.breaking_footer:
            breaking_message = parts.breaking_footer
        elif parts.breaking_marker:
            # The summary is the only description of the break.
            breaking_message = parts.description
            parsed_message = ""
        elif is_breaking:
            breaking_message = parts.description

        return AnalyzedCommit(
            commit=commit,
            tag=rule.tag,
            scope=parts.scope,
            parsed_message=parsed_message,
            section=rule.title,
            in_changelog=rule.changelog or self.show_all,
            release=BumpType.MAJOR if is_breaking else rule.release,
            is_breaking=is_breaking,
            breaking_change_message=breaking_message,
        )
