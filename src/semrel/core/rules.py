"""Commit type rule tables.

A rule maps a commit type token (``feat``, ``fix``, ...) to its release
impact, the changelog section it belongs to and whether it is shown in
the changelog at all. Each registered commit grammar owns one ordered
table; the order is the order of sections in the changelog.

Breaking changes are detected by the grammar, not by the table, so a
table does not need a rule that maps to ``major``.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import TYPE_CHECKING

from semrel.core.version import BumpType
from semrel.exceptions import UnknownGrammarError

if TYPE_CHECKING:
    from collections.abc import Mapping


@dataclass(frozen=True, slots=True)
class Rule:
    """How one commit type is released and shown."""

    tag: str
    title: str
    release: BumpType
    changelog: bool


DEFAULT_RULES: tuple[Rule, ...] = (
    Rule("feat", "Features", BumpType.MINOR, changelog=True),
    Rule("fix", "Bug fixes", BumpType.PATCH, changelog=True),
    Rule("perf", "Performance improvements", BumpType.PATCH, changelog=True),
    Rule("docs", "Documentation changes", BumpType.NONE, changelog=False),
    Rule("style", "Style", BumpType.NONE, changelog=False),
    Rule("refactor", "Code refactor", BumpType.NONE, changelog=False),
    Rule("test", "Testing", BumpType.NONE, changelog=False),
    Rule(
        "chore",
        "Changes to the build process or auxiliary tools and libraries "
        "such as documentation generation",
        BumpType.NONE,
        changelog=False,
    ),
    Rule("build", "Changes to CI/CD", BumpType.NONE, changelog=False),
)

_RULE_TABLES: Mapping[str, tuple[Rule, ...]] = MappingProxyType(
    {
        "conventional": DEFAULT_RULES,
        "angular": DEFAULT_RULES,
    }
)


def registered_grammars() -> tuple[str, ...]:
    """Names of all commit grammars that have a rule table."""
    return tuple(_RULE_TABLES)


def get_rules(grammar: str) -> tuple[Rule, ...]:
    """Return the ordered rule table of a grammar.

    Args:
        grammar: Registered grammar name, e.g. ``"conventional"``

    Returns:
        Rules in changelog section order

    Raises:
        UnknownGrammarError: If the grammar is not registered
    """
    try:
        return _RULE_TABLES[grammar]
    except KeyError:
        raise UnknownGrammarError(grammar, registered_grammars()) from None


def rules_by_tag(rules: tuple[Rule, ...]) -> Mapping[str, Rule]:
    """Index a rule table by type token (first rule wins on duplicates)."""
    index: dict[str, Rule] = {}
    for rule in rules:
        index.setdefault(rule.tag, rule)
    return MappingProxyType(index)
