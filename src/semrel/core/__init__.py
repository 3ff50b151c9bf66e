"""Release-decision engine.

This package contains the pure building blocks:
- Rule tables per commit grammar
- Commit classification into release buckets
- Semantic version arithmetic and channel policies
- Changelog generation from classified commits
"""

from __future__ import annotations

from semrel.core.calculator import (
    CHANNELS,
    ChannelPolicy,
    calculate_next_version,
    channel_policy,
    inc_prerelease,
    publishes_baseline,
)
from semrel.core.changelog import ChangelogMetadata, generate_changelog
from semrel.core.commits import (
    AnalyzedCommit,
    AnalyzedCommits,
    Analyzer,
    Commit,
)
from semrel.core.rules import DEFAULT_RULES, Rule, get_rules, registered_grammars
from semrel.core.version import BumpType, PreRelease, Version, parse_version

__all__ = [
    # Rules
    "DEFAULT_RULES",
    # Commits
    "AnalyzedCommit",
    "AnalyzedCommits",
    "Analyzer",
    # Version
    "BumpType",
    # Calculator
    "CHANNELS",
    # Changelog
    "ChangelogMetadata",
    "ChannelPolicy",
    "Commit",
    "PreRelease",
    "Rule",
    "Version",
    "calculate_next_version",
    "channel_policy",
    "generate_changelog",
    "get_rules",
    "inc_prerelease",
    "parse_version",
    "publishes_baseline",
    "registered_grammars",
]
