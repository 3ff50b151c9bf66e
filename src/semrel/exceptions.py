"""Exception hierarchy for semrel.

Only configuration faults and caller-supplied garbage raise. Noise in
the commit history never does: unmatched commits are dropped and
unparseable pre-release counters fall back to a fresh sequence.
"""

from __future__ import annotations


class SemrelError(Exception):
    """Base class for all semrel errors."""


class ConfigError(SemrelError):
    """Configuration could not be loaded or is invalid."""


class ConfigNotFoundError(ConfigError):
    """No pyproject.toml was found."""


class ConfigValidationError(ConfigError):
    """The [tool.semrel] table contains invalid values."""


class UnknownGrammarError(ConfigError):
    """The requested commit grammar is not registered."""

    def __init__(self, name: str, known: tuple[str, ...] = ()) -> None:
        self.name = name
        self.known = known
        message = f"Unknown commit format: {name!r}"
        if known:
            message += f" (expected one of: {', '.join(known)})"
        super().__init__(message)


class VersionError(SemrelError):
    """A version string could not be parsed."""
