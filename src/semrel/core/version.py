"""Semantic version handling.

Versions follow semver 2.0.0: ``MAJOR.MINOR.PATCH[-LABEL][+BUILD]``.
A leading ``v`` (as found in tags) is accepted when parsing and never
rendered.

Pre-release labels are kept verbatim on :class:`Version`; channel-style
labels such as ``beta.3`` can be inspected through :class:`PreRelease`.
"""

from __future__ import annotations

import functools
import re
from dataclasses import dataclass, replace
from enum import StrEnum

from semrel.exceptions import VersionError

# Numeric pre-release identifiers must not have leading zeros.
_PRERELEASE_IDENT = r"(?:0|[1-9]\d*|\d*[A-Za-z-][0-9A-Za-z-]*)"

_VERSION_PATTERN = re.compile(
    rf"""
    ^v?
    (?P<major>0|[1-9]\d*)\.
    (?P<minor>0|[1-9]\d*)\.
    (?P<patch>0|[1-9]\d*)
    (?:-(?P<prerelease>{_PRERELEASE_IDENT}(?:\.{_PRERELEASE_IDENT})*))?
    (?:\+(?P<build>[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?
    $
    """,
    re.VERBOSE,
)


class BumpType(StrEnum):
    """Release impact of a change, highest first."""

    MAJOR = "major"
    MINOR = "minor"
    PATCH = "patch"
    NONE = "none"


@dataclass(frozen=True, slots=True)
class PreRelease:
    """A ``<channel>.<number>`` pre-release label."""

    channel: str
    number: int

    @classmethod
    def parse(cls, label: str | None) -> PreRelease | None:
        """Parse a label like ``beta.3``.

        Returns None for anything that is not exactly two dot-separated
        parts with a numeric second part.
        """
        if not label:
            return None
        parts = label.split(".")
        if len(parts) != 2 or not parts[1].isdigit():
            return None
        return cls(parts[0], int(parts[1]))

    def __str__(self) -> str:
        return f"{self.channel}.{self.number}"


@functools.total_ordering
@dataclass(frozen=True, slots=True)
class Version:
    """An immutable semantic version."""

    major: int
    minor: int
    patch: int
    prerelease: str | None = None
    build: str | None = None

    @classmethod
    def parse(cls, text: str) -> Version:
        """Parse a version string.

        Args:
            text: Version such as ``1.2.3``, ``v2.0.0-rc.1`` or ``1.0.0+abc``

        Returns:
            Parsed version

        Raises:
            VersionError: If the text is not a semantic version
        """
        match = _VERSION_PATTERN.match(text.strip())
        if match is None:
            raise VersionError(f"Invalid semantic version: {text!r}")
        return cls(
            major=int(match["major"]),
            minor=int(match["minor"]),
            patch=int(match["patch"]),
            prerelease=match["prerelease"],
            build=match["build"],
        )

    @property
    def is_prerelease(self) -> bool:
        return self.prerelease is not None

    @property
    def pre(self) -> PreRelease | None:
        """Channel view of the pre-release label, if it has that shape."""
        return PreRelease.parse(self.prerelease)

    def bump(self, bump_type: BumpType) -> Version:
        """Return the next version for the given bump.

        Lower components reset to zero and any pre-release label and
        build metadata are cleared. A patch bump on a pre-release only
        finalises it (``1.2.3-rc.1`` becomes ``1.2.3``).
        """
        match bump_type:
            case BumpType.MAJOR:
                return Version(self.major + 1, 0, 0)
            case BumpType.MINOR:
                return Version(self.major, self.minor + 1, 0)
            case BumpType.PATCH:
                if self.is_prerelease:
                    return Version(self.major, self.minor, self.patch)
                return Version(self.major, self.minor, self.patch + 1)
            case _:
                return self

    def with_prerelease(self, label: str | None) -> Version:
        """Return a copy carrying ``label`` (build metadata is dropped)."""
        return replace(self, prerelease=label or None, build=None)

    def __str__(self) -> str:
        text = f"{self.major}.{self.minor}.{self.patch}"
        if self.prerelease:
            text += f"-{self.prerelease}"
        if self.build:
            text += f"+{self.build}"
        return text

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self._precedence_key() < other._precedence_key()

    def _precedence_key(self) -> tuple:
        # Build metadata does not take part in precedence. A release sorts
        # after all of its pre-releases; numeric identifiers sort before
        # alphanumeric ones.
        if self.prerelease is None:
            pre: tuple = (1,)
        else:
            pre = (
                0,
                tuple(
                    (0, int(part), "") if part.isdigit() else (1, 0, part)
                    for part in self.prerelease.split(".")
                ),
            )
        return (self.major, self.minor, self.patch, pre)


def parse_version(text: str) -> Version:
    """Parse a version string (see :meth:`Version.parse`)."""
    return Version.parse(text)
