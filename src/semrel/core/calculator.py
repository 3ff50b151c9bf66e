"""Next version calculation.

Maps bucketed commits and a release channel to the next version:

==========  ===============================================  =======
Channel     Version                                          Draft
==========  ===============================================  =======
alpha/beta  next ``<channel>.N`` pre-release                 yes
rc          next ``rc.N`` pre-release                        no
release     highest bump of major > minor > patch            no
(other)     unchanged                                        no
==========  ===============================================  =======

A channel only moves the version when at least one commit warrants a
major, minor or patch release. The first stable release keeps the
baseline version it was given.
"""

from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING

from semrel.core.version import BumpType, Version
from semrel.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    import structlog

    from semrel.core.commits import AnalyzedCommit


class ChannelPolicy(StrEnum):
    """How a channel turns commits into a version."""

    PRERELEASE = "prerelease"
    RELEASE_CANDIDATE = "release-candidate"
    STABLE = "stable"


CHANNELS: dict[str, ChannelPolicy] = {
    "alpha": ChannelPolicy.PRERELEASE,
    "beta": ChannelPolicy.PRERELEASE,
    "rc": ChannelPolicy.RELEASE_CANDIDATE,
    "release": ChannelPolicy.STABLE,
}

_BUMP_PRIORITY = (BumpType.MAJOR, BumpType.MINOR, BumpType.PATCH)


def channel_policy(channel: str) -> ChannelPolicy | None:
    """Return the policy of a channel, or None if it is not recognized."""
    return CHANNELS.get(channel)


def inc_prerelease(
    channel: str,
    version: Version,
    log: structlog.stdlib.BoundLogger | None = None,
) -> Version:
    """Increment the pre-release counter of ``channel``.

    ``1.0.0`` and ``1.0.0-alpha.2`` become ``1.0.0-beta.0`` for the beta
    channel; ``1.0.0-beta.3`` becomes ``1.0.0-beta.4``. A label that
    cannot be read as ``<channel>.<number>`` restarts the sequence at
    ``<channel>.0``.

    Args:
        channel: Pre-release channel name
        version: Current version
        log: Logger for the restart warning

    Returns:
        Version with the new pre-release label
    """
    fresh = version.with_prerelease(f"{channel}.0")
    label = version.prerelease
    if not label or label.split(".")[0] != channel:
        return fresh

    pre = version.pre
    if pre is None:
        (log if log is not None else get_logger()).warning(
            "could not parse pre-release label, restarting sequence",
            label=label,
            version=str(version),
            fallback=str(fresh),
        )
        return fresh

    return version.with_prerelease(f"{channel}.{pre.number + 1}")


def highest_bump(commits: Mapping[BumpType, Sequence[AnalyzedCommit]]) -> BumpType:
    """Return the highest non-empty bucket, or ``BumpType.NONE``."""
    for bump in _BUMP_PRIORITY:
        if commits.get(bump):
            return bump
    return BumpType.NONE


def publishes_baseline(
    commits: Mapping[BumpType, Sequence[AnalyzedCommit]],
    channel: str | None,
    *,
    first_release: bool,
) -> bool:
    """Whether a first release publishes the baseline version itself.

    Only the stable channel releases the baseline unchanged, and only
    when some commit warrants a release. Pre-release channels move the
    version instead; other channels release nothing.
    """
    return (
        first_release
        and channel is not None
        and channel_policy(channel) is ChannelPolicy.STABLE
        and highest_bump(commits) is not BumpType.NONE
    )


def calculate_next_version(
    commits: Mapping[BumpType, Sequence[AnalyzedCommit]],
    last_version: Version,
    channel: str,
    *,
    first_release: bool = False,
    log: structlog.stdlib.BoundLogger | None = None,
) -> tuple[Version, bool]:
    """Calculate the next version for a release channel.

    Args:
        commits: Analyzed commits bucketed by release impact
        last_version: Version of the previous release (or the baseline)
        channel: Channel name, e.g. ``"release"``, ``"beta"`` or ``"rc"``
        first_release: Whether there is no previous release
        log: Logger passed on to :func:`inc_prerelease`

    Returns:
        Tuple of the next version and whether it is a draft
    """
    bump = highest_bump(commits)

    match channel_policy(channel):
        case ChannelPolicy.PRERELEASE if bump is not BumpType.NONE:
            return inc_prerelease(channel, last_version, log), True
        case ChannelPolicy.RELEASE_CANDIDATE if bump is not BumpType.NONE:
            return inc_prerelease(channel, last_version, log), False
        case ChannelPolicy.STABLE if not first_release:
            return last_version.bump(bump), False
        case _:
            return last_version, False
