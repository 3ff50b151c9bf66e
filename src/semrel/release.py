"""Release orchestration.

Wires the engine to its collaborators. Reading history, caching
decisions and publishing are done by objects the caller injects; this
module only defines the shapes it needs from them:

- :class:`Repository` - last released version and the commits since
- :class:`ReleaseCache` - a stored :class:`ReleaseDecision` per commit
- :class:`Releaser` - link templates and release creation on the host

The flow is::

    commits -> Analyzer -> AnalyzedCommits -> calculate_next_version
                                           -> generate_changelog
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Protocol

from semrel.core.calculator import calculate_next_version, publishes_baseline
from semrel.core.changelog import ChangelogMetadata, generate_changelog
from semrel.core.commits import AnalyzedCommits, Analyzer, Commit
from semrel.core.version import Version
from semrel.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Mapping

    import structlog

    from semrel.config.models import SemrelConfig


@dataclass(frozen=True)
class BuildContext:
    """Facts about the build that runs the release."""

    branch: str
    commit: str
    is_pr: bool = False


@dataclass(frozen=True)
class ReleaseVersionEntry:
    """A version and the commit it was (or will be) released from."""

    version: Version
    commit: str


@dataclass(frozen=True)
class ReleaseDecision:
    """Outcome of a next-version calculation.

    ``first_release`` is set when the baseline itself is published as the
    first stable version.
    """

    next: ReleaseVersionEntry
    last: ReleaseVersionEntry
    branch: str
    draft: bool = False
    first_release: bool = False
    commits: AnalyzedCommits = field(default_factory=AnalyzedCommits)

    @property
    def is_new_release(self) -> bool:
        """True when the baseline is published or the version moved."""
        return self.first_release or self.next.version != self.last.version


def resolve_channel(branches: Mapping[str, str], branch: str) -> str | None:
    """Return the release channel of a branch.

    An exact branch name wins; otherwise the first configured name that
    is a prefix of the branch (``release/`` for ``release/1.x``).
    """
    if branch in branches:
        return branches[branch]
    for name, channel in branches.items():
        if branch.startswith(name):
            return channel
    return None


class Repository(Protocol):
    """Source of release history."""

    def get_last_version(self) -> tuple[Version | None, str]:
        """Return the last released version and its commit hash."""
        ...

    def get_commits(self, since: str) -> list[Commit]:
        """Return commits after ``since`` (all commits if empty), oldest first."""
        ...


class ReleaseCache(Protocol):
    """Storage for the last release decision."""

    def read(self) -> ReleaseDecision | None: ...

    def write(self, decision: ReleaseDecision) -> None: ...


class Releaser(Protocol):
    """Release host such as GitHub or GitLab."""

    @property
    def commit_url(self) -> str:
        """Commit link template with a ``{hash}`` placeholder."""
        ...

    @property
    def compare_url(self) -> str:
        """Compare link template with ``{previous}`` and ``{version}``."""
        ...

    def create_release(self, decision: ReleaseDecision, changelog: str) -> None: ...


class SemanticRelease:
    """Computes release decisions for a repository.

    Args:
        config: Loaded configuration
        repository: History source
        releaser: Release host; its link templates override the config
        cache: Decision cache
        log: Logger for all components

    Raises:
        UnknownGrammarError: If ``config.commit_format`` is not registered
    """

    def __init__(
        self,
        config: SemrelConfig,
        repository: Repository,
        *,
        releaser: Releaser | None = None,
        cache: ReleaseCache | None = None,
        log: structlog.stdlib.BoundLogger | None = None,
    ) -> None:
        self.config = config
        self.repository = repository
        self.releaser = releaser
        self.cache = cache
        self._log = log if log is not None else get_logger()
        self.analyzer = Analyzer(
            config.commit_format,
            show_all=config.changelog.show_all,
            log=self._log,
        )

    def resolve_channel(self, branch: str) -> str | None:
        """Return the channel configured for a branch."""
        return resolve_channel(self.config.branches, branch)

    def get_next_version(self, ctx: BuildContext, *, force: bool = False) -> ReleaseDecision:
        """Calculate the next version for the current build.

        Args:
            ctx: Build facts
            force: Ignore a cached decision for the same commit

        Returns:
            The release decision (written to the cache when one is set)
        """
        if not force and self.cache is not None:
            cached = self.cache.read()
            if cached is not None and cached.next.commit == ctx.commit:
                self._log.debug("using cached release decision", commit=ctx.commit)
                return cached

        last_version, last_hash = self.repository.get_last_version()
        first_release = last_version is None
        if last_version is None:
            last_version = self.config.version.baseline

        commits = self.repository.get_commits(last_hash)
        self._log.debug("found commits since last release", count=len(commits))
        analyzed = self.analyzer.analyze(commits)

        next_version, draft = last_version, False
        channel = self.resolve_channel(ctx.branch)
        if channel is None:
            self._log.debug("no release channel for branch", branch=ctx.branch)
        else:
            self._log.debug("found branch config", branch=ctx.branch, channel=channel)
            next_version, draft = calculate_next_version(
                analyzed,
                last_version,
                channel,
                first_release=first_release,
                log=self._log,
            )

        decision = ReleaseDecision(
            next=ReleaseVersionEntry(next_version, ctx.commit),
            last=ReleaseVersionEntry(last_version, last_hash),
            branch=ctx.branch,
            draft=draft,
            first_release=publishes_baseline(analyzed, channel, first_release=first_release),
            commits=analyzed,
        )
        self._log.info("new version", last=str(last_version), next=str(next_version), draft=draft)

        if self.cache is not None:
            self.cache.write(decision)
        return decision

    def set_version(self, ctx: BuildContext, version: str) -> ReleaseDecision:
        """Record a manually chosen next version.

        Raises:
            VersionError: If ``version`` is not a semantic version
        """
        next_version = Version.parse(version)
        last_version, last_hash = self.repository.get_last_version()
        if last_version is None:
            last_version = self.config.version.baseline

        decision = ReleaseDecision(
            next=ReleaseVersionEntry(next_version, ctx.commit),
            last=ReleaseVersionEntry(last_version, last_hash),
            branch=ctx.branch,
        )
        if self.cache is not None:
            self.cache.write(decision)
        return decision

    def get_changelog(self, decision: ReleaseDecision, *, now: datetime | None = None) -> str:
        """Render the changelog of a release decision."""
        commit_url = self.config.changelog.commit_url
        compare_url = self.config.changelog.compare_url
        if self.releaser is not None:
            commit_url = self.releaser.commit_url or commit_url
            compare_url = self.releaser.compare_url or compare_url

        metadata = ChangelogMetadata(
            version=str(decision.next.version),
            previous_version=str(decision.last.version),
            previous_hash=decision.last.commit,
            commit_url=commit_url,
            compare_url=compare_url,
            now=now or datetime.now(UTC),
        )
        return generate_changelog(metadata, decision.commits, self.analyzer.rules, self._log)

    def release(self, ctx: BuildContext, *, force: bool = False) -> bool:
        """Publish a release if the build warrants one.

        Returns:
            True if a release was created
        """
        if ctx.is_pr:
            self._log.debug("will not release a pull request build")
            return False
        if self.resolve_channel(ctx.branch) is None:
            self._log.info("will not release, branch not configured", branch=ctx.branch)
            return False
        if self.releaser is None:
            self._log.info("will not release, no releaser configured")
            return False

        decision = self.get_next_version(ctx, force=force)
        if not decision.is_new_release:
            self._log.info(
                "no new version, no release needed",
                next=str(decision.next.version),
                last=str(decision.last.version),
            )
            return False

        changelog = self.get_changelog(decision)
        self.releaser.create_release(decision, changelog)
        return True
