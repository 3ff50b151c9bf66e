"""Pydantic models for the [tool.semrel] configuration table."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

from semrel.core.version import Version
from semrel.exceptions import VersionError


class _Section(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)


class ChangelogConfig(_Section):
    """Changelog rendering options."""

    show_all: bool = Field(
        default=False,
        description="Show every commit type, including hidden ones like docs or build",
    )
    commit_url: str = Field(
        default="",
        description="Commit link template, e.g. https://github.com/o/r/commit/{hash}",
    )
    compare_url: str = Field(
        default="",
        description="Compare link template with {previous}, {version} and {previous_hash}",
    )


class VersionConfig(_Section):
    """Version baseline options."""

    initial_version: str = Field(
        default="1.0.0",
        description="Version of the first release, when no release exists yet",
    )

    @field_validator("initial_version")
    @classmethod
    def _check_initial_version(cls, value: str) -> str:
        try:
            Version.parse(value)
        except VersionError as e:
            raise ValueError(str(e)) from e
        return value

    @property
    def baseline(self) -> Version:
        return Version.parse(self.initial_version)


class SemrelConfig(_Section):
    """Root configuration."""

    commit_format: str = Field(
        default="conventional",
        description="Commit grammar used to classify messages",
    )
    branches: dict[str, str] = Field(
        default_factory=lambda: {"main": "release", "master": "release"},
        description="Branch name (or prefix) to release channel",
    )
    changelog: ChangelogConfig = Field(default_factory=ChangelogConfig)
    version: VersionConfig = Field(default_factory=VersionConfig)
