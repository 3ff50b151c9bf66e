"""Configuration loading from pyproject.toml."""

from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from semrel.config.models import SemrelConfig
from semrel.exceptions import ConfigNotFoundError, ConfigValidationError
from semrel.logging import get_logger

TOOL_KEY = "semrel"


def find_pyproject_toml(start: Path | None = None) -> Path:
    """Find the nearest pyproject.toml, searching upward.

    Args:
        start: Directory to start from (defaults to the working directory)

    Returns:
        Path to pyproject.toml

    Raises:
        ConfigNotFoundError: If no pyproject.toml exists up to the root
    """
    directory = (start or Path.cwd()).resolve()
    for candidate in (directory, *directory.parents):
        pyproject = candidate / "pyproject.toml"
        if pyproject.is_file():
            return pyproject
    raise ConfigNotFoundError(f"No pyproject.toml found in {directory} or its parents")


def load_pyproject_toml(path: Path) -> dict[str, Any]:
    """Read and parse a pyproject.toml file.

    Raises:
        ConfigNotFoundError: If the file does not exist
        ConfigValidationError: If the file is not valid TOML
    """
    try:
        with path.open("rb") as f:
            return tomllib.load(f)
    except FileNotFoundError as e:
        raise ConfigNotFoundError(f"Config file not found: {path}") from e
    except tomllib.TOMLDecodeError as e:
        raise ConfigValidationError(f"Invalid TOML in {path}: {e}") from e


def extract_semrel_config(pyproject: dict[str, Any]) -> dict[str, Any]:
    """Return the [tool.semrel] table, or an empty dict."""
    return pyproject.get("tool", {}).get(TOOL_KEY, {})


def load_config(path: Path | None = None) -> SemrelConfig:
    """Load semrel configuration.

    Without a pyproject.toml, or without a [tool.semrel] table in it,
    the defaults apply.

    Args:
        path: pyproject.toml, or a directory to search upward from

    Returns:
        Validated configuration

    Raises:
        ConfigValidationError: If the configuration is invalid
    """
    log = get_logger()
    if path is not None and path.is_file():
        pyproject_path = path
    else:
        try:
            pyproject_path = find_pyproject_toml(path)
        except ConfigNotFoundError:
            log.debug("no pyproject.toml found, using defaults", start=str(path or Path.cwd()))
            return SemrelConfig()

    data = extract_semrel_config(load_pyproject_toml(pyproject_path))
    try:
        config = SemrelConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigValidationError(f"Invalid [tool.{TOOL_KEY}] in {pyproject_path}:\n{e}") from e

    log.debug("loaded config", path=str(pyproject_path), commit_format=config.commit_format)
    return config
