"""Reading commit exports for the CLI.

The CLI does not talk to a repository. It reads the commits to analyze
from a JSON array, as produced by e.g.::

    git log --format='%H%x00%an%x00%B%x1e' | ./to-json > commits.json
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, TypeAdapter, ValidationError

from semrel.core.commits import Commit
from semrel.exceptions import SemrelError

if TYPE_CHECKING:
    from typing import TextIO


class CommitRecord(BaseModel):
    """One exported commit."""

    model_config = ConfigDict(extra="ignore")

    message: str
    author: str = ""
    hash: str = ""

    def to_commit(self) -> Commit:
        return Commit(message=self.message, author=self.author, hash=self.hash)


_RECORDS = TypeAdapter(list[CommitRecord])


class CommitInputError(SemrelError):
    """The commit export could not be read."""


def read_commits(stream: TextIO) -> list[Commit]:
    """Read commits from a JSON array of ``{message, author, hash}``.

    Raises:
        CommitInputError: If the input is not valid JSON or has the wrong shape
    """
    try:
        records = _RECORDS.validate_python(json.load(stream))
    except json.JSONDecodeError as e:
        raise CommitInputError(f"Commits input is not valid JSON: {e}") from e
    except ValidationError as e:
        raise CommitInputError(f"Invalid commits input:\n{e}") from e
    return [record.to_commit() for record in records]
