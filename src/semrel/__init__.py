"""semrel - semantic versions and changelogs from commit history."""

from __future__ import annotations

__version__ = "0.1.0"
