"""Changelog lookup for a single version.

Sections are headings whose first version-looking token is the version:

    ## 1.0.1
    * fixed the thing

    ## 1.0.0 (2024-02-01)
    Initial release!

A section ends at the next heading of the same or a higher level.
"""

from __future__ import annotations

import re
from pathlib import Path

from relctl.core.result import Err, Ok, Result
from relctl.services.release.errors import ReleaseError

__all__ = ["CHANGELOG_FILE_NAME", "extract_changelog", "read_version_changelog"]

CHANGELOG_FILE_NAME = "CHANGELOG.md"

_HEADING = re.compile(r"^(#{1,6})\s+(.*)$")
_VERSION_TOKEN = re.compile(r"v?(\d+(?:\.\d+)*(?:[-+][0-9A-Za-z.-]+)?)")


def _heading_version(title: str) -> str | None:
    m = _VERSION_TOKEN.search(title.replace("[", " ").replace("]", " "))
    return m.group(1) if m else None


def extract_changelog(text: str, version: str) -> str | None:
    lines = text.splitlines()
    start: int | None = None
    level = 0
    for i, line in enumerate(lines):
        m = _HEADING.match(line)
        if m is None:
            continue
        if start is None:
            if _heading_version(m.group(2)) == version:
                start = i + 1
                level = len(m.group(1))
            continue
        if len(m.group(1)) <= level:
            section = "\n".join(lines[start:i]).strip()
            return section or None

    if start is None:
        return None
    section = "\n".join(lines[start:]).strip()
    return section or None


def read_version_changelog(project_dir: Path, version: str) -> Result[str | None, ReleaseError]:
    """Return the changelog text for ``version``, or None if there is none."""
    path = project_dir / CHANGELOG_FILE_NAME
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return Ok(None)
    except (OSError, UnicodeDecodeError) as e:
        return Err(ReleaseError(kind="io", message=f"Error reading {path}: {e}"))
    return Ok(extract_changelog(text, version))
