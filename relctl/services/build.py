"""Package the working directory for a migration code refresh."""

from __future__ import annotations

import base64
import os
from pathlib import Path
from zipfile import ZIP_DEFLATED, ZipFile

from relctl.core.config import LINK_FILE_NAME
from relctl.core.result import Err, Ok, Result
from relctl.services.release.errors import ReleaseError

__all__ = ["BUILD_DIR_NAME", "BUNDLE_NAME", "build_bundle", "encode_bundle"]

BUILD_DIR_NAME = "build"
BUNDLE_NAME = "build.zip"

_SKIP_DIRS = frozenset({BUILD_DIR_NAME, ".git", "__pycache__", "node_modules", ".venv"})
_SKIP_FILES = frozenset({LINK_FILE_NAME, ".DS_Store"})


def _iter_project_files(project_dir: Path) -> list[Path]:
    files: list[Path] = []
    for root, dirs, names in os.walk(project_dir):
        dirs[:] = sorted(d for d in dirs if d not in _SKIP_DIRS)
        for name in sorted(names):
            if name in _SKIP_FILES:
                continue
            files.append(Path(root) / name)
    return files


def build_bundle(project_dir: Path) -> Result[Path, ReleaseError]:
    """Zip ``project_dir`` into ``build/build.zip`` and return the zip path."""
    out_dir = project_dir / BUILD_DIR_NAME
    zip_path = out_dir / BUNDLE_NAME
    try:
        out_dir.mkdir(parents=True, exist_ok=True)
        with ZipFile(zip_path, "w", compression=ZIP_DEFLATED) as zf:
            for path in _iter_project_files(project_dir):
                zf.write(path, path.relative_to(project_dir).as_posix())
    except OSError as e:
        return Err(ReleaseError(kind="build_failed", message=f"Failed to build {zip_path}: {e}"))
    return Ok(zip_path)


def encode_bundle(zip_path: Path) -> Result[str, ReleaseError]:
    """Read a built bundle as base64 text for the JSON request body."""
    try:
        data = zip_path.read_bytes()
    except OSError as e:
        return Err(ReleaseError(kind="build_failed", message=f"Failed to read {zip_path}: {e}"))
    return Ok(base64.b64encode(data).decode("ascii"))
