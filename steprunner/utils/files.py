from __future__ import annotations

import logging
import re
from pathlib import Path

from ..core.patch import Patch, PatchResult, apply_patches


logger = logging.getLogger(__name__)


def ensure_dir(path: Path) -> bool:
    """Create *path* (and parents) if missing. Returns True if it was created."""

    if path.is_dir():
        return False
    path.mkdir(parents=True, exist_ok=True)
    return True


def write_if_absent(path: Path, content: str) -> bool:
    """Write *content* to *path* only if the file does not exist yet."""

    if path.exists():
        return False
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return True


def patch_file(path: Path, *patches: Patch) -> PatchResult:
    """Apply *patches* to the UTF-8 file at *path*, writing only on change.

    The file is read fresh on every call. A missing file raises
    FileNotFoundError; callers decide whether that is a failure.
    """

    original = path.read_text(encoding="utf-8")
    result = apply_patches(original, *patches)
    if result.changed:
        path.write_text(result.text, encoding="utf-8")
        logger.debug("Patched %s", path)
    if result.missed:
        logger.warning("%d patch(es) found no marker in %s", result.missed, path)
    return result


def first_dir_matching(root: Path, pattern: str) -> Path | None:
    """First immediate subdirectory of *root* matching the glob *pattern*."""

    if not root.is_dir():
        return None
    matches = sorted(p for p in root.glob(pattern) if p.is_dir())
    return matches[0] if matches else None


def first_file_matching(root: Path, pattern: str) -> Path | None:
    if not root.is_dir():
        return None
    matches = sorted(p for p in root.glob(pattern) if p.is_file())
    return matches[0] if matches else None


def package_reference_version(project_file: Path, package_id: str) -> str | None:
    """Version attribute of ``<PackageReference Include="package_id" ...>``.

    Best-effort text scan; returns None when the file, the reference or the
    version cannot be found.
    """

    try:
        xml = project_file.read_text(encoding="utf-8")
    except OSError:
        return None

    tag = re.compile(
        r'<PackageReference\s+Include="' + re.escape(package_id) + r'"[^>]*?Version="([^"]+)"',
        re.IGNORECASE,
    )
    m = tag.search(xml)
    return m.group(1) if m else None
