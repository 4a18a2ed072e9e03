"""Idempotent, line-oriented text patches.

Every function here is pure: it takes the full document text and returns a
PatchResult holding the new text. Applying a patch to its own output is a
no-op. Markers are matched as plain, case-sensitive substrings.

A missing marker is not an error. The result status tells the caller whether
the edit was applied, was already there, or found nothing to anchor on.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable


class PatchStatus(str, Enum):
    APPLIED = "applied"
    ALREADY_PRESENT = "already-present"
    MARKER_NOT_FOUND = "marker-not-found"
    APPENDED = "appended"


@dataclass(frozen=True)
class PatchResult:
    text: str
    status: PatchStatus
    changed: bool
    missed: int = 0  # patches whose anchor was not found

    def __str__(self) -> str:
        return self.text


Patch = Callable[[str], PatchResult]


def _unchanged(text: str, status: PatchStatus) -> PatchResult:
    missed = 1 if status == PatchStatus.MARKER_NOT_FOUND else 0
    return PatchResult(text=text, status=status, changed=False, missed=missed)


def _find_line(lines: list[str], marker: str, start: int = 0) -> int:
    for i in range(start, len(lines)):
        if marker in lines[i]:
            return i
    return -1


def insert_after_marker(text: str, marker: str, line: str, *, allow_duplicates: bool = False) -> PatchResult:
    """Insert *line* right after the first line containing *marker*."""

    if not allow_duplicates and line in text:
        return _unchanged(text, PatchStatus.ALREADY_PRESENT)

    lines = text.split("\n")
    idx = _find_line(lines, marker)
    if idx < 0:
        return _unchanged(text, PatchStatus.MARKER_NOT_FOUND)

    lines.insert(idx + 1, line)
    return PatchResult(text="\n".join(lines), status=PatchStatus.APPLIED, changed=True)


def insert_before_marker(text: str, marker: str, line: str) -> PatchResult:
    """Insert *line* right before the first line containing *marker*."""

    if line in text:
        return _unchanged(text, PatchStatus.ALREADY_PRESENT)

    lines = text.split("\n")
    idx = _find_line(lines, marker)
    if idx < 0:
        return _unchanged(text, PatchStatus.MARKER_NOT_FOUND)

    lines.insert(idx, line)
    return PatchResult(text="\n".join(lines), status=PatchStatus.APPLIED, changed=True)


def ensure_line_present(text: str, line: str) -> PatchResult:
    """Prepend *line* unless it already occurs somewhere in *text*.

    Used for declarations that must precede everything else (using/import lines).
    """

    if line in text:
        return _unchanged(text, PatchStatus.ALREADY_PRESENT)
    return PatchResult(text=f"{line}\n{text}", status=PatchStatus.APPLIED, changed=True)


def replace_block_starting_with(text: str, start_marker: str, block: str, *, terminator: str = ";") -> PatchResult:
    """Replace the statement starting at *start_marker* with *block*.

    The replaced span runs from the first line containing *start_marker*
    through the first line (that one included) containing *terminator*, or to
    the end of the document when no terminator follows. Without a marker the
    block is appended instead.
    """

    if block in text:
        return _unchanged(text, PatchStatus.ALREADY_PRESENT)

    lines = text.split("\n")
    block_lines = block.split("\n")

    start = _find_line(lines, start_marker)
    if start < 0:
        return PatchResult(text=f"{text}\n{block}\n", status=PatchStatus.APPENDED, changed=True)

    end = _find_line(lines, terminator, start)
    end = len(lines) if end < 0 else end + 1

    updated = lines[:start] + block_lines + lines[end:]
    new_text = "\n".join(updated)
    if new_text == text:
        return _unchanged(text, PatchStatus.ALREADY_PRESENT)
    return PatchResult(text=new_text, status=PatchStatus.APPLIED, changed=True)


def apply_patches(text: str, *patches: Patch) -> PatchResult:
    """Run *patches* in order, feeding each the previous result's text.

    The combined status is APPLIED when any patch changed the text, otherwise
    the status of the last patch. ``missed`` counts every patch in the chain
    that found no anchor, including when others did apply.
    """

    current = text
    statuses: list[PatchStatus] = []
    missed = 0
    for patch in patches:
        result = patch(current)
        current = result.text
        statuses.append(result.status)
        missed += result.missed

    if current != text:
        return PatchResult(text=current, status=PatchStatus.APPLIED, changed=True, missed=missed)
    last = statuses[-1] if statuses else PatchStatus.ALREADY_PRESENT
    return PatchResult(text=text, status=last, changed=False, missed=missed)
