#!/usr/bin/env python3
"""Parse unified-diff text into the canonical diff model.

Hunk headers are treated as advisory. Before the text reaches ``unidiff``
every hunk header is rewritten with the line counts actually present in its
body, and unprefixed body lines become context lines. The counts declared in
the original header are put back on the parsed hunks for display.
"""

from __future__ import annotations

import logging
import re
from typing import Dict, List, Optional, Tuple

from unidiff import PatchSet
from unidiff.errors import UnidiffParseError

from review_diff.diff_models import CanonicalDiff, DiffLine, DiffLineKind, FileDiff, Hunk, DEV_NULL

logger = logging.getLogger(__name__)

_KIND_BY_MARKER = {
    "+": DiffLineKind.ADDED,
    "-": DiffLineKind.REMOVED,
}
# "\ No newline at end of file"
_NO_NEWLINE_MARKER = "\\"

RE_HUNK_HEADER = re.compile(r"^@@ -(\d+)(?:,(\d+))? \+(\d+)(?:,(\d+))? @@(.*)$")


class DiffParseError(Exception):
    def __init__(self, message: str, code: str = "UNIFIED_PARSE") -> None:
        super().__init__(message)
        self.code = code


class _PendingHunk:
    """Body of one hunk collected while rewriting the text."""

    def __init__(self, match: "re.Match[str]") -> None:
        self.source_start = int(match.group(1))
        self.source_span = int(match.group(2)) if match.group(2) is not None else 1
        self.dest_start = int(match.group(3))
        self.dest_span = int(match.group(4)) if match.group(4) is not None else 1
        self.section = match.group(5)
        # remaining lines according to the declared header
        self.source_left = self.source_span
        self.dest_left = self.dest_span
        self.body: List[str] = []
        self.source_count = 0
        self.dest_count = 0

    @property
    def exhausted(self) -> bool:
        return self.source_left <= 0 and self.dest_left <= 0

    def add(self, line: str) -> None:
        marker = line[:1]
        if marker == _NO_NEWLINE_MARKER:
            self.body.append(line)
            return
        if marker not in ("+", "-", " "):
            line = f" {line}"
            marker = " "
        if marker != "+":
            self.source_left -= 1
            self.source_count += 1
        if marker != "-":
            self.dest_left -= 1
            self.dest_count += 1
        self.body.append(line)

    def has_lines(self) -> bool:
        return bool(self.source_count or self.dest_count)

    def render(self) -> List[str]:
        header = f"@@ -{self.source_start},{self.source_count} +{self.dest_start},{self.dest_count} @@{self.section}"
        return [header] + self.body

    def declared(self) -> Dict[str, int]:
        return {
            "source_start": self.source_start,
            "source_span": self.source_span,
            "dest_start": self.dest_start,
            "dest_span": self.dest_span,
        }


def _is_file_header(lines: List[str], idx: int, hunk: _PendingHunk) -> bool:
    if not (lines[idx].startswith("--- ") and idx + 1 < len(lines) and lines[idx + 1].startswith("+++ ")):
        return False
    # a removed "-- x" followed by an added "++ y" looks the same
    return hunk.exhausted or (idx + 2 < len(lines) and lines[idx + 2].startswith("@@"))


def normalize_hunks(text: str) -> Tuple[str, List[Dict[str, int]]]:
    """Rewrite hunk headers to match their bodies.

    Returns the rewritten text and the declared start/span values of every
    hunk kept, in document order. Hunks without any lines are dropped.

    Raises:
        DiffParseError: on a line starting with ``@@`` that is not a valid
            hunk header.
    """
    lines = [line.rstrip("\r") for line in text.split("\n")]
    if lines and lines[-1] == "":
        lines.pop()

    out: List[str] = []
    declared: List[Dict[str, int]] = []
    hunk: Optional[_PendingHunk] = None

    def flush() -> None:
        if hunk is None:
            return
        if hunk.has_lines():
            out.extend(hunk.render())
            declared.append(hunk.declared())
        else:
            logger.debug(f"Dropping empty hunk at -{hunk.source_start} +{hunk.dest_start}")

    for idx, line in enumerate(lines):
        if line.startswith("@@"):
            match = RE_HUNK_HEADER.match(line)
            if match is None:
                raise DiffParseError(f"Malformed hunk header: {line}")
            flush()
            hunk = _PendingHunk(match)
            continue
        if hunk is not None:
            if _is_file_header(lines, idx, hunk) or line.startswith("diff --git "):
                flush()
                hunk = None
            elif line[:1] in ("+", "-", " ", _NO_NEWLINE_MARKER):
                hunk.add(line)
                continue
            elif not hunk.exhausted:
                # unprefixed line inside the declared range
                hunk.add(line)
                continue
            else:
                flush()
                hunk = None
        if line.strip():
            out.append(line)
    flush()

    normalized = "\n".join(out) + "\n" if out else ""
    return normalized, declared


def _to_hunk(hunk, declared: Optional[Dict[str, int]]) -> Hunk:
    lines: List[DiffLine] = []
    for line in hunk:
        if line.line_type == _NO_NEWLINE_MARKER:
            continue
        kind = _KIND_BY_MARKER.get(line.line_type, DiffLineKind.CONTEXT)
        lines.append(DiffLine(kind=kind, text=line.value.rstrip("\r\n")))
    ranges = declared or {
        "source_start": hunk.source_start,
        "source_span": hunk.source_length,
        "dest_start": hunk.target_start,
        "dest_span": hunk.target_length,
    }
    return Hunk(
        context_label=(hunk.section_header or "").strip() or None,
        lines=lines,
        **ranges,
    )


def parse_unified_diff(text: str) -> CanonicalDiff:
    """Parse one or more file sections of unified-diff text.

    Raises:
        DiffParseError: if ``text`` is not a string or a header/hunk range
            cannot be parsed.
    """
    if not isinstance(text, str):
        raise DiffParseError(f"Expected unified diff text, got {type(text).__name__}", code="NOT_TEXT")
    normalized, declared = normalize_hunks(text)
    try:
        patch_set = PatchSet(normalized)
    except UnidiffParseError as e:
        raise DiffParseError(str(e)) from e

    ranges = iter(declared)
    files = [
        FileDiff(
            source_path=patched.source_file or DEV_NULL,
            dest_path=patched.target_file or DEV_NULL,
            hunks=[_to_hunk(h, next(ranges, None)) for h in patched],
        )
        for patched in patch_set
    ]
    logger.debug(f"Parsed unified diff: files={len(files)}, hunks={len(declared)}")
    return CanonicalDiff(files=files)
