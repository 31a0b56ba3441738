#!/usr/bin/env python3
"""Older structured diffs (file → hunk → flat line list).

The legacy shape does not reliably carry hunk spans, so it is mapped straight
onto the canonical model instead of going through unified text.

Accepted shape::

    {"values": [
        {"srcPath" | "path" | "source": {"toString": "..."} or "...",
         "hunks": [{"oldLine": 1, "newLine": 1,
                    "lines": [...] or "content": "..."}],
         "content" | "diff": "..."}          # only used when hunks are absent
    ]}

Each entry of ``lines`` is one of, in priority order:

1. ``{"left": a, "right": b}``  → Removed a, Added b
2. ``{"left": a}``              → Removed a
3. ``{"right": b}``             → Added b
4. ``{"content": c, "type": t}`` → Added/Removed for t == ADDED/REMOVED, else Context
5. ``"plain string"``           → Context
"""

from __future__ import annotations

import logging
from typing import Any, List, Optional, Tuple

from review_diff.diff_models import CanonicalDiff, DiffLine, DiffLineKind, FileDiff, Hunk, DEV_NULL

logger = logging.getLogger(__name__)

# Field names tried in order until one yields a non-empty path
SOURCE_PATH_FIELDS: Tuple[str, ...] = ("srcPath", "path", "source")
DEST_PATH_FIELDS: Tuple[str, ...] = ("destPath", "path", "destination")

_KIND_BY_TYPE = {
    "ADDED": DiffLineKind.ADDED,
    "REMOVED": DiffLineKind.REMOVED,
}


def _as_list(value: Any) -> list:
    return value if isinstance(value, list) else []


def _int_or_none(value: Any) -> Optional[int]:
    return value if isinstance(value, int) and not isinstance(value, bool) else None


def resolve_path(entry: dict, fields: Tuple[str, ...]) -> Optional[str]:
    """Return the first non-empty path among ``fields``.

    A field may hold a plain string or an object with a ``toString`` string.
    """
    for field in fields:
        value = entry.get(field)
        if isinstance(value, dict):
            value = value.get("toString")
        if isinstance(value, str) and value:
            return value
    return None


def convert_line(line: Any) -> List[DiffLine]:
    if isinstance(line, str):
        return [DiffLine(kind=DiffLineKind.CONTEXT, text=line)]
    if not isinstance(line, dict):
        logger.debug(f"Skipping legacy line of type {type(line).__name__}")
        return []
    left = line.get("left")
    right = line.get("right")
    if isinstance(left, str) and isinstance(right, str):
        return [
            DiffLine(kind=DiffLineKind.REMOVED, text=left),
            DiffLine(kind=DiffLineKind.ADDED, text=right),
        ]
    if isinstance(left, str):
        return [DiffLine(kind=DiffLineKind.REMOVED, text=left)]
    if isinstance(right, str):
        return [DiffLine(kind=DiffLineKind.ADDED, text=right)]
    content = line.get("content")
    if isinstance(content, str):
        line_type = line.get("type")
        kind = _KIND_BY_TYPE.get(line_type, DiffLineKind.CONTEXT) if isinstance(line_type, str) else DiffLineKind.CONTEXT
        return [DiffLine(kind=kind, text=content)]
    logger.debug(f"Skipping legacy line with keys {sorted(line)}")
    return []


def _convert_hunk(hunk: Any) -> Optional[Hunk]:
    if not isinstance(hunk, dict):
        return None
    raw_lines = hunk.get("lines")
    lines: List[DiffLine] = []
    if isinstance(raw_lines, list):
        for raw in raw_lines:
            lines.extend(convert_line(raw))
    elif isinstance(hunk.get("content"), str):
        lines.append(DiffLine(kind=DiffLineKind.CONTEXT, text=hunk["content"]))
    return Hunk(
        source_start=_int_or_none(hunk.get("oldLine")),
        dest_start=_int_or_none(hunk.get("newLine")),
        lines=lines,
    )


def _convert_file(entry: dict) -> FileDiff:
    source = resolve_path(entry, SOURCE_PATH_FIELDS)
    dest = resolve_path(entry, DEST_PATH_FIELDS)
    source = source or dest or DEV_NULL
    dest = dest or source

    if isinstance(entry.get("hunks"), list):
        hunks = [h for h in (_convert_hunk(raw) for raw in entry["hunks"]) if h is not None]
    else:
        blob = entry.get("content") or entry.get("diff")
        hunks = [Hunk(lines=[DiffLine(kind=DiffLineKind.CONTEXT, text=blob)])] if isinstance(blob, str) else []
    return FileDiff(source_path=source, dest_path=dest, hunks=hunks)


def convert_legacy_diff(payload: Any) -> CanonicalDiff:
    if not isinstance(payload, dict):
        return CanonicalDiff()
    files = [_convert_file(entry) for entry in _as_list(payload.get("values")) if isinstance(entry, dict)]
    logger.debug(f"Converted legacy diff: files={len(files)}")
    return CanonicalDiff(files=files)
