#!/usr/bin/env python3
"""Hosted-API structured diffs (file → hunk → segment → line).

The payload is turned into unified-diff text and handed to the unified
parser, so both paths share one notion of line kinds. Hunk headers in the
synthesized text carry the counts of the lines actually emitted; the
payload's own ``sourceLine``/``sourceSpan``/``destinationLine``/
``destinationSpan`` are advisory and are copied onto the parsed hunks.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple

from review_diff.diff_models import CanonicalDiff, DEV_NULL
from review_diff.unified_diff_parser import parse_unified_diff

logger = logging.getLogger(__name__)

_PREFIX_BY_SEGMENT_TYPE = {
    "ADDED": "+",
    "REMOVED": "-",
}


def _as_list(value: Any) -> list:
    return value if isinstance(value, list) else []


def _path_of(ref: Any) -> str:
    """Resolve ``{"toString": "..."}`` or a plain string; default /dev/null."""
    if isinstance(ref, dict):
        ref = ref.get("toString")
    return ref if isinstance(ref, str) and ref else DEV_NULL


def _int_or_none(value: Any) -> Optional[int]:
    return value if isinstance(value, int) and not isinstance(value, bool) else None


def _segment_lines(segment: Any) -> List[str]:
    if not isinstance(segment, dict):
        return []
    seg_type = segment.get("type")
    prefix = _PREFIX_BY_SEGMENT_TYPE.get(seg_type, " ") if isinstance(seg_type, str) else " "
    out: List[str] = []
    for line in _as_list(segment.get("lines")):
        if isinstance(line, dict):
            content = line.get("line")
        else:
            content = line
        if not isinstance(content, str):
            content = ""
        # one diff line per physical line
        for part in content.rstrip("\r\n").split("\n"):
            part = part.rstrip("\r")
            out.append(f"{prefix}{part}\n")
    return out


def _declared_range(hunk: dict) -> Dict[str, Optional[int]]:
    return {
        "source_start": _int_or_none(hunk.get("sourceLine")),
        "source_span": _int_or_none(hunk.get("sourceSpan")),
        "dest_start": _int_or_none(hunk.get("destinationLine")),
        "dest_span": _int_or_none(hunk.get("destinationSpan")),
    }


def _hunk_text(hunk: Any, index: int) -> Optional[str]:
    if not isinstance(hunk, dict):
        return None
    body: List[str] = []
    for segment in _as_list(hunk.get("segments")):
        body.extend(_segment_lines(segment))
    if not body:
        logger.debug(f"No segment lines for hunk {index}")
        return None
    source_count = sum(1 for line in body if not line.startswith("+"))
    dest_count = sum(1 for line in body if not line.startswith("-"))
    header = (
        f"@@ -{_int_or_none(hunk.get('sourceLine')) or 0},{source_count} "
        f"+{_int_or_none(hunk.get('destinationLine')) or 0},{dest_count} @@"
    )
    context = hunk.get("context")
    if isinstance(context, str) and context.strip():
        header += f" {context.strip()}"
    return header + "\n" + "".join(body)


def _file_sections(payload: Any) -> List[Tuple[str, List[Dict[str, Optional[int]]]]]:
    """Unified text per file, with the declared range of every emitted hunk."""
    if not isinstance(payload, dict):
        return []
    sections = []
    for file in _as_list(payload.get("diffs")):
        if not isinstance(file, dict):
            continue
        source = _path_of(file.get("source"))
        dest = _path_of(file.get("destination"))
        hunks: List[str] = []
        ranges: List[Dict[str, Optional[int]]] = []
        for idx, h in enumerate(_as_list(file.get("hunks"))):
            hunk_text = _hunk_text(h, idx)
            if hunk_text is not None:
                hunks.append(hunk_text)
                ranges.append(_declared_range(h))
        if not hunks:
            logger.debug(f"No hunk content for file {source}")
            continue
        sections.append((f"--- {source}\n+++ {dest}\n" + "".join(hunks), ranges))
    return sections


def synthesize_unified_diff(payload: Any) -> str:
    """Render a hosted-API diff payload as unified-diff text.

    Files with no hunk content and hunks with no segment lines are omitted,
    so an empty string means the payload carried no lines at all.
    """
    sections = _file_sections(payload)
    text = "".join(section for section, _ in sections)
    logger.info(f"Synthesized unified diff: files={len(sections)}, chars={len(text)}")
    return text


def convert_hosted_diff(payload: Any) -> CanonicalDiff:
    """Synthesize unified text from a hosted payload and parse it.

    Starts and spans on the returned hunks are the payload's values, which
    may be missing or disagree with the lines.
    """
    sections = _file_sections(payload)
    if not sections:
        return CanonicalDiff()
    parsed = parse_unified_diff("".join(section for section, _ in sections))
    logger.info(f"Converted hosted diff: files={len(parsed.files)}")
    if len(parsed.files) != len(sections):
        logger.warning(f"Parsed {len(parsed.files)} files from {len(sections)} hosted diffs; keeping parsed ranges")
        return parsed

    files = []
    for file_diff, (_, ranges) in zip(parsed.files, sections):
        if len(file_diff.hunks) != len(ranges):
            logger.warning(f"Hunk count mismatch for {file_diff.display_path}; keeping parsed ranges")
            files.append(file_diff)
            continue
        hunks = [hunk.model_copy(update=declared) for hunk, declared in zip(file_diff.hunks, ranges)]
        files.append(file_diff.model_copy(update={"hunks": hunks}))
    return CanonicalDiff(files=files)
