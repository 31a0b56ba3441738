#!/usr/bin/env python3
from __future__ import annotations

from typing import List, Optional

from review_diff.diff_models import CanonicalDiff, FileDiff, Hunk

FILE_SEPARATOR = "---\n\n"


def fence_for(text: str) -> str:
	# must be longer than any backtick run inside the block
	longest = 0
	run = 0
	for ch in text or "":
		run = run + 1 if ch == "`" else 0
		longest = max(longest, run)
	return "`" * max(3, longest + 1)


def _span_label(start: Optional[int], span: Optional[int]) -> str:
	if start is None:
		return "?"
	if span is None:
		return str(start)
	return f"{start}-{start + span - 1}"


def range_label(hunk: Hunk) -> Optional[str]:
	"""Human-readable line range, or None when the hunk carries no starts."""
	if hunk.source_start is None and hunk.dest_start is None:
		return None
	return f"Lines {_span_label(hunk.source_start, hunk.source_span)} → {_span_label(hunk.dest_start, hunk.dest_span)}"


def render_hunk(hunk: Hunk, index: int) -> str:
	title = f"**Hunk {index + 1}**"
	if hunk.context_label:
		title += f" ({hunk.context_label})"
	rng = range_label(hunk)
	header = f"{title}: {rng}" if rng else title
	body = "".join(f"{line.kind.value}{line.text}\n" for line in hunk.lines)
	fence = fence_for(body)
	return f"{header}\n\n{fence}diff\n{body}{fence}\n\n"


def render_file(file_diff: FileDiff, index: int) -> str:
	out: List[str] = [f"### File {index + 1}: {file_diff.display_path}\n\n"]
	for h_idx, hunk in enumerate(file_diff.hunks):
		out.append(render_hunk(hunk, h_idx))
	return "".join(out)


def render_diff_markdown(diff: CanonicalDiff) -> str:
	"""Render a canonical diff as per-file markdown with fenced diff blocks.

	Pure projection of the model: the same diff always yields the same text.
	"""
	if not isinstance(diff, CanonicalDiff):
		raise TypeError(f"render_diff_markdown expects CanonicalDiff, got {type(diff).__name__}")
	return FILE_SEPARATOR.join(render_file(f, idx) for idx, f in enumerate(diff.files))
