#!/usr/bin/env python3
"""Line and file tallies over the canonical diff."""

from review_diff.diff_models import CanonicalDiff, DiffLineKind, DiffStats


def collect_stats(diff: CanonicalDiff) -> DiffStats:
    if not isinstance(diff, CanonicalDiff):
        raise TypeError(f"collect_stats expects CanonicalDiff, got {type(diff).__name__}")
    added = 0
    removed = 0
    for f in diff.files:
        for hunk in f.hunks:
            for line in hunk.lines:
                if line.kind is DiffLineKind.ADDED:
                    added += 1
                elif line.kind is DiffLineKind.REMOVED:
                    removed += 1
    # every FileDiff counts once, hunks or not
    return DiffStats(added_lines=added, removed_lines=removed, modified_files=len(diff.files))
