#!/usr/bin/env python3
"""Pydantic models for the canonical diff representation."""

from enum import Enum
from typing import Optional, List
from pydantic import BaseModel, ConfigDict, Field

DEV_NULL = "/dev/null"
UNKNOWN_FILE = "Unknown file"


class DiffLineKind(str, Enum):
    # values double as the unified-diff line marker
    CONTEXT = " "
    ADDED = "+"
    REMOVED = "-"


class DiffLine(BaseModel):
    kind: DiffLineKind
    text: str

    model_config = ConfigDict(frozen=True)


class Hunk(BaseModel):
    """One contiguous region of a file diff.

    Starts and spans are taken from the source payload as-is and are only
    used for the range header; they are never recomputed from ``lines``.
    """

    source_start: Optional[int] = None
    source_span: Optional[int] = None
    dest_start: Optional[int] = None
    dest_span: Optional[int] = None
    context_label: Optional[str] = None
    lines: List[DiffLine] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)


class FileDiff(BaseModel):
    source_path: str = DEV_NULL
    dest_path: str = DEV_NULL
    hunks: List[Hunk] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)

    @property
    def display_path(self) -> str:
        for path in (self.dest_path, self.source_path):
            if path and path != DEV_NULL:
                return path
        return UNKNOWN_FILE


class CanonicalDiff(BaseModel):
    files: List[FileDiff] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)

    def has_lines(self) -> bool:
        return any(h.lines for f in self.files for h in f.hunks)

    def has_line_changes(self) -> bool:
        return any(
            line.kind is not DiffLineKind.CONTEXT
            for f in self.files
            for h in f.hunks
            for line in h.lines
        )


class DiffStats(BaseModel):
    added_lines: int = 0
    removed_lines: int = 0
    modified_files: int = 0


class RenderedReview(BaseModel):
    markdown: str
    has_changes: bool = False
    stats: DiffStats = Field(default_factory=DiffStats)
    processor_used: Optional[str] = None
