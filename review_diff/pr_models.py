#!/usr/bin/env python3
"""Pydantic models for pull request metadata and the assembled review prompt.

PR details arrive from the code-hosting client in whatever shape its API
returns; ``PRMetadata.from_pr_details`` reduces them to the three fields
the review prompt needs.
"""

from typing import Any, Dict, Optional
from pydantic import BaseModel, Field

from review_diff.diff_models import DiffStats


NOT_AVAILABLE = "N/A"

# Tried in order; the first non-empty string wins
AUTHOR_PATHS = (
    ("author", "user", "displayName"),
    ("author", "displayName"),
    ("author", "name"),
    ("author",),
)


class PRMetadata(BaseModel):
    """Descriptive metadata for a pull request."""

    title: str = Field(NOT_AVAILABLE, description="Pull request title")
    description: str = Field(NOT_AVAILABLE, description="Pull request description")
    author: str = Field(NOT_AVAILABLE, description="Display name of the pull request author")

    model_config = {"extra": "ignore"}

    @classmethod
    def from_pr_details(cls, details: Optional[Dict[str, Any]]) -> "PRMetadata":
        """Build metadata from a raw PR details payload.

        Args:
            details: PR details as returned by the code-hosting API, or None

        Returns:
            PRMetadata with "N/A" for every field that could not be resolved
        """
        if not isinstance(details, dict):
            return cls()
        author = NOT_AVAILABLE
        for path in AUTHOR_PATHS:
            value = safe_extract(details, *path)
            if isinstance(value, str) and value.strip():
                author = value
                break
        return cls(
            title=_text_or_na(details.get("title")),
            description=_text_or_na(details.get("description")),
            author=author,
        )


class ReviewPromptData(BaseModel):
    """Everything handed to the content-generation service."""

    pr_title: str = Field(..., description="Pull request title or N/A")
    pr_description: str = Field(..., description="Pull request description or N/A")
    pr_author: str = Field(..., description="Pull request author or N/A")
    code_changes: str = Field(..., description="Rendered diff markdown or the diagnostic block")
    has_changes: bool = Field(False, description="Whether a diff strategy detected changes")
    stats: DiffStats = Field(default_factory=DiffStats, description="Line and file tallies")
    processor_used: Optional[str] = Field(None, description="Strategy that produced code_changes")
    prompt: str = Field(..., description="Assembled prompt text")


def _text_or_na(value: Any) -> str:
    if isinstance(value, str) and value.strip():
        return value
    return NOT_AVAILABLE


def safe_extract(data: Dict, *keys, default=None):
    """Safely extract nested dictionary values.

    Args:
        data: Dictionary to extract from
        *keys: Sequence of keys to traverse
        default: Default value if path doesn't exist

    Returns:
        Value at the nested path or default

    Example:
        safe_extract(pr_details, "author", "user", "displayName")
    """
    current = data
    for key in keys:
        if not isinstance(current, dict) or key not in current:
            return default
        current = current[key]
    return current
