#!/usr/bin/env python3
"""Diff normalization for LLM-ready input.

Turns whatever the code-hosting client handed over (unified text, a hosted-API
structured diff, a legacy structured diff, or an opaque object) into a
RenderedReview. Strategies are tried in a fixed order and the first one that
reports changes wins; if none does, a diagnostic block with the raw payload
is returned instead. ``DiffProcessor.process`` never raises.
"""

from __future__ import annotations

import json
import logging
from enum import Enum
from typing import Any, List, Optional, Sequence

from configs.config import Config
from review_diff.diff_models import CanonicalDiff, RenderedReview
from review_diff.diff_stats import collect_stats
from review_diff.file_filter import FileFilter
from review_diff.hosted_diff_converter import convert_hosted_diff
from review_diff.legacy_diff_converter import convert_legacy_diff
from review_diff.markdown_renderer import fence_for, render_diff_markdown
from review_diff.unified_diff_parser import DiffParseError, parse_unified_diff

logger = logging.getLogger(__name__)

DIAGNOSTIC_PROCESSOR = "diagnostic (no changes detected)"

NO_CHANGES_NOTE = (
    "**Note:** No specific code changes were detected in the provided diff data. This might indicate:\n"
    "- The diff data structure is different than expected\n"
    "- The changes are in binary files or very large files\n"
    "- There might be an issue with how the diff was generated\n\n"
)

RAW_JSON_NOTE = "Note: The above is the raw diff data structure. Please analyze the changes within this data.\n\n"


class DiffShape(str, Enum):
    UNIFIED_TEXT = "unified_text"
    HOSTED = "hosted"
    LEGACY = "legacy"
    UNKNOWN = "unknown"


def detect_shape(payload: Any) -> DiffShape:
    if isinstance(payload, str):
        return DiffShape.UNIFIED_TEXT
    if isinstance(payload, dict):
        if isinstance(payload.get("diffs"), list):
            return DiffShape.HOSTED
        if isinstance(payload.get("values"), list):
            return DiffShape.LEGACY
    return DiffShape.UNKNOWN


def dump_payload(payload: Any, indent: int = 2) -> str:
    try:
        return json.dumps(payload, indent=indent, default=str, ensure_ascii=False)
    except (TypeError, ValueError):
        # e.g. circular references
        return repr(payload)


def diagnostic_block(payload: Any, indent: int = 2) -> str:
    dumped = dump_payload(payload, indent)
    fence = fence_for(dumped)
    return f"{NO_CHANGES_NOTE}Raw diff data structure:\n{fence}json\n{dumped}\n{fence}\n\n"


class DiffStrategy:
    """Base for strategies that build a CanonicalDiff for one input shape."""

    name = ""
    shape: Optional[DiffShape] = None

    def __init__(self, file_filter: Optional[FileFilter] = None) -> None:
        self.file_filter = file_filter or FileFilter()

    def to_canonical(self, payload: Any) -> CanonicalDiff:
        raise NotImplementedError

    def has_changes(self, diff: CanonicalDiff) -> bool:
        return diff.has_lines()

    def try_normalize(self, payload: Any, shape: DiffShape) -> Optional[RenderedReview]:
        if shape is not self.shape:
            return None
        diff = self.file_filter.filter_diff(self.to_canonical(payload))
        return RenderedReview(
            markdown=render_diff_markdown(diff),
            has_changes=self.has_changes(diff),
            stats=collect_stats(diff),
            processor_used=self.name,
        )


class UnifiedTextStrategy(DiffStrategy):
    name = "unified_text"
    shape = DiffShape.UNIFIED_TEXT

    def to_canonical(self, payload: Any) -> CanonicalDiff:
        return parse_unified_diff(payload)


class HostedFormatStrategy(DiffStrategy):
    name = "hosted"
    shape = DiffShape.HOSTED

    def to_canonical(self, payload: Any) -> CanonicalDiff:
        return convert_hosted_diff(payload)


class LegacyFormatStrategy(DiffStrategy):
    name = "legacy"
    shape = DiffShape.LEGACY

    def to_canonical(self, payload: Any) -> CanonicalDiff:
        return convert_legacy_diff(payload)

    def has_changes(self, diff: CanonicalDiff) -> bool:
        # opaque context blocks alone do not count
        return diff.has_line_changes()


class RawStringStrategy:
    name = "raw_string"

    def try_normalize(self, payload: Any, shape: DiffShape) -> Optional[RenderedReview]:
        if not isinstance(payload, str) or not payload.strip():
            return None
        fence = fence_for(payload)
        return RenderedReview(
            markdown=f"{fence}diff\n{payload}\n{fence}\n\n",
            has_changes=True,
            processor_used=self.name,
        )


class RawJsonStrategy:
    name = "raw_json"

    def __init__(self, indent: int = 2) -> None:
        self.indent = indent

    def try_normalize(self, payload: Any, shape: DiffShape) -> Optional[RenderedReview]:
        if not isinstance(payload, (dict, list)) or not payload:
            return None
        dumped = dump_payload(payload, self.indent)
        fence = fence_for(dumped)
        return RenderedReview(
            markdown=f"{fence}json\n{dumped}\n{fence}\n\n{RAW_JSON_NOTE}",
            has_changes=True,
            processor_used=self.name,
        )


def default_strategies(
    *,
    file_filter: Optional[FileFilter] = None,
    raw_fallback: bool = True,
    json_indent: int = 2,
) -> List[Any]:
    file_filter = file_filter or FileFilter()
    strategies: List[Any] = [
        UnifiedTextStrategy(file_filter),
        HostedFormatStrategy(file_filter),
        LegacyFormatStrategy(file_filter),
    ]
    if raw_fallback:
        strategies += [RawStringStrategy(), RawJsonStrategy(json_indent)]
    return strategies


class DiffProcessor:
    def __init__(
        self,
        *,
        strategies: Optional[Sequence[Any]] = None,
        file_filter: Optional[FileFilter] = None,
        raw_fallback: Optional[bool] = None,
        json_indent: Optional[int] = None,
    ) -> None:
        cfg = Config.get_diff_config()
        self.json_indent = json_indent if json_indent is not None else int(cfg["json_indent"])
        if strategies is None:
            strategies = default_strategies(
                file_filter=file_filter,
                raw_fallback=cfg["raw_fallback_enabled"] if raw_fallback is None else raw_fallback,
                json_indent=self.json_indent,
            )
        self.strategies = list(strategies)

    def process(self, payload: Any, *, known_shape: Optional[DiffShape] = None) -> RenderedReview:
        """Normalize ``payload`` and render it.

        ``known_shape`` lets a caller that already knows the input format skip
        shape detection; strategies for other shapes are then not applicable.
        """
        shape = known_shape or detect_shape(payload)
        logger.debug(f"Normalizing diff payload: shape={shape.value}")

        for strategy in self.strategies:
            try:
                result = strategy.try_normalize(payload, shape)
            except DiffParseError as e:
                logger.warning(f"{strategy.name}: could not parse diff [{e.code}]: {e}")
                continue
            except Exception as e:  # noqa: BLE001
                logger.exception(f"{strategy.name}: unexpected error while normalizing diff: {e}")
                continue
            if result is None:
                continue
            if result.has_changes:
                logger.info(
                    f"Normalized diff with {strategy.name}: files={result.stats.modified_files}, "
                    f"+{result.stats.added_lines}/-{result.stats.removed_lines}"
                )
                return result
            logger.info(f"{strategy.name}: no changes detected, trying next strategy")

        logger.warning(f"No strategy detected changes (shape={shape.value}); returning diagnostic block")
        return RenderedReview(
            markdown=diagnostic_block(payload, self.json_indent),
            has_changes=False,
            processor_used=DIAGNOSTIC_PROCESSOR,
        )


def normalize_diff(payload: Any, *, known_shape: Optional[DiffShape] = None) -> RenderedReview:
    return DiffProcessor().process(payload, known_shape=known_shape)
