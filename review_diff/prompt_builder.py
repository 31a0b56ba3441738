#!/usr/bin/env python3
from __future__ import annotations

import logging
import re
from typing import Dict, Optional

from configs.config import Config
from review_diff.diff_models import RenderedReview
from review_diff.pr_models import PRMetadata, ReviewPromptData

logger = logging.getLogger(__name__)

DEFAULT_TEMPLATE = """## Pull Request

**Title:** {{ pr_title }}
**Author:** {{ pr_author }}

**Description:**
{{ pr_description }}

## Code Changes

{{ code_changes }}"""

_PLACEHOLDER = re.compile(r"\{\{\s*(\w+)\s*\}\}")


def _render_template(template: str, mapping: Dict[str, str]) -> str:
	# single pass, so values containing "{{ x }}" are left alone
	return _PLACEHOLDER.sub(lambda m: mapping.get(m.group(1), m.group(0)), template)


def load_template(path: Optional[str] = None) -> str:
	"""Return the prompt template from ``path``, the configured file, or the built-in one.

	An unreadable template file is logged and the built-in template is used.
	"""
	path = path or Config.REVIEW_PROMPT_TEMPLATE_PATH
	if not path:
		return DEFAULT_TEMPLATE
	try:
		with open(path, "r", encoding="utf-8") as f:
			return f.read()
	except (OSError, UnicodeDecodeError) as e:
		logger.warning(f"Cannot read prompt template {path}: {e}; using built-in template")
		return DEFAULT_TEMPLATE


def build_review_prompt(
	rendered: RenderedReview,
	metadata: Optional[PRMetadata] = None,
	*,
	template: Optional[str] = None,
) -> ReviewPromptData:
	"""Combine PR metadata with the rendered diff.

	When no changes were detected ``rendered.markdown`` already holds the
	diagnostic block with the raw payload, and it goes in unchanged.
	"""
	if not isinstance(rendered, RenderedReview):
		raise TypeError(f"build_review_prompt expects RenderedReview, got {type(rendered).__name__}")
	metadata = metadata or PRMetadata()
	mapping = {
		"pr_title": metadata.title,
		"pr_description": metadata.description,
		"pr_author": metadata.author,
		"code_changes": rendered.markdown,
	}
	prompt = _render_template(template if template is not None else load_template(), mapping)
	logger.info(
		f"Built review prompt: has_changes={rendered.has_changes}, "
		f"processor={rendered.processor_used}, prompt_len={len(prompt)}"
	)
	return ReviewPromptData(
		pr_title=metadata.title,
		pr_description=metadata.description,
		pr_author=metadata.author,
		code_changes=rendered.markdown,
		has_changes=rendered.has_changes,
		stats=rendered.stats,
		processor_used=rendered.processor_used,
		prompt=prompt,
	)
