import os
from typing import Dict, Any

class Config:
	"""Configuration for the review prompt pipeline."""

	# LangSmith Configuration
	LANGSMITH_API_KEY = os.getenv("LANGSMITH_API_KEY", "")
	LANGSMITH_PROJECT = os.getenv("LANGSMITH_PROJECT", "pr-review")
	LANGSMITH_ENDPOINT = os.getenv("LANGSMITH_ENDPOINT", "https://api.smith.langchain.com")

	# Diff normalization
	DIFF_FILE_FILTER_ENABLED = bool(int(os.getenv("DIFF_FILE_FILTER_ENABLED", "1")))
	DIFF_EXTRA_IGNORE_PATTERNS = os.getenv("DIFF_EXTRA_IGNORE_PATTERNS", "")
	DIFF_RAW_FALLBACK_ENABLED = bool(int(os.getenv("DIFF_RAW_FALLBACK_ENABLED", "1")))
	DIFF_JSON_INDENT = int(os.getenv("DIFF_JSON_INDENT", "2"))

	# Prompt assembly
	REVIEW_PROMPT_TEMPLATE_PATH = os.getenv("REVIEW_PROMPT_TEMPLATE_PATH", "")

	@classmethod
	def get_langsmith_config(cls) -> Dict[str, Any]:
		"""Get LangSmith configuration."""
		return {
			"api_key": cls.LANGSMITH_API_KEY,
			"project": cls.LANGSMITH_PROJECT,
			"endpoint": cls.LANGSMITH_ENDPOINT
		}

	@classmethod
	def get_diff_config(cls) -> Dict[str, Any]:
		"""Get diff normalization configuration.

		Returns:
			Mapping with file filter switch, extra ignore patterns (list),
			raw fallback switch and JSON dump indentation.
		"""
		extra = [p.strip() for p in (cls.DIFF_EXTRA_IGNORE_PATTERNS or "").split(",") if p.strip()]
		return {
			"filter_enabled": cls.DIFF_FILE_FILTER_ENABLED,
			"extra_ignore_patterns": extra,
			"raw_fallback_enabled": cls.DIFF_RAW_FALLBACK_ENABLED,
			"json_indent": cls.DIFF_JSON_INDENT,
		}
