#!/usr/bin/env python3
"""Review prompt agent.

Normalizes the diff of a pull request and assembles the text handed to the
content-generation service. The diff and PR details are supplied by the
caller; nothing is fetched and no model is called here.
"""

import argparse
import json
import logging
import sys
from typing import Any, Dict, Optional

from dotenv import load_dotenv
from langsmith.run_helpers import traceable

# Load environment variables from .env file before Config is imported
load_dotenv()

from review_diff.diff_processor import DiffProcessor, DiffShape  # noqa: E402
from review_diff.pr_models import PRMetadata, ReviewPromptData  # noqa: E402
from review_diff.prompt_builder import build_review_prompt, load_template  # noqa: E402

# Set up logging
logger = logging.getLogger(__name__)

FORMATS = {
	"auto": None,
	"unified": DiffShape.UNIFIED_TEXT,
	"hosted": DiffShape.HOSTED,
	"legacy": DiffShape.LEGACY,
}


class ReviewPromptAgent:
	"""Agent that turns raw diff data and PR details into a review prompt."""

	def __init__(self, processor: Optional[DiffProcessor] = None, template: Optional[str] = None):
		"""Initialize the review prompt agent.

		Args:
			processor: Optional DiffProcessor instance. If None, creates one from Config.
			template: Optional prompt template text. If None, loaded once from Config.
		"""
		self.processor = processor or DiffProcessor()
		self.template = template if template is not None else load_template()
		logger.info("Review prompt agent initialized")

	@traceable(name="prepare_review_prompt")
	def prepare(
		self,
		diff_data: Any,
		pr_details: Optional[Dict[str, Any]] = None,
		known_shape: Optional[DiffShape] = None,
	) -> ReviewPromptData:
		"""Normalize the diff and build the review prompt.

		Args:
			diff_data: Unified diff text, hosted or legacy structured diff, or any JSON value
			pr_details: Raw PR details from the code-hosting API
			known_shape: Diff format when the caller already knows it

		Returns:
			ReviewPromptData with the prompt text, structured fields and statistics
		"""
		metadata = PRMetadata.from_pr_details(pr_details)
		rendered = self.processor.process(diff_data, known_shape=known_shape)
		data = build_review_prompt(rendered, metadata, template=self.template)
		logger.info(
			f"Prepared review prompt for '{metadata.title}': {data.stats.modified_files} files, "
			f"+{data.stats.added_lines}/-{data.stats.removed_lines} (processor: {data.processor_used})"
		)
		return data


def _read_text(path: str) -> str:
	if path == "-":
		return sys.stdin.read()
	with open(path, "r", encoding="utf-8") as f:
		return f.read()


def load_diff_payload(raw: str) -> Any:
	"""Decode JSON diff payloads; anything that is not JSON is kept as diff text."""
	try:
		return json.loads(raw)
	except json.JSONDecodeError:
		return raw


def main() -> None:
	"""Main entry point for command-line usage."""
	parser = argparse.ArgumentParser(description="Build a code review prompt from pull request diff data")
	parser.add_argument("--diff", required=True, help="Diff file (JSON or unified diff text), '-' for stdin")
	parser.add_argument("--pr", required=False, help="JSON file with PR details (title, description, author)")
	parser.add_argument("--format", choices=sorted(FORMATS), default="auto", help="Diff format, if known")
	parser.add_argument("--json", action="store_true", help="Print structured prompt data as JSON")
	parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

	args = parser.parse_args()

	# Set up logging
	log_level = logging.DEBUG if args.verbose else logging.INFO
	logging.basicConfig(
		level=log_level,
		format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
	)

	# Suppress verbose logs from the pipeline unless in debug mode
	if not args.verbose:
		logging.getLogger("review_diff").setLevel(logging.WARNING)

	try:
		diff_data = load_diff_payload(_read_text(args.diff))
		pr_details = json.loads(_read_text(args.pr)) if args.pr else None
	except OSError as e:
		print(f"Error: Cannot read input: {e}", file=sys.stderr)
		sys.exit(1)
	except json.JSONDecodeError as e:
		print(f"Error: PR details are not valid JSON: {e}", file=sys.stderr)
		sys.exit(1)

	agent = ReviewPromptAgent()
	data = agent.prepare(diff_data, pr_details, known_shape=FORMATS[args.format])
	if args.json:
		print(json.dumps(data.model_dump(mode="json"), indent=2))
	else:
		print(data.prompt)
	sys.exit(0)


if __name__ == "__main__":
	main()
