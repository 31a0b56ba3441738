#!/usr/bin/env python3
"""Drop files that only add noise to a review prompt.

Lock files, build output, vendored dependencies, editor droppings and binary
assets are removed from the canonical diff before rendering.
"""

from __future__ import annotations

import fnmatch
import logging
from typing import Iterable, Optional

from configs.config import Config
from review_diff.diff_models import CanonicalDiff, FileDiff, DEV_NULL

logger = logging.getLogger(__name__)


IGNORED_PATTERNS = [
    # Package manager files
    "package-lock.json",
    "yarn.lock",
    "pnpm-lock.yaml",
    "composer.lock",
    "Pipfile.lock",
    "poetry.lock",
    "Gemfile.lock",
    "go.sum",
    "Cargo.lock",
    # Build output
    "dist/",
    "build/",
    "out/",
    "target/",
    ".next/",
    ".nuxt/",
    "coverage/",
    ".nyc_output/",
    # Dependencies
    "node_modules/",
    "vendor/",
    ".venv/",
    "venv/",
    "__pycache__/",
    ".pytest_cache/",
    # Editors and OS
    ".vscode/",
    ".idea/",
    "*.swp",
    "*.swo",
    "*~",
    ".DS_Store",
    "Thumbs.db",
    # Version control
    ".git/",
    ".svn/",
    ".hg/",
    # Logs and temp files
    "*.log",
    "*.tmp",
    "*.temp",
    "logs/",
    "tmp/",
    "temp/",
    # Generated assets
    "*.min.js",
    "*.min.css",
    "*.bundle.js",
    "*.bundle.css",
    "*.map",
    "_site/",
    "docs/_build/",
    # Local env files
    ".env.local",
    ".env.development.local",
    ".env.test.local",
    ".env.production.local",
    # Binary, media and archives
    "*.exe", "*.dll", "*.so", "*.dylib", "*.jar", "*.war", "*.ear",
    "*.zip", "*.tar.gz", "*.rar", "*.7z",
    "*.pdf", "*.doc", "*.docx", "*.xls", "*.xlsx", "*.ppt", "*.pptx",
    "*.png", "*.jpg", "*.jpeg", "*.gif", "*.bmp", "*.ico", "*.svg", "*.webp",
    "*.mp3", "*.mp4", "*.avi", "*.mov", "*.wmv", "*.flv", "*.webm",
    # Data dumps
    "*.sql",
    "*.db",
    "*.sqlite",
    "*.sqlite3",
    "*.dump",
    # Generated changelogs
    "CHANGELOG.md",
    "CHANGELOG.txt",
    "HISTORY.md",
    "HISTORY.txt",
]

IGNORED_EXTENSIONS = [
    ".lock",
    ".cache",
    ".pid",
    ".seed",
    ".coverage",
]


def _normalize(path: str) -> str:
    return path.replace("\\", "/").lower()


def _matches(path: str, pattern: str) -> bool:
    """Match a normalized path against one normalized pattern.

    Directory patterns match a whole path segment sequence, globs are tried
    against the file name and the full path, plain names match the file
    name or a path suffix.
    """
    if pattern.endswith("/"):
        return f"/{pattern}" in f"/{path}"
    name = path.rsplit("/", 1)[-1]
    if any(ch in pattern for ch in "*?["):
        return fnmatch.fnmatchcase(name, pattern) or fnmatch.fnmatchcase(path, pattern)
    return name == pattern or path == pattern or path.endswith(f"/{pattern}")


class FileFilter:
    def __init__(
        self,
        *,
        extra_patterns: Optional[Iterable[str]] = None,
        enabled: Optional[bool] = None,
    ) -> None:
        cfg = Config.get_diff_config()
        self.enabled = cfg["filter_enabled"] if enabled is None else enabled
        extra = list(extra_patterns) if extra_patterns is not None else cfg["extra_ignore_patterns"]
        self._patterns = [_normalize(p) for p in IGNORED_PATTERNS + extra]
        self._extensions = [e.lower() for e in IGNORED_EXTENSIONS]

    def should_ignore(self, path: Optional[str]) -> bool:
        if not self.enabled or not isinstance(path, str) or not path or path == DEV_NULL:
            return False
        norm = _normalize(path)
        for pattern in self._patterns:
            if _matches(norm, pattern):
                logger.debug(f"Ignoring {path} (pattern {pattern})")
                return True
        for ext in self._extensions:
            if norm.endswith(ext):
                logger.debug(f"Ignoring {path} (extension {ext})")
                return True
        return False

    def should_ignore_file(self, file_diff: FileDiff) -> bool:
        return self.should_ignore(file_diff.source_path) or self.should_ignore(file_diff.dest_path)

    def filter_diff(self, diff: CanonicalDiff) -> CanonicalDiff:
        """Return a new CanonicalDiff without ignored files."""
        if not self.enabled:
            return diff
        kept = [f for f in diff.files if not self.should_ignore_file(f)]
        dropped = len(diff.files) - len(kept)
        if dropped:
            logger.info(f"Filtered out {dropped} ignored files, {len(kept)} remaining")
        return CanonicalDiff(files=kept)
