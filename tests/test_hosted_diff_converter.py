"""Unit tests for hosted-API diff conversion."""

import pytest

from review_diff.diff_models import DiffLineKind
from review_diff.diff_processor import DiffShape, HostedFormatStrategy
from review_diff.file_filter import FileFilter
from review_diff.hosted_diff_converter import convert_hosted_diff, synthesize_unified_diff


def _hunk_body(text: str) -> list:
    return [line for line in text.splitlines() if not line.startswith(("---", "+++", "@@"))]


class TestSynthesizeUnifiedDiff:
    """Tests for synthesize_unified_diff."""

    def test_added_segment_becomes_plus_lines(self, hosted_payload: dict) -> None:
        """Test the single ADDED segment example."""
        text = synthesize_unified_diff(hosted_payload)

        assert text == "--- /dev/null\n+++ src/app.py\n@@ -0,0 +1,2 @@\n+x\n+y\n"
        assert [line for line in _hunk_body(text) if line.startswith("+")] == ["+x", "+y"]

    def test_line_counts_are_conserved_per_segment_type(self) -> None:
        """Test that each segment line is emitted exactly once with its type's prefix."""
        payload = {
            "diffs": [
                {
                    "source": {"toString": "lib/mod.py"},
                    "destination": {"toString": "lib/mod.py"},
                    "hunks": [
                        {
                            "sourceLine": 10,
                            "sourceSpan": 4,
                            "destinationLine": 10,
                            "destinationSpan": 3,
                            "segments": [
                                {"type": "CONTEXT", "lines": [{"line": "a"}]},
                                {"type": "REMOVED", "lines": [{"line": "b"}, {"line": "c"}]},
                                {"type": "ADDED", "lines": [{"line": "d"}]},
                                {"type": "CONTEXT", "lines": [{"line": "e"}]},
                            ],
                        }
                    ],
                }
            ]
        }

        body = _hunk_body(synthesize_unified_diff(payload))

        assert body == [" a", "-b", "-c", "+d", " e"]
        assert sum(1 for line in body if line.startswith("-")) == 2
        assert sum(1 for line in body if line.startswith("+")) == 1
        assert sum(1 for line in body if line.startswith(" ")) == 2

    def test_missing_or_unknown_segment_type_is_context(self) -> None:
        """Test that the segment type alone decides the prefix."""
        payload = {
            "diffs": [
                {
                    "source": "f.txt",
                    "destination": "f.txt",
                    "hunks": [
                        {
                            "sourceLine": 1,
                            "sourceSpan": 2,
                            "destinationLine": 1,
                            "destinationSpan": 2,
                            "segments": [
                                {"lines": [{"line": "+looks added"}]},
                                {"type": "???", "lines": ["plain"]},
                            ],
                        }
                    ],
                }
            ]
        }

        body = _hunk_body(synthesize_unified_diff(payload))

        assert body == [" +looks added", " plain"]

    def test_hunk_context_is_appended_to_header(self) -> None:
        """Test that the hosted hunk context becomes the section header."""
        payload = {
            "diffs": [
                {
                    "source": {"toString": "a.py"},
                    "destination": {"toString": "a.py"},
                    "hunks": [
                        {
                            "context": "class Foo:",
                            "sourceLine": 1,
                            "sourceSpan": 1,
                            "destinationLine": 1,
                            "destinationSpan": 1,
                            "segments": [{"type": "CONTEXT", "lines": [{"line": "x"}]}],
                        }
                    ],
                }
            ]
        }

        assert "@@ -1,1 +1,1 @@ class Foo:\n" in synthesize_unified_diff(payload)

    @pytest.mark.parametrize(
        "payload",
        [
            None,
            "text",
            {},
            {"diffs": "nope"},
            {"diffs": [{"source": {"toString": "a"}}]},
            {"diffs": [{"source": {"toString": "a"}, "hunks": [{"sourceLine": 1}]}]},
            {"diffs": [{"source": {"toString": "a"}, "hunks": [{"segments": [{"type": "ADDED"}]}]}]},
            {"diffs": [42, {"hunks": "x"}]},
        ],
    )
    def test_missing_levels_degrade_to_empty_text(self, payload) -> None:
        """Test that absent diffs/hunks/segments/lines emit nothing instead of raising."""
        assert synthesize_unified_diff(payload) == ""


class TestConvertHostedDiff:
    """Tests for convert_hosted_diff and the hosted strategy."""

    def test_round_trips_into_canonical_model(self, hosted_payload: dict) -> None:
        """Test that the synthesized text is parsed into the canonical model."""
        diff = convert_hosted_diff(hosted_payload)

        assert len(diff.files) == 1
        assert diff.files[0].source_path == "/dev/null"
        assert diff.files[0].dest_path == "src/app.py"
        hunk = diff.files[0].hunks[0]
        assert [(line.kind, line.text) for line in hunk.lines] == [
            (DiffLineKind.ADDED, "x"),
            (DiffLineKind.ADDED, "y"),
        ]

    def test_strategy_reports_changes(self, hosted_payload: dict) -> None:
        """Test that the hosted strategy commits when lines were produced."""
        result = HostedFormatStrategy(FileFilter()).try_normalize(hosted_payload, DiffShape.HOSTED)

        assert result is not None
        assert result.has_changes is True
        assert result.stats.added_lines == 2
        assert "+x\n+y\n" in result.markdown

    def test_empty_segments_report_no_changes(self) -> None:
        """Test that hunks whose segments are all empty produce has_changes=False."""
        payload = {
            "diffs": [
                {
                    "source": {"toString": "a.py"},
                    "destination": {"toString": "a.py"},
                    "hunks": [
                        {"sourceLine": 1, "sourceSpan": 1, "destinationLine": 1, "destinationSpan": 1, "segments": []},
                    ],
                }
            ]
        }

        result = HostedFormatStrategy(FileFilter()).try_normalize(payload, DiffShape.HOSTED)

        assert result is not None
        assert result.has_changes is False
        assert convert_hosted_diff(payload).files == []

    def test_strategy_not_applicable_to_other_shapes(self, hosted_payload: dict) -> None:
        """Test that the strategy declines payloads of another shape."""
        strategy = HostedFormatStrategy(FileFilter())

        assert strategy.try_normalize(hosted_payload, DiffShape.LEGACY) is None

    def test_omitted_spans_are_kept_as_none(self) -> None:
        """Test that a hunk without spans still parses and keeps only its starts."""
        payload = {
            "diffs": [
                {
                    "destination": {"toString": "src/app.py"},
                    "hunks": [
                        {
                            "sourceLine": 1,
                            "destinationLine": 1,
                            "segments": [{"type": "ADDED", "lines": [{"line": "x"}, {"line": "y"}]}],
                        }
                    ],
                }
            ]
        }

        hunk = convert_hosted_diff(payload).files[0].hunks[0]

        assert (hunk.source_start, hunk.source_span, hunk.dest_start, hunk.dest_span) == (1, None, 1, None)
        assert [line.text for line in hunk.lines] == ["x", "y"]

    def test_misreported_spans_do_not_swallow_next_file(self) -> None:
        """Test that overstated spans keep the payload values and both files."""
        payload = {
            "diffs": [
                {
                    "source": {"toString": "a.py"},
                    "destination": {"toString": "a.py"},
                    "hunks": [
                        {
                            "sourceLine": 1,
                            "sourceSpan": 5,
                            "destinationLine": 1,
                            "destinationSpan": 6,
                            "segments": [{"type": "ADDED", "lines": [{"line": "x"}]}],
                        }
                    ],
                },
                {
                    "source": {"toString": "b.py"},
                    "destination": {"toString": "b.py"},
                    "hunks": [
                        {
                            "sourceLine": 1,
                            "sourceSpan": 1,
                            "destinationLine": 1,
                            "destinationSpan": 1,
                            "segments": [{"type": "REMOVED", "lines": [{"line": "a"}, {"line": "b"}]}],
                        }
                    ],
                },
            ]
        }

        diff = convert_hosted_diff(payload)

        assert [f.dest_path for f in diff.files] == ["a.py", "b.py"]
        first, second = diff.files[0].hunks[0], diff.files[1].hunks[0]
        assert (first.source_start, first.source_span, first.dest_start, first.dest_span) == (1, 5, 1, 6)
        assert [line.text for line in first.lines] == ["x"]
        assert second.source_span == 1
        assert [(line.kind, line.text) for line in second.lines] == [
            (DiffLineKind.REMOVED, "a"),
            (DiffLineKind.REMOVED, "b"),
        ]

    def test_header_counts_follow_emitted_lines(self) -> None:
        """Test that the synthesized header counts the lines written."""
        payload = {
            "diffs": [
                {
                    "source": "f.py",
                    "destination": "f.py",
                    "hunks": [
                        {
                            "sourceLine": 7,
                            "sourceSpan": 40,
                            "destinationLine": 7,
                            "segments": [
                                {"type": "CONTEXT", "lines": ["a"]},
                                {"type": "REMOVED", "lines": ["b"]},
                                {"type": "ADDED", "lines": ["c", "d"]},
                            ],
                        }
                    ],
                }
            ]
        }

        assert "@@ -7,2 +7,3 @@\n" in synthesize_unified_diff(payload)

    def test_multiline_segment_entry_is_split(self) -> None:
        """Test that embedded newlines become separate lines of the same kind."""
        payload = {
            "diffs": [
                {
                    "source": "f.py",
                    "destination": "f.py",
                    "hunks": [{"sourceLine": 1, "destinationLine": 1, "segments": [{"type": "ADDED", "lines": ["one\ntwo\n"]}]}],
                }
            ]
        }

        lines = convert_hosted_diff(payload).files[0].hunks[0].lines

        assert [(line.kind, line.text) for line in lines] == [
            (DiffLineKind.ADDED, "one"),
            (DiffLineKind.ADDED, "two"),
        ]
