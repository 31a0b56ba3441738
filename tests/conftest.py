"""Shared diff payloads for the test suite."""

import pytest


@pytest.fixture
def unified_text() -> str:
    """Unified diff with one file, one hunk: one removal, two additions."""
    return "--- a/x.txt\n+++ b/x.txt\n@@ -1,1 +1,2 @@\n-old\n+new\n+extra\n"


@pytest.fixture
def hosted_payload() -> dict:
    """Hosted-API diff adding two lines to a new file."""
    return {
        "diffs": [
            {
                "destination": {"toString": "src/app.py"},
                "hunks": [
                    {
                        "sourceLine": 0,
                        "sourceSpan": 0,
                        "destinationLine": 1,
                        "destinationSpan": 2,
                        "segments": [
                            {"type": "ADDED", "lines": [{"line": "x"}, {"line": "y"}]},
                        ],
                    }
                ],
            }
        ]
    }


@pytest.fixture
def legacy_payload() -> dict:
    """Legacy diff with a single left/right line pair."""
    return {
        "values": [
            {
                "srcPath": {"toString": "lib/a.py"},
                "hunks": [{"oldLine": 3, "newLine": 3, "lines": [{"left": "a", "right": "b"}]}],
            }
        ]
    }
