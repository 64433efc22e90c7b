from __future__ import annotations

from difflib import unified_diff


def generate_patch(original: str, modified: str, filename: str) -> str:
    """Unified diff of one file, in the form ``git apply`` accepts."""

    lines = unified_diff(
        original.splitlines(keepends=True),
        modified.splitlines(keepends=True),
        fromfile=f"a/{filename}",
        tofile=f"b/{filename}",
    )
    return "".join(line if line.endswith("\n") else line + "\n\\ No newline at end of file\n" for line in lines)
