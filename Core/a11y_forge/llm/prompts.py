from __future__ import annotations

from typing import Any

SYSTEM_PROMPT = """You repair front-end source files that no longer parse after an automated accessibility edit.
Return the complete corrected file and nothing else.
Rules:
1. Fix only the reported syntax errors; keep every accessibility attribute and tag change that was applied.
2. Do not reformat, reorder, or rename anything that is not part of an error.
3. Do not add explanations, comments, quotes, or markdown code fences."""


def build_user_prompt(payload: dict[str, Any]) -> str:
    """Formats a deterministic user payload for the model."""

    errors = "\n".join(payload.get("errors", []))
    return (
        f"File: {payload.get('file_path', '')}\n"
        f"Language: {payload.get('language', '')}\n"
        f"Errors:\n{errors}\n\n"
        f"Code:\n{payload.get('content', '')}"
    )
