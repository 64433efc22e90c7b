from __future__ import annotations

import re

from a11y_forge.core.exceptions import RepairResponseError

_OPENING_FENCE = re.compile(r"^```[\w+-]*[ \t]*\n")
_CLOSING_FENCE = re.compile(r"\n?```\s*$")


def parse_code_response(response: str) -> str:
    code = response.strip("\n")
    if not code.strip():
        raise RepairResponseError("Repair oracle returned an empty file")
    if code.lstrip().startswith("```"):
        code = _OPENING_FENCE.sub("", code.lstrip(), count=1)
        code = _CLOSING_FENCE.sub("", code, count=1)
    if not code.strip():
        raise RepairResponseError("Repair oracle returned an empty code block")
    return code
