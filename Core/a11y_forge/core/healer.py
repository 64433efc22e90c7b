from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from a11y_forge.core.exceptions import HealingError
from a11y_forge.llm.parser import parse_code_response

log = logging.getLogger(__name__)

LANGUAGE_BY_SUFFIX = {
    ".vue": "vue",
    ".tsx": "tsx",
    ".jsx": "jsx",
    ".ts": "typescript",
    ".js": "javascript",
    ".html": "html",
}


class AutoHealer:
    """Hands a patch that no longer parses to the code-repair oracle.

    The healer performs no repair logic of its own; re-validation and the decision to
    keep or discard the result belong to the caller.
    """

    def __init__(self, repair_client) -> None:
        self.repair_client = repair_client

    @property
    def provider_name(self) -> str:
        return getattr(self.repair_client, "provider_name", "unknown")

    def heal(self, content: str, errors: list[str], file_path: str | Path) -> str:
        log.info("Attempting to heal %s with %d errors", file_path, len(errors))
        payload = self._build_payload(content=content, errors=errors, file_path=str(file_path))
        try:
            response = self.repair_client.repair_code(payload)
            healed = parse_code_response(response)
        except HealingError:
            raise
        except Exception as exc:  # noqa: BLE001 - provider failures surface as healing failures.
            raise HealingError(str(exc)) from exc
        return healed.rstrip("\n") + _trailing_newlines(content)

    @staticmethod
    def _build_payload(*, content: str, errors: list[str], file_path: str) -> dict[str, Any]:
        return {
            "file_path": file_path,
            "language": LANGUAGE_BY_SUFFIX.get(Path(file_path).suffix.lower(), "text"),
            "errors": list(errors),
            "content": content,
        }


def _trailing_newlines(content: str) -> str:
    return content[len(content.rstrip("\n")):]
