from __future__ import annotations

from pathlib import Path
from typing import Any

from a11y_forge.core.metadata import ValidationResult
from a11y_forge.core.models import Signature
from a11y_forge.core.validator import SourceValidator


def make_signature(**fields: Any) -> Signature:
    return Signature.model_validate(fields)


class ScriptedRepairClient:
    """Stands in for the code-repair oracle, replaying canned replies."""

    provider_name = "scripted"

    def __init__(self, *replies: str) -> None:
        self.replies = list(replies)
        self.payloads: list[dict[str, Any]] = []

    def repair_code(self, payload: dict[str, Any]) -> str:
        self.payloads.append(payload)
        if not self.replies:
            raise RuntimeError("no scripted reply left")
        return self.replies.pop(0)


class CountingValidator(SourceValidator):
    def __init__(self) -> None:
        self.calls: list[str] = []

    def validate(self, file_path: str | Path, content: str) -> ValidationResult:
        self.calls.append(content)
        return super().validate(file_path, content)
