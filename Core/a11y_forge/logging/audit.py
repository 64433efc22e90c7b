from __future__ import annotations

import json
from dataclasses import asdict
from pathlib import Path
from typing import Any

from a11y_forge.core.metadata import PatchAttempt


class PatchAuditLogger:
    """Persists one record per file patch pass."""

    def __init__(self, root: str | Path = "artifacts") -> None:
        self.root = Path(root)
        self.root.mkdir(parents=True, exist_ok=True)
        self.attempts_path = self.root / "patch_attempts.jsonl"

    def write(self, attempt: PatchAttempt) -> None:
        with self.attempts_path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(asdict(attempt)) + "\n")

    def read_attempts(self) -> list[dict[str, Any]]:
        if not self.attempts_path.exists():
            return []
        with self.attempts_path.open("r", encoding="utf-8") as handle:
            return [json.loads(line) for line in handle if line.strip()]
