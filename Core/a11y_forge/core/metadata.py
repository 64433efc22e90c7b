from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any


@dataclass(slots=True, frozen=True)
class Position:
    line: int
    column: int


@dataclass(slots=True)
class CandidateNode:
    tag: str
    text: str
    classes: list[str]
    attributes: dict[str, str]
    location: Position
    file: str
    closing_location: Position | None = None


@dataclass(slots=True)
class SearchResult:
    file: Path
    line: int
    column: int
    score: int
    node: CandidateNode


@dataclass(slots=True)
class Replacement:
    start: int
    end: int
    content: str

    def overlaps(self, other: Replacement) -> bool:
        return self.start < other.end and other.start < self.end


@dataclass(slots=True)
class ValidationResult:
    is_valid: bool
    errors: list[str] = field(default_factory=list)


@dataclass(slots=True)
class FileOutcome:
    file: Path
    status: str
    fixes: int = 0
    errors: list[str] = field(default_factory=list)
    healed: bool = False
    written: bool = False
    diff: str = ""


@dataclass(slots=True)
class PatchAttempt:
    file: str
    status: str
    fix_types: list[str]
    validation_errors: list[str]
    heal_provider: str
    healed: bool
    artifact_paths: dict[str, Any] = field(default_factory=dict)
