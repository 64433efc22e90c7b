from __future__ import annotations

import logging
from typing import Iterable, Iterator

from a11y_forge.core.metadata import Replacement
from a11y_forge.core.models import Fix

log = logging.getLogger(__name__)


def unique_fixes(fixes: Iterable[Fix]) -> list[Fix]:
    """Drops repeated fixes so that each edit lands at most once per pass."""

    seen: set[str] = set()
    unique: list[Fix] = []
    for fix in fixes:
        identity = fix.identity()
        if identity in seen:
            log.warning("Dropping duplicate %s fix for %r", fix.fix_type, fix.selector)
            continue
        seen.add(identity)
        unique.append(fix)
    return unique


def describe(fix: Fix) -> str:
    location = fix.source_location
    where = f"{location.line}:{location.column}" if location else fix.selector or "<no selector>"
    return f"{fix.fix_type} at {where}"


class ReplacementSet:
    """Byte-range edits collected for one patch pass; ranges never overlap."""

    def __init__(self) -> None:
        self._items: list[Replacement] = []
        self._attributes: set[tuple[int, str]] = set()

    def __iter__(self) -> Iterator[Replacement]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def claim_attribute(self, element_start: int, name: str) -> bool:
        key = (element_start, name.lower())
        if key in self._attributes:
            return False
        self._attributes.add(key)
        return True

    def add_all(self, replacements: list[Replacement], fix: Fix) -> bool:
        for replacement in replacements:
            for existing in self._items:
                if replacement.overlaps(existing):
                    log.warning("Skipping %s: it overlaps an edit already planned in this pass", describe(fix))
                    return False
        self._items.extend(replacements)
        return bool(replacements)
