"""Line/column patching for Vue templates.

Template ASTs cannot be written back faithfully, so fixes are applied to the raw
lines of the component. Every edit, closing-tag renames included, is planned
against the original lines and then spliced in descending (line, column) order,
so no planned position is shifted by an earlier splice.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from a11y_forge.core.models import Fix
from a11y_forge.patch.base import describe, unique_fixes
from a11y_forge.utils.text import escape_attribute

log = logging.getLogger(__name__)

_TAG_NAME = re.compile(r"[A-Za-z0-9_.-]+")


@dataclass(slots=True)
class _OpenTag:
    segments: list[tuple[int, int, int]]
    insert_line: int
    insert_column: int
    self_closing: bool


@dataclass(slots=True)
class _Edit:
    line: int
    start: int
    end: int
    text: str
    claim: tuple[int, int, str] | None = None

    def overlaps(self, other: _Edit) -> bool:
        return self.line == other.line and self.start < other.end and other.start < self.end


class _EditPlan:
    """Line edits for one pass, all in original coordinates; spans never overlap."""

    def __init__(self) -> None:
        self._edits: list[_Edit] = []
        self._claims: set[tuple[int, int, str]] = set()

    def __len__(self) -> int:
        return len(self._edits)

    def add_all(self, edits: list[_Edit], fix: Fix) -> bool:
        accepted: list[_Edit] = []
        claims: set[tuple[int, int, str]] = set()
        for edit in edits:
            if edit.claim is not None and (edit.claim in self._claims or edit.claim in claims):
                log.warning("Skipping %s: %s is already being written on this element", describe(fix), edit.claim[2])
                continue
            if any(edit.overlaps(existing) for existing in (*self._edits, *accepted)):
                log.warning("Skipping %s: it overlaps an edit already planned in this pass", describe(fix))
                return False
            accepted.append(edit)
            if edit.claim is not None:
                claims.add(edit.claim)
        self._edits.extend(accepted)
        self._claims.update(claims)
        return bool(accepted)

    def apply(self, lines: list[str]) -> list[str]:
        patched = list(lines)
        ordered = sorted(
            enumerate(self._edits),
            key=lambda item: (item[1].line, item[1].start, item[1].end, item[0]),
            reverse=True,
        )
        for _, edit in ordered:
            line = patched[edit.line]
            patched[edit.line] = line[:edit.start] + edit.text + line[edit.end:]
        return patched


def apply_vue_fixes(source_text: str, fixes: list[Fix]) -> str:
    lines = source_text.split("\n")
    plan = _EditPlan()
    for fix in unique_fixes(fixes):
        location = fix.source_location
        if location is None:
            log.warning("Skipping %s: Vue fixes need a resolved source location", describe(fix))
            continue
        if not 0 <= location.line - 1 < len(lines):
            log.warning("Skipping %s: line is outside the file", describe(fix))
            continue
        edits = _plan_fix(lines, fix)
        if edits:
            plan.add_all(edits, fix)
    if not plan:
        return source_text
    return "\n".join(plan.apply(lines))


def _plan_fix(lines: list[str], fix: Fix) -> list[_Edit]:
    edits: list[_Edit] = []
    if fix.fix_type == "convert-tag":
        renames = _rename_edits(lines, fix)
        if renames is None:
            return []
        edits.extend(renames)
    for name, value in fix.attribute_updates():
        edit = _attribute_edit(lines, fix, name, value, overwrite=fix.fix_type != "add-attribute")
        if edit is not None:
            edits.append(edit)
    if fix.fix_type == "add-element":
        edit = _element_edit(lines, fix)
        if edit is not None:
            edits.append(edit)
    return edits


def _rename_edits(lines: list[str], fix: Fix) -> list[_Edit] | None:
    location = fix.source_location
    new_name = fix.payload.tag_name
    index, column = location.line - 1, location.column
    opening_name = _name_after(lines[index], column, "<")
    if opening_name is None:
        log.warning("Skipping %s: column %s does not point at '<'", describe(fix), column)
        return None
    edits = [_Edit(index, *opening_name, new_name)]

    closing = location.closing_location
    if closing is not None:
        closing_index = closing.line - 1
        closing_name = None
        if 0 <= closing_index < len(lines):
            closing_name = _name_after(lines[closing_index], closing.column, "</")
        if closing_name is None:
            log.warning("Skipping %s: closing tag moved from %s:%s", describe(fix), closing.line, closing.column)
            return None
        edits.append(_Edit(closing_index, *closing_name, new_name))
    return edits


def _name_after(line: str, column: int, prefix: str) -> tuple[int, int] | None:
    if column < 0 or line[column:column + len(prefix)] != prefix:
        return None
    match = _TAG_NAME.match(line, column + len(prefix))
    if match is None:
        return None
    return match.start(), match.end()


def _attribute_edit(lines: list[str], fix: Fix, name: str, value: str, overwrite: bool) -> _Edit | None:
    location = fix.source_location
    index = location.line - 1
    tag = _scan_open_tag(lines, index, location.column)
    if tag is None:
        tag = _line_fallback(lines[index], index)
    if tag is None:
        log.warning("Skipping %s: no opening tag end found on line %s", describe(fix), location.line)
        return None
    claim = (tag.insert_line, tag.insert_column, name.lower())

    static = _static_attribute(name)
    for line_index, start, end in tag.segments:
        match = static.search(lines[line_index], start, end)
        if match is None:
            continue
        if not overwrite:
            return None
        group = 1 if match.group(1) is not None else 2
        quote = '"' if group == 1 else "'"
        return _Edit(line_index, match.start(group), match.end(group), escape_attribute(value, quote), claim)

    present = _any_attribute(name)
    if any(present.search(lines[line_index], start, end) for line_index, start, end in tag.segments):
        if overwrite:
            log.warning("Skipping %s: %s is bound dynamically", describe(fix), name)
        return None

    rendered = f'{name}="{escape_attribute(value)}"'
    line = lines[tag.insert_line]
    position = tag.insert_column
    if tag.self_closing and position > 0 and line[position - 1].isspace():
        return _Edit(tag.insert_line, position, position, f"{rendered} ", claim)
    return _Edit(tag.insert_line, position, position, f" {rendered}", claim)


def _element_edit(lines: list[str], fix: Fix) -> _Edit | None:
    location = fix.source_location
    tag = _scan_open_tag(lines, location.line - 1, location.column)
    if tag is None or tag.self_closing:
        log.warning("Skipping %s: no element body to insert into", describe(fix))
        return None
    position = tag.insert_column + 1
    return _Edit(tag.insert_line, position, position, fix.payload.html)


def _scan_open_tag(lines: list[str], index: int, column: int) -> _OpenTag | None:
    """Walks forward from the '<' at (index, column) to the end of the opening tag."""

    if lines[index][column:column + 1] != "<":
        return None
    quote: str | None = None
    segments: list[tuple[int, int, int]] = []
    line_index, start, position = index, column, column + 1
    while line_index < len(lines):
        line = lines[line_index]
        while position < len(line):
            char = line[position]
            if quote:
                if char == quote:
                    quote = None
            elif char in "\"'":
                quote = char
            elif char == "<":
                return None
            elif char == ">":
                segments.append((line_index, start, position + 1))
                self_closing = position > 0 and line[position - 1] == "/"
                insert = position - 1 if self_closing else position
                return _OpenTag(segments, line_index, insert, self_closing)
            position += 1
        segments.append((line_index, start, len(line)))
        line_index, start, position = line_index + 1, 0, 0
    return None


def _line_fallback(line: str, index: int) -> _OpenTag | None:
    """Last '>' (or '/>') of the line, when the column no longer points at the tag."""

    last_open = line.rfind("<")
    if last_open == -1 or line.startswith("</", last_open):
        return None
    self_closing = line.rfind("/>")
    if self_closing > last_open:
        return _OpenTag([(index, 0, len(line))], index, self_closing, True)
    position = len(line)
    while True:
        position = line.rfind(">", 0, position)
        if position <= last_open:
            return None
        if line[position - 1] != "=":
            return _OpenTag([(index, 0, len(line))], index, position, False)


def _static_attribute(name: str) -> re.Pattern:
    return re.compile(rf"(?<![\w:.@</-]){re.escape(name)}\s*=\s*(?:\"([^\"]*)\"|'([^']*)')")


def _any_attribute(name: str) -> re.Pattern:
    return re.compile(rf"(?<![\w:.@</-])(?:v-bind:|:)?{re.escape(name)}(?=[\s=/>]|$)")
