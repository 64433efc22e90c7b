from __future__ import annotations

import json
import logging

from a11y_forge.core.metadata import Replacement
from a11y_forge.core.models import Fix
from a11y_forge.extract.jsx import (
    JSX_ELEMENT_TYPES,
    attribute_value_node,
    closing_element,
    find_attribute,
    opening_element,
)
from a11y_forge.patch.base import ReplacementSet, describe, unique_fixes
from a11y_forge.utils.treesitter import SourceText, iter_nodes

log = logging.getLogger(__name__)


def apply_jsx_fixes(source_text: str, fixes: list[Fix]) -> str:
    """Edits JSX/TSX through the syntax tree; untouched files come back unchanged."""

    source = SourceText(source_text)
    tree = source.parse("tsx")
    elements = [
        element
        for element in iter_nodes(tree.root_node, JSX_ELEMENT_TYPES)
        if opening_element(element) is not None and opening_element(element).child_by_field_name("name") is not None
    ]
    edits = ReplacementSet()

    for fix in unique_fixes(fixes):
        location = fix.source_location
        if location is None:
            log.warning("Skipping %s: JSX fixes need a resolved source location", describe(fix))
            continue
        element = _element_on_line(source, elements, location.line, location.column)
        if element is None:
            log.warning("Skipping %s: no JSX element starts on line %s", describe(fix), location.line)
            continue
        replacements = _plan(source, element, fix, edits)
        if replacements:
            edits.add_all(replacements, fix)

    if not edits:
        return source_text
    return source.splice(edits)


def _element_on_line(source: SourceText, elements: list, line: int, column: int):
    on_line = [element for element in elements if source.start(element).line == line]
    for element in on_line:
        if source.start(element).column == column:
            return element
    return on_line[0] if on_line else None


def _plan(source: SourceText, element, fix: Fix, edits: ReplacementSet) -> list[Replacement]:
    opening = opening_element(element)
    replacements: list[Replacement] = []

    if fix.fix_type == "convert-tag":
        new_name = fix.payload.tag_name
        name = opening.child_by_field_name("name")
        if name.type != "identifier":
            log.warning("Skipping %s: <%s> is not a plain tag", describe(fix), source.node_text(name))
            return []
        replacements.append(Replacement(name.start_byte, name.end_byte, new_name))
        closing = closing_element(element)
        closing_name = closing.child_by_field_name("name") if closing is not None else None
        if closing_name is not None and closing_name.type == "identifier":
            replacements.append(Replacement(closing_name.start_byte, closing_name.end_byte, new_name))

    for attribute, value in fix.attribute_updates():
        if not edits.claim_attribute(element.start_byte, attribute):
            log.warning("Skipping %s: %s is already set on this element in this pass", describe(fix), attribute)
            continue
        replacements.append(_set_attribute(source, opening, attribute, value))

    if fix.fix_type == "add-element":
        if element.type == "jsx_self_closing_element":
            log.warning("Skipping %s: self-closing elements cannot hold children", describe(fix))
            return []
        replacements.append(Replacement(opening.end_byte, opening.end_byte, fix.payload.html))
    return replacements


def _set_attribute(source: SourceText, opening, name: str, value: str) -> Replacement:
    literal = _literal(value)
    existing = find_attribute(source, opening, name)
    if existing is not None:
        value_node = attribute_value_node(existing)
        if value_node is None:
            return Replacement(existing.end_byte, existing.end_byte, f"={literal}")
        return Replacement(value_node.start_byte, value_node.end_byte, literal)
    anchor = [child for child in opening.named_children if child.type != "comment"][-1]
    return Replacement(anchor.end_byte, anchor.end_byte, f" {name}={literal}")


def _literal(value: str) -> str:
    if '"' in value or "\n" in value:
        return "{" + json.dumps(value, ensure_ascii=False) + "}"
    return f'"{value}"'
