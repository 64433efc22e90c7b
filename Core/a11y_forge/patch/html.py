from __future__ import annotations

import logging

from bs4 import BeautifulSoup
from soupsieve import SelectorSyntaxError

from a11y_forge.core.metadata import Position, Replacement
from a11y_forge.core.models import Fix
from a11y_forge.extract.html import close_tag, find_attribute, iter_elements, open_tag, tag_name_node
from a11y_forge.patch.base import ReplacementSet, describe, unique_fixes
from a11y_forge.utils.text import escape_attribute
from a11y_forge.utils.treesitter import SourceText, child_of_type

log = logging.getLogger(__name__)


class _SelectorIndex:
    """Resolves CSS selectors to source positions for fixes without a resolved location."""

    def __init__(self, source_text: str) -> None:
        self.source_text = source_text
        self._soup: BeautifulSoup | None = None

    def position(self, selector: str) -> Position | None:
        if self._soup is None:
            self._soup = BeautifulSoup(self.source_text, "html.parser")
        try:
            tag = self._soup.select_one(selector)
        except SelectorSyntaxError as exc:
            log.warning("Invalid selector %r: %s", selector, exc)
            return None
        if tag is None or tag.sourceline is None:
            return None
        return Position(line=tag.sourceline, column=tag.sourcepos)


def apply_html_fixes(source_text: str, fixes: list[Fix]) -> str:
    """Splices fixes into static HTML without re-serializing the document."""

    source = SourceText(source_text)
    tree = source.parse("html")
    elements = [element for element in iter_elements(tree) if _opening(element) is not None]
    selectors = _SelectorIndex(source_text)
    edits = ReplacementSet()

    for fix in unique_fixes(fixes):
        position = _target_position(fix, selectors)
        if position is None:
            log.warning("Skipping %s: no source location or matching selector", describe(fix))
            continue
        element = _element_at(source, elements, position)
        if element is None:
            log.warning("Skipping %s: no element starts at line %s", describe(fix), position.line)
            continue
        replacements = _plan(source, element, fix, edits)
        if replacements is not None:
            edits.add_all(replacements, fix)

    if not edits:
        return source_text
    return source.splice(edits)


def _opening(element):
    tag = open_tag(element)
    if tag is None or tag_name_node(tag) is None:
        return None
    return tag


def _target_position(fix: Fix, selectors: _SelectorIndex) -> Position | None:
    location = fix.source_location
    if location is not None:
        return Position(line=location.line, column=location.column)
    if fix.selector:
        return selectors.position(fix.selector)
    return None


def _element_at(source: SourceText, elements: list, position: Position):
    on_line = [element for element in elements if source.start(element).line == position.line]
    for element in on_line:
        if source.start(element).column == position.column:
            return element
    return on_line[0] if on_line else None


def _plan(source: SourceText, element, fix: Fix, edits: ReplacementSet) -> list[Replacement] | None:
    tag = _opening(element)
    if source.data[tag.end_byte - 1:tag.end_byte] != b">":
        log.warning("Skipping %s: opening tag is not terminated", describe(fix))
        return None
    replacements: list[Replacement] = []

    if fix.fix_type == "convert-tag":
        new_name = fix.payload.tag_name
        name_node = tag_name_node(tag)
        replacements.append(Replacement(name_node.start_byte, name_node.end_byte, new_name))
        end_tag = close_tag(element)
        if end_tag is not None and tag_name_node(end_tag) is not None:
            end_name = tag_name_node(end_tag)
            replacements.append(Replacement(end_name.start_byte, end_name.end_byte, new_name))

    for name, value in fix.attribute_updates():
        if not edits.claim_attribute(tag.start_byte, name):
            log.warning("Skipping %s: %s is already set on this element in this pass", describe(fix), name)
            continue
        replacements.append(_set_attribute(source, tag, name, value))

    if fix.fix_type == "add-element":
        if tag.type == "self_closing_tag" or close_tag(element) is None:
            log.warning("Skipping %s: <%s> cannot hold children", describe(fix), source.node_text(tag_name_node(tag)))
            return None
        replacements.append(Replacement(tag.end_byte, tag.end_byte, fix.payload.html))
    return replacements


def _set_attribute(source: SourceText, tag, name: str, value: str) -> Replacement:
    existing = find_attribute(source, tag, name)
    if existing is None:
        return _insert_attribute(source, tag, name, value)

    value_node = child_of_type(existing, "attribute_value", "quoted_attribute_value")
    if value_node is None:
        return Replacement(existing.start_byte, existing.end_byte, f'{name}="{escape_attribute(value)}"')
    if value_node.type == "quoted_attribute_value":
        quote = source.node_text(value_node)[0]
        inner = child_of_type(value_node, "attribute_value")
        if inner is not None:
            return Replacement(inner.start_byte, inner.end_byte, escape_attribute(value, quote))
    return Replacement(value_node.start_byte, value_node.end_byte, f'"{escape_attribute(value)}"')


def _insert_attribute(source: SourceText, tag, name: str, value: str) -> Replacement:
    rendered = f'{name}="{escape_attribute(value)}"'
    position = tag.end_byte - 1
    if tag.type == "self_closing_tag" or source.data[position - 1:position] == b"/":
        position -= 1
        if source.data[position - 1:position].isspace():
            return Replacement(position, position, f"{rendered} ")
    return Replacement(position, position, f" {rendered}")
