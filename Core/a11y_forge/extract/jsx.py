from __future__ import annotations

import html

from a11y_forge.core.metadata import CandidateNode
from a11y_forge.utils.text import normalize_text, split_classes
from a11y_forge.utils.treesitter import SourceText, child_of_type, iter_nodes

JSX_ELEMENT_TYPES = {"jsx_element", "jsx_self_closing_element"}
MEMBER_TAG_TYPES = {"member_expression", "nested_identifier"}
PLACEHOLDER_TAG = "Component"


def opening_element(element):
    if element.type == "jsx_self_closing_element":
        return element
    return element.child_by_field_name("open_tag") or child_of_type(element, "jsx_opening_element")


def closing_element(element):
    if element.type == "jsx_self_closing_element":
        return None
    return element.child_by_field_name("close_tag") or child_of_type(element, "jsx_closing_element")


def tag_name(source: SourceText, opening) -> str | None:
    name = opening.child_by_field_name("name")
    if name is None:
        return None
    if name.type in MEMBER_TAG_TYPES:
        return PLACEHOLDER_TAG
    return source.node_text(name)


def jsx_attributes(opening) -> list:
    return [child for child in opening.named_children if child.type == "jsx_attribute"]


def attribute_name(source: SourceText, attribute) -> str:
    return source.node_text(attribute.named_children[0])


def attribute_value_node(attribute):
    named = attribute.named_children
    return named[1] if len(named) > 1 else None


def string_value(source: SourceText, node) -> str:
    return source.node_text(node)[1:-1]


def find_attribute(source: SourceText, opening, name: str):
    for attribute in jsx_attributes(opening):
        if attribute_name(source, attribute) == name:
            return attribute
    return None


def read_attributes(source: SourceText, opening) -> dict[str, str]:
    attributes: dict[str, str] = {}
    for attribute in jsx_attributes(opening):
        value = attribute_value_node(attribute)
        if value is None:
            attributes[attribute_name(source, attribute)] = ""
        elif value.type == "string":
            attributes[attribute_name(source, attribute)] = html.unescape(string_value(source, value))
    return attributes


def element_text(source: SourceText, element) -> str:
    if element.type == "jsx_self_closing_element":
        return ""
    parts: list[str] = []
    for child in element.named_children:
        if child.type == "jsx_text":
            parts.append(source.node_text(child).strip())
        elif child.type == "html_character_reference":
            parts.append(html.unescape(source.node_text(child)))
        elif child.type == "jsx_expression":
            literal = child.named_children[0] if child.named_children else None
            if literal is not None and literal.type == "string":
                parts.append(string_value(source, literal))
    return normalize_text(" ".join(part for part in parts if part))


def extract_jsx(source_text: str, file_path: str) -> list[CandidateNode]:
    source = SourceText(source_text)
    tree = source.parse("tsx")
    candidates: list[CandidateNode] = []
    for element in iter_nodes(tree.root_node, JSX_ELEMENT_TYPES):
        opening = opening_element(element)
        if opening is None:
            continue
        name = tag_name(source, opening)
        if name is None:
            continue
        attributes = read_attributes(source, opening)
        closing = closing_element(element)
        candidates.append(
            CandidateNode(
                tag=name,
                text=element_text(source, element),
                classes=split_classes(attributes.get("className") or attributes.get("class", "")),
                attributes=attributes,
                location=source.start(element),
                closing_location=source.start(closing) if closing is not None else None,
                file=file_path,
            )
        )
    return candidates
