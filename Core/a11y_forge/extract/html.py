from __future__ import annotations

import html

from a11y_forge.core.metadata import CandidateNode, Position
from a11y_forge.utils.text import join_text_nodes, split_classes
from a11y_forge.utils.treesitter import SourceText, child_of_type, children_of_type, iter_nodes

HTML_ELEMENT_TYPES = {"element", "script_element", "style_element"}
SYNTHETIC_TAGS = {"html", "head", "body"}


def open_tag(element):
    return child_of_type(element, "start_tag", "self_closing_tag")


def close_tag(element):
    return child_of_type(element, "end_tag")


def tag_name_node(tag):
    return child_of_type(tag, "tag_name")


def attribute_name(source: SourceText, attribute) -> str:
    return source.node_text(child_of_type(attribute, "attribute_name"))


def attribute_value(source: SourceText, attribute) -> str:
    value_node = child_of_type(attribute, "attribute_value", "quoted_attribute_value")
    if value_node is None:
        return ""
    if value_node.type == "quoted_attribute_value":
        value_node = child_of_type(value_node, "attribute_value")
        if value_node is None:
            return ""
    return html.unescape(source.node_text(value_node))


def find_attribute(source: SourceText, tag, name: str):
    wanted = name.lower()
    for attribute in children_of_type(tag, "attribute"):
        if attribute_name(source, attribute).lower() == wanted:
            return attribute
    return None


def read_attributes(source: SourceText, tag, lowercase: bool = True) -> dict[str, str]:
    attributes: dict[str, str] = {}
    for attribute in children_of_type(tag, "attribute"):
        name = attribute_name(source, attribute)
        attributes[name.lower() if lowercase else name] = attribute_value(source, attribute)
    return attributes


def iter_elements(tree):
    return iter_nodes(tree.root_node, HTML_ELEMENT_TYPES)


def html_candidates(
    source: SourceText,
    tree,
    file_path: str,
    *,
    lowercase: bool = True,
    skip_tags: frozenset[str] | set[str] = frozenset(),
    line_offset: int = 0,
    column_offset: int = 0,
) -> list[CandidateNode]:
    """Build candidates from a tree-sitter HTML tree.

    ``line_offset`` and ``column_offset`` shift locations when ``source`` is a block
    cut out of a larger file; the column offset only applies to the block's first line.
    """

    candidates: list[CandidateNode] = []
    for element in iter_elements(tree):
        tag = open_tag(element)
        name_node = tag_name_node(tag) if tag is not None else None
        if name_node is None:
            continue
        tag_name = source.node_text(name_node)
        if lowercase:
            tag_name = tag_name.lower()
        if tag_name.lower() in skip_tags:
            continue
        attributes = read_attributes(source, tag, lowercase=lowercase)
        end_tag = close_tag(element)
        candidates.append(
            CandidateNode(
                tag=tag_name,
                text=join_text_nodes(source, iter_nodes(element, {"text", "entity"})),
                classes=split_classes(attributes.get("class", "")),
                attributes=attributes,
                location=shift_position(source.start(element), line_offset, column_offset),
                closing_location=(
                    shift_position(source.start(end_tag), line_offset, column_offset) if end_tag is not None else None
                ),
                file=file_path,
            )
        )
    return candidates


def extract_html(source_text: str, file_path: str) -> list[CandidateNode]:
    source = SourceText(source_text)
    return html_candidates(source, source.parse("html"), file_path)


def shift_position(position: Position, line_offset: int, column_offset: int) -> Position:
    column = position.column + column_offset if position.line == 1 else position.column
    return Position(line=position.line + line_offset, column=column)
