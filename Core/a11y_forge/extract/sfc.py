"""Block structure of Vue single-file components.

A ``.vue`` file is a sequence of top-level blocks (``<template>``, ``<script>``,
``<script setup>``, ``<style>`` and custom blocks). Only the block boundaries are
parsed here; block content is handed to the grammar of the block's language.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from a11y_forge.core.metadata import Position
from a11y_forge.extract.html import HTML_ELEMENT_TYPES, close_tag, open_tag, read_attributes, tag_name_node
from a11y_forge.utils.treesitter import SourceText


@dataclass(slots=True)
class SfcBlock:
    type: str
    content: str
    content_offset: int
    content_start: Position
    attributes: dict[str, str] = field(default_factory=dict)

    @property
    def lang(self) -> str | None:
        return self.attributes.get("lang") or None

    @property
    def setup(self) -> bool:
        return "setup" in self.attributes


@dataclass(slots=True)
class SfcDescriptor:
    blocks: list[SfcBlock]

    @property
    def template(self) -> SfcBlock | None:
        for block in self.blocks:
            if block.type == "template":
                return block
        return None

    @property
    def scripts(self) -> list[SfcBlock]:
        return [block for block in self.blocks if block.type == "script"]


def parse_sfc(source_text: str) -> SfcDescriptor:
    source = SourceText(source_text)
    tree = source.parse("html")
    blocks: list[SfcBlock] = []
    for node in tree.root_node.children:
        if node.type not in HTML_ELEMENT_TYPES:
            continue
        tag = open_tag(node)
        if tag is None or tag.type == "self_closing_tag" or tag_name_node(tag) is None:
            continue
        end_tag = close_tag(node)
        content_start = tag.end_byte
        content_end = end_tag.start_byte if end_tag is not None else node.end_byte
        blocks.append(
            SfcBlock(
                type=source.node_text(tag_name_node(tag)).lower(),
                content=source.data[content_start:content_end].decode("utf-8", errors="replace"),
                content_offset=content_start,
                content_start=source.position(content_start),
                attributes=read_attributes(source, tag),
            )
        )
    return SfcDescriptor(blocks=blocks)
