from __future__ import annotations

import re
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

FixType = Literal["add-attribute", "replace-attribute", "add-element", "convert-tag"]

_TAG_NAME = re.compile(r"^[A-Za-z][A-Za-z0-9-]*$")


class SignatureContext(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    landmark: str | None = None
    parent_component: str | None = Field(default=None, alias="parentComponent")
    surrounding_text: str | None = Field(default=None, alias="surroundingText")


class Signature(BaseModel):
    """Fingerprint of a rendered DOM element, captured at detection time."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    tag: str
    text: str | None = None
    classes: frozenset[str] = Field(default_factory=frozenset)
    attributes: dict[str, str] = Field(default_factory=dict)
    structure: tuple[str, ...] = ()
    context: SignatureContext | None = None

    @field_validator("tag")
    @classmethod
    def validate_tag(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError("tag must not be empty")
        return normalized

    @field_validator("attributes", mode="before")
    @classmethod
    def stringify_attributes(cls, value: Any) -> Any:
        if isinstance(value, dict):
            return {str(key): "" if item is None else str(item) for key, item in value.items()}
        return value


class LinePosition(BaseModel):
    line: int
    column: int = 0


class SourceLocation(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    source: str
    line: int
    column: int = 0
    closing_location: LinePosition | None = Field(default=None, alias="closingLocation")


class FixPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    attribute: str | None = None
    value: str | None = None
    html: str | None = None
    tag_name: str | None = Field(default=None, alias="tagName")
    attributes: dict[str, str] = Field(default_factory=dict)


class FixMetadata(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    context: Any = None
    signature: Signature | None = None
    reasoning: str | None = None
    source_location: SourceLocation | None = Field(default=None, alias="sourceLocation")


class Fix(BaseModel):
    """One accessibility edit to apply to a single element."""

    model_config = ConfigDict(populate_by_name=True)

    fix_type: FixType = Field(alias="fixType")
    selector: str = ""
    payload: FixPayload = Field(default_factory=FixPayload)
    metadata: FixMetadata = Field(default_factory=FixMetadata)

    @model_validator(mode="after")
    def validate_payload(self) -> Fix:
        payload = self.payload
        if self.fix_type in {"add-attribute", "replace-attribute"}:
            if not payload.attribute or payload.value is None:
                raise ValueError(f"{self.fix_type} requires payload.attribute and payload.value")
        elif self.fix_type == "convert-tag":
            if not payload.tag_name or not _TAG_NAME.match(payload.tag_name):
                raise ValueError("convert-tag requires a valid payload.tagName")
        elif self.fix_type == "add-element" and not payload.html:
            raise ValueError("add-element requires payload.html")
        return self

    @property
    def source_location(self) -> SourceLocation | None:
        return self.metadata.source_location

    def attribute_updates(self) -> list[tuple[str, str]]:
        if self.fix_type in {"add-attribute", "replace-attribute"}:
            return [(self.payload.attribute, self.payload.value)]
        if self.fix_type == "convert-tag":
            return list(self.payload.attributes.items())
        return []

    def identity(self) -> str:
        return self.model_dump_json(by_alias=True, exclude={"metadata": {"reasoning", "context"}})
