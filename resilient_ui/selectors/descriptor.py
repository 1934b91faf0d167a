# resilient_ui/selectors/descriptor.py
from __future__ import annotations

"""Element descriptors
----------------------
One candidate way to find an element: a kind plus a payload. Callers keep an
ordered sequence of descriptors as a fallback chain, most reliable first.
"""

from enum import Enum
from typing import Any, Iterable, Mapping, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class DescriptorKind(str, Enum):
    structural = "structural"  # CSS-like
    pathed = "pathed"          # XPath-like
    textual = "textual"        # visible text


# Spelling used by recorded locator files
_KIND_ALIASES = {
    "css": DescriptorKind.structural,
    "xpath": DescriptorKind.pathed,
    "text": DescriptorKind.textual,
}


class ElementDescriptor(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    kind: DescriptorKind = Field(default=DescriptorKind.structural, alias="type")
    payload: str = Field(..., alias="value", description="Selector string for the given kind")

    @field_validator("kind", mode="before")
    @classmethod
    def _normalize_kind(cls, v: Any) -> Any:
        if isinstance(v, str):
            key = v.strip().lower()
            return _KIND_ALIASES.get(key, key)
        return v

    @field_validator("payload")
    @classmethod
    def _non_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("descriptor payload cannot be empty")
        return v

    def describe(self) -> str:
        return f"{self.kind.value}={self.payload}"

    def to_query(self, scope: Any) -> Any:
        """
        Translate into a Playwright Locator on `scope` (Page, Frame or Locator).
        Adding a kind means one enum member plus one branch here.
        """
        if self.kind == DescriptorKind.structural:
            return scope.locator(self.payload)
        if self.kind == DescriptorKind.pathed:
            return scope.locator(f"xpath={self.payload}")
        if self.kind == DescriptorKind.textual:
            return scope.get_by_text(self.payload, exact=False)
        raise ValueError(f"Unsupported descriptor kind: {self.kind!r}")


def css(value: str) -> ElementDescriptor:
    return ElementDescriptor(kind=DescriptorKind.structural, payload=value)


def xpath(value: str) -> ElementDescriptor:
    return ElementDescriptor(kind=DescriptorKind.pathed, payload=value)


def text(value: str) -> ElementDescriptor:
    return ElementDescriptor(kind=DescriptorKind.textual, payload=value)


DescriptorLike = Union[ElementDescriptor, Mapping[str, Any], str]


def _coerce_one(item: DescriptorLike) -> ElementDescriptor:
    if isinstance(item, ElementDescriptor):
        return item
    if isinstance(item, str):
        return css(item)
    if isinstance(item, Mapping):
        return ElementDescriptor.model_validate(dict(item))
    raise TypeError(f"Cannot build an ElementDescriptor from {type(item).__name__}")


def as_descriptors(value: Union[DescriptorLike, Iterable[DescriptorLike]]) -> tuple[ElementDescriptor, ...]:
    """
    Coerce a single descriptor, mapping, bare CSS string, or a sequence of
    those into an ordered tuple. Raises ValueError when nothing remains.
    """
    if isinstance(value, (ElementDescriptor, str, Mapping)):
        items = [value]
    else:
        items = list(value)
    out = tuple(_coerce_one(i) for i in items)
    if not out:
        raise ValueError("At least one element descriptor is required")
    return out


__all__ = [
    "DescriptorKind",
    "ElementDescriptor",
    "DescriptorLike",
    "css",
    "xpath",
    "text",
    "as_descriptors",
]
