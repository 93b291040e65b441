from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Literal, Mapping, Union

TokenKind = Literal[
    "tag",
    "attribute",
    "axis",
    "predicate",
    "operator",
    "literal",
    "wildcard",
    "namespace",
    "slash",
    "end",
]
MetadataValue = Union[str, int]

WILDCARD = "*"
DEFAULT_AXIS = "child"


@dataclass(frozen=True, slots=True)
class Token:
    kind: TokenKind
    text: str
    offset: int

    def is_open_bracket(self) -> bool:
        return self.kind == "predicate" and self.text == "["

    def is_close_bracket(self) -> bool:
        return self.kind == "predicate" and self.text == "]"


@dataclass(frozen=True, slots=True)
class AttributeCondition:
    name: str
    value: str
    operator: str = "="


@dataclass(frozen=True, slots=True)
class PositionCondition:
    index: int


Condition = Union[AttributeCondition, PositionCondition]


@dataclass(frozen=True, slots=True)
class Predicate:
    conditions: tuple[Condition, ...] = ()


@dataclass(frozen=True, slots=True)
class Step:
    node_test: str
    axis: str = DEFAULT_AXIS
    predicate: Predicate | None = None
    is_absolute: bool = False

    @property
    def is_wildcard(self) -> bool:
        return self.node_test == WILDCARD

    def conditions(self) -> tuple[Condition, ...]:
        if self.predicate is None:
            return ()
        return self.predicate.conditions


@dataclass(frozen=True, slots=True)
class Locator:
    uid: str
    metadata: Mapping[str, MetadataValue] = field(default_factory=dict)
    container_uid: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "metadata", MappingProxyType(dict(self.metadata)))

    @property
    def archetype(self) -> str:
        return str(self.metadata.get("archetype", ""))
