"""Metadata filter tree: leaf comparisons grouped by AND/OR composites."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Sequence, Union

from chunkstore.domain.exceptions import ValidationError


class FilterOperator(str, Enum):
    EQUAL = "=="
    NOT_EQUAL = "!="
    GREATER_THAN = ">"
    GREATER_THAN_OR_EQUAL = ">="
    LESS_THAN = "<"
    LESS_THAN_OR_EQUAL = "<="
    IN = "IN"
    NOT_IN = "NOT IN"
    LIKE = "LIKE"
    ILIKE = "ILIKE"


class FilterCondition(str, Enum):
    AND = "and"
    OR = "or"


@dataclass(frozen=True, slots=True)
class MetadataFilter:
    """``key <operator> value``.

    ``operator`` is either a :class:`FilterOperator` or a raw backend operator
    string that is emitted verbatim.
    """

    key: str
    value: Any
    operator: FilterOperator | str = FilterOperator.EQUAL


@dataclass(frozen=True, slots=True)
class MetadataFilters:
    filters: Sequence[FilterNode] = field(default_factory=tuple)
    condition: FilterCondition = FilterCondition.AND

    def __post_init__(self) -> None:
        object.__setattr__(self, "filters", tuple(self.filters))
        object.__setattr__(self, "condition", FilterCondition(self.condition))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> MetadataFilters:
        """Build a tree from nested plain dicts.

        Nodes carrying a ``filters`` key are composites, every other node is a
        leaf with ``key``/``value`` and an optional ``operator``.
        """
        children: list[FilterNode] = []
        for raw in data.get("filters") or ():
            if not isinstance(raw, Mapping):
                raise ValidationError(f"Filter node must be a mapping, got {type(raw).__name__}.")
            if "filters" in raw:
                children.append(cls.from_dict(raw))
            elif "key" in raw:
                children.append(
                    MetadataFilter(
                        key=raw["key"],
                        value=raw.get("value"),
                        operator=_parse_operator(raw.get("operator", FilterOperator.EQUAL)),
                    )
                )
            else:
                raise ValidationError("Filter node needs either 'filters' or 'key'.")
        condition = data.get("condition") or FilterCondition.AND
        if not isinstance(condition, FilterCondition):
            condition = str(condition).lower()
        try:
            return cls(filters=children, condition=FilterCondition(condition))
        except ValueError as exc:
            raise ValidationError(f"Unknown filter condition: {data.get('condition')!r}") from exc


FilterNode = Union[MetadataFilter, MetadataFilters]


def _parse_operator(raw: FilterOperator | str) -> FilterOperator | str:
    if isinstance(raw, FilterOperator):
        return raw
    text = str(raw).strip()
    try:
        return FilterOperator(text.upper() if text.isalpha() or " " in text else text)
    except ValueError:
        pass
    try:
        return FilterOperator[text.upper()]
    except KeyError:
        return text
