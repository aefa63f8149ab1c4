"""Lower a metadata filter tree into a SQL predicate string."""
from __future__ import annotations

import numbers
import re
from typing import Any

from chunkstore.domain.exceptions import ValidationError
from chunkstore.domain.filters import (
    FilterNode,
    FilterOperator,
    MetadataFilter,
    MetadataFilters,
)
from chunkstore.infra.search.sql_text import IDENTIFIER_RE, quote_literal, render_value

METADATA_PREFIX = "metadata."

_NULL_OPERATORS = {
    FilterOperator.EQUAL: "IS",
    FilterOperator.NOT_EQUAL: "IS NOT",
}

# IN / NOT IN over an empty list: PostgreSQL rejects "IN ()".
_EMPTY_MEMBERSHIP = {
    "IN": "FALSE",
    "NOT IN": "TRUE",
}

_KEYWORD_OPERATOR_RE = re.compile(r"^(NOT )?(I?LIKE|IN)$", re.IGNORECASE)
_SYMBOL_OPERATOR_RE = re.compile(r"^[+\-*/<>=~!@#%^&|`?]{1,63}$")


def compile_filters(node: FilterNode | None) -> str:
    """Return the predicate for ``node``, or ``""`` when it has no leaves."""
    if node is None:
        return ""
    text, _ = _compile(node)
    return text


def _compile(node: FilterNode) -> tuple[str, bool]:
    # Second element: True when the text joins several terms and needs
    # parentheses before it can be nested.
    if isinstance(node, MetadataFilter):
        return _compile_leaf(node), False
    if isinstance(node, MetadataFilters):
        parts = [part for part in (_compile(child) for child in node.filters) if part[0]]
        if not parts:
            return "", False
        if len(parts) == 1:
            return parts[0]
        joiner = f" {node.condition.value.upper()} "
        return joiner.join(f"({text})" if compound else text for text, compound in parts), True
    raise TypeError(f"Unknown filter node: {type(node).__name__}")


def _compile_leaf(leaf: MetadataFilter) -> str:
    column = _render_key(leaf.key, leaf.value)
    if leaf.value is None and leaf.operator in _NULL_OPERATORS:
        return f"{column} {_NULL_OPERATORS[leaf.operator]} NULL"
    operator = _render_operator(leaf.operator)
    value = leaf.value
    if operator in _EMPTY_MEMBERSHIP:
        if not isinstance(value, (list, tuple, set, frozenset)):
            value = (value,)
        elif not value:
            return _EMPTY_MEMBERSHIP[operator]
    return f"{column} {operator} {render_value(value)}"


def _render_operator(operator: FilterOperator | str) -> str:
    if operator == FilterOperator.EQUAL:
        return "="
    if isinstance(operator, FilterOperator):
        return operator.value
    text = " ".join(str(operator).split())
    if _KEYWORD_OPERATOR_RE.match(text):
        return text.upper()
    # "--" and "/*" would open a comment; PostgreSQL forbids them in operator names.
    if _SYMBOL_OPERATOR_RE.match(text) and "--" not in text and "/*" not in text:
        return text
    raise ValidationError(f"Unsupported filter operator: {str(operator)!r}")


def _render_key(key: str, value: Any) -> str:
    if key.startswith(METADATA_PREFIX):
        name = key[len(METADATA_PREFIX):]
        if not IDENTIFIER_RE.match(name):
            raise ValidationError(f"Invalid metadata filter key: {key!r}")
        accessor = f"metadata->>{quote_literal(name)}"
        cast = _metadata_cast(value)
        return f"({accessor})::{cast}" if cast else accessor
    if not IDENTIFIER_RE.match(key or ""):
        raise ValidationError(f"Invalid filter key: {key!r}")
    return key


def _metadata_cast(value: Any) -> str | None:
    # ->> yields text; compare typed values against a cast.
    if isinstance(value, (list, tuple, set, frozenset)):
        value = next(iter(value), None)
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, numbers.Real):
        return "numeric"
    return None
