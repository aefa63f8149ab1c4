"""Sanitizing helpers for text that crosses into generated SQL.

Statements are sent with ``exec_driver_sql`` as plain text, so every
identifier and literal must go through :func:`sanitize` first.
"""
from __future__ import annotations

import math
import numbers
import re
from collections.abc import Sequence
from decimal import Decimal
from enum import Enum
from typing import Any

from chunkstore.domain.exceptions import ValidationError

IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def sanitize(text: str, quote: str = "'") -> str:
    """Strip NUL bytes (PostgreSQL rejects them) and double ``quote``."""
    return str(text).replace("\x00", "").replace(quote, quote * 2)


def quote_literal(value: Any) -> str:
    return "'" + sanitize(value) + "'"


def quote_identifier(name: str) -> str:
    if not IDENTIFIER_RE.match(name or ""):
        raise ValidationError(f"Invalid SQL identifier: {name!r}")
    return '"' + sanitize(name, quote='"') + '"'


def render_value(value: Any) -> str:
    """Render a Python scalar (or a sequence of them) as a SQL literal."""
    if value is None:
        return "NULL"
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, Enum):
        value = value.value
    if isinstance(value, str):
        return quote_literal(value)
    if isinstance(value, numbers.Integral):
        return str(int(value))
    if isinstance(value, Decimal):
        if not value.is_finite():
            raise ValidationError(f"Non-finite number cannot be used in a filter: {value!r}")
        return str(value)
    if isinstance(value, numbers.Real):
        if not math.isfinite(value):
            raise ValidationError(f"Non-finite number cannot be used in a filter: {value!r}")
        return repr(float(value))
    if isinstance(value, (Sequence, set, frozenset)) and not isinstance(value, (bytes, bytearray)):
        items = sorted(value, key=repr) if isinstance(value, (set, frozenset)) else value
        return "(" + ", ".join(render_value(item) for item in items) + ")"
    return quote_literal(str(value))
