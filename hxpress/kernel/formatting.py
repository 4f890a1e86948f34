"""
hxpress Kernel — Formatting

Text production shared by attributes and content:
  to_text           canonical string form of a field value
  placeholder_count number of positional `{}` slots in a template
  substitute        fill a template with canonical strings
  percent_encode    form-safe encoding of request arguments
  field_value       read a named field from a record (object or mapping)

Pure functions. No IO.
"""

from __future__ import annotations

import math
import string
from collections.abc import Mapping
from decimal import Decimal
from functools import lru_cache
from typing import Any
from urllib.parse import quote

from hxpress.config import settings
from hxpress.kernel.errors import SchemaError

_FORMATTER = string.Formatter()


# ---------------------------------------------------------------------------
# Canonical string form
# ---------------------------------------------------------------------------


def to_text(value: Any) -> str:
    """
    Canonical string form of a value.

    bool → true/false, int → decimal, float → decimal without exponent,
    str verbatim, None → "". Everything else goes through str().
    """
    if value is None:
        return ""
    # bool before int: bool is an int subclass
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return value
    if isinstance(value, int):
        return str(int(value))
    if isinstance(value, float):
        return _float_text(value)
    return str(value)


def _float_text(value: float) -> str:
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "inf" if value > 0 else "-inf"
    if value.is_integer():
        if value == 0 and math.copysign(1.0, value) < 0:
            return "-0"
        return str(int(value))
    return format(Decimal(repr(value)), "f")


# ---------------------------------------------------------------------------
# Templates
# ---------------------------------------------------------------------------


@lru_cache(maxsize=1024)
def placeholder_count(template: str) -> int:
    """
    Count the positional `{}` placeholders in a template.

    `{{` and `}}` are literal braces. Named (`{name}`) and indexed (`{0}`)
    placeholders are rejected, as are conversions (`{!r}`), nested
    replacement fields in a format spec, and format specs that do not apply
    to text (`{:.2f}`, `{:d}`): values are always substituted as strings.
    Raises ValueError on malformed templates.
    """
    count = 0
    for _literal, field_name, spec, conversion in _FORMATTER.parse(template):
        if field_name is None:
            continue
        if field_name != "":
            raise ValueError(f"only positional '{{}}' placeholders are allowed, found '{{{field_name}}}'")
        if conversion is not None:
            raise ValueError(f"conversions are not allowed, found '!{conversion}'")
        if spec:
            if "{" in spec:
                raise ValueError("nested placeholders inside a format spec are not allowed")
            try:
                format("", spec)
            except ValueError as e:
                raise ValueError(f"format spec {spec!r} does not apply to text: {e}") from None
        count += 1
    return count


def substitute(template: str, values: list[Any] | tuple[Any, ...]) -> str:
    """
    Substitute values, in order, into the template's positional placeholders.

    Each value is converted with to_text() first. A count mismatch means the
    schema was built around its own validation and is reported loudly.
    """
    expected = placeholder_count(template)
    if expected != len(values):
        raise SchemaError(
            f"template {template!r} has {expected} placeholder(s) but {len(values)} value(s) were supplied"
        )
    if not values:
        # Still collapse {{ and }} to literal braces
        return template.format()
    return template.format(*[to_text(v) for v in values])


# ---------------------------------------------------------------------------
# Percent-encoding
# ---------------------------------------------------------------------------


def percent_encode(value: Any) -> str:
    """Percent-encode the canonical text of a value (space → %20)."""
    return quote(to_text(value), safe=settings.URLENCODE_SAFE)


# ---------------------------------------------------------------------------
# Record access
# ---------------------------------------------------------------------------


def field_value(record: Any, name: str) -> Any:
    """
    Read a field from a record: mappings by key, everything else by attribute.

    A key missing from a mapping reads as None (absent).
    """
    if isinstance(record, Mapping):
        return record.get(name)
    return getattr(record, name)
