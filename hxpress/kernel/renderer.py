"""
hxpress Kernel — Renderer

Pure function: (schema, record) → markup string.
No IO. No validation (schemas validate themselves at construction).
Deterministic: same input → same output, always.

Output is the exact concatenation of fragments: no whitespace or separators
are ever added between elements.

Field dispatch (one branch per field, by policy kind):
  list      flat: one element per item / nested: items through their schema
            inside one wrapper
  nest      the value's own schema, inside the field's element if it has a tag
  plain     element(content(value))
  map       element(content(map(value)))
  optional  absent → skipped (or the default stands in); present → as plain/map
"""

from __future__ import annotations

import logging
from typing import Any

from hxpress.kernel.formatting import field_value
from hxpress.kernel.types import (
    BARE_ELEMENT,
    ElementSpec,
    Field,
    ListPolicy,
    MapPolicy,
    NestPolicy,
    OptionalPolicy,
    Schema,
)

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def render(schema: Schema, record: Any) -> str:
    """
    Render a record through its schema.

    The record element (if any) is always emitted; only fields take part in
    the optional-absence skip.
    """
    parts: list[str] = []
    element = schema.element

    if element is not None:
        parts.append(element.open(record))
        parts.append(element.before)

    for field in schema.fields:
        parts.append(render_field(field, record))

    if element is not None:
        parts.append(element.after)
        parts.append(element.close())

    return "".join(parts)


def render_field(field: Field, record: Any) -> str:
    """Render one field of a record according to its policy."""
    renderer = _FIELD_RENDERERS[field.policy.kind]
    return renderer(field, record, field_value(record, field.name))


# ---------------------------------------------------------------------------
# Scalar fields
# ---------------------------------------------------------------------------


def _render_element(field: Field, record: Any, value: Any) -> str:
    """Open, before, content, after, close."""
    element = field.element or BARE_ELEMENT
    return _wrap(element, record, element.render_content(record, value))


def _render_plain(field: Field, record: Any, value: Any) -> str:
    return _render_element(field, record, value)


def _render_map(field: Field, record: Any, value: Any) -> str:
    policy: MapPolicy = field.policy
    return _render_element(field, record, policy.map.apply(value))


def _render_optional(field: Field, record: Any, value: Any) -> str:
    policy: OptionalPolicy = field.policy

    if value is None:
        if policy.default is None:
            return ""
        return _render_element(field, record, policy.default)

    if policy.map is not None:
        value = policy.map.apply(value)
    return _render_element(field, record, value)


# ---------------------------------------------------------------------------
# Composite fields
# ---------------------------------------------------------------------------


def _render_list(field: Field, record: Any, value: Any) -> str:
    policy: ListPolicy = field.policy
    items = value or ()

    if not policy.nested:
        # Flat: one element per item, no wrapper
        return "".join(_render_element(field, record, item) for item in items)

    # Nested: one wrapper around every item's full render, even when empty
    logger.debug("render: list field %r through %s", field.name, policy.item_schema.display_name)
    wrapper = field.element or BARE_ELEMENT
    inner = "".join(render(policy.item_schema, item) for item in items)
    return _wrap(wrapper, record, inner)


def _render_nest(field: Field, record: Any, value: Any) -> str:
    policy: NestPolicy = field.policy

    if value is None and policy.optional:
        return ""

    logger.debug("render: nested field %r through %s", field.name, policy.schema.display_name)
    wrapper = field.element or BARE_ELEMENT
    return _wrap(wrapper, record, render(policy.schema, value))


def _wrap(wrapper: ElementSpec, record: Any, inner: str) -> str:
    return "".join(
        (
            wrapper.open(record),
            wrapper.before,
            inner,
            wrapper.after,
            wrapper.close(),
        )
    )


_FIELD_RENDERERS = {
    "plain": _render_plain,
    "map": _render_map,
    "optional": _render_optional,
    "list": _render_list,
    "nest": _render_nest,
}
