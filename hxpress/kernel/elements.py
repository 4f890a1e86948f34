"""
hxpress Kernel — Element Rendering

Open tag, close tag and content for one ElementSpec, and the attribute
composer behind the open tag.

Attribute order is fixed and part of the output contract:
  1. the request binding (hx-get="...", at most one)
  2. dynamic attributes, in declaration order
  3. static attributes, in declaration order
  4. request-framework attributes (hx-target, hx-swap, ...), in declaration order

Every attribute is written as ` key="value"`: one leading space, nothing
trailing. Values are not escaped.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

from hxpress.config import settings
from hxpress.kernel.formatting import field_value, percent_encode, substitute, to_text

if TYPE_CHECKING:
    from hxpress.kernel.types import (
        AttributeSource,
        DynamicAttr,
        ElementSpec,
        Request,
        RequestAttr,
        StaticAttr,
    )

ATTRIBUTE_ORDER: tuple[str, ...] = ("request", "dynamic", "static", "request_attr")


# ---------------------------------------------------------------------------
# Attributes
# ---------------------------------------------------------------------------


def render_attributes(attributes: Iterable[AttributeSource], record: Any) -> str:
    """Compose an element's attributes in the fixed order."""
    attributes = tuple(attributes)
    parts: list[str] = []
    for kind in ATTRIBUTE_ORDER:
        render = _ATTRIBUTE_RENDERERS[kind]
        parts.extend(render(attr, record) for attr in attributes if attr.kind == kind)
    return "".join(parts)


def _render_static(attr: StaticAttr, record: Any) -> str:
    return f' {attr.key}="{attr.value}"'


def _render_dynamic(attr: DynamicAttr, record: Any) -> str:
    return f' {attr.key}="{attr.expr.evaluate(record)}"'


def _render_request_attr(attr: RequestAttr, record: Any) -> str:
    return f' {request_attr_name(attr.key)}="{attr.value}"'


def _render_request(attr: Request, record: Any) -> str:
    values = [field_value(record, name) for name in attr.path.args]
    if attr.encode:
        values = [percent_encode(v) for v in values]
    return f' {attr.method.attribute}="{substitute(attr.path.template, values)}"'


def request_attr_name(key: str) -> str:
    """target → hx-target; keys that already carry the prefix are kept."""
    prefix = settings.ATTRIBUTE_PREFIX
    if key.startswith(prefix):
        return key
    return f"{prefix}{key}"


_ATTRIBUTE_RENDERERS = {
    "request": _render_request,
    "dynamic": _render_dynamic,
    "static": _render_static,
    "request_attr": _render_request_attr,
}


# ---------------------------------------------------------------------------
# Tags and content
# ---------------------------------------------------------------------------


def open_tag(element: ElementSpec, record: Any) -> str:
    """<tag attrs...>, or "" when the element has no tag."""
    if element.tag is None:
        return ""
    return f"<{element.tag}{render_attributes(element.attributes, record)}>"


def close_tag(element: ElementSpec) -> str:
    if element.tag is None:
        return ""
    return f"</{element.tag}>"


def render_content(element: ElementSpec, record: Any, value: Any) -> str:
    """
    The element's inner text for `value`.

    With a content template the value is its first substitution and the
    template's own field references follow. Without one, the value's
    canonical string form.
    """
    if element.content is None:
        return to_text(value)
    return element.content.evaluate(record, value)
