"""
hxpress Kernel — Schema Types

Data classes describing how a record maps to markup. These are the contracts
that bind the kernel together: validation checks them, the renderer walks them.

Every type is a frozen dataclass tagged with a `kind` string. The tags are
closed sets:
  attribute sources  static | dynamic | request_attr | request
  field policies     plain | optional | map | list | nest

Each constructor validates itself and raises SchemaError, so a Schema that
exists is always renderable. Schemas are immutable and safe to share across
threads.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar

from hxpress.config import settings
from hxpress.kernel.elements import close_tag, open_tag, render_content
from hxpress.kernel.errors import SchemaError
from hxpress.kernel.formatting import field_value, substitute
from hxpress.kernel.validation import validate

logger = logging.getLogger(__name__)


def _check(obj: Any) -> None:
    errors = validate(obj)
    if errors:
        logger.warning("schema: rejected %s: %s", type(obj).__name__, "; ".join(errors))
        raise SchemaError(errors)


def _as_format(value: FormatExpr | str) -> FormatExpr:
    if isinstance(value, str):
        return FormatExpr(value)
    return value


# ---------------------------------------------------------------------------
# Text
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FormatExpr:
    """
    A template with positional `{}` placeholders and the record fields that
    fill them, in order.

    Attribute and request templates have exactly len(args) placeholders.
    Content templates get the field's own value as an extra first argument.
    """

    template: str
    args: tuple[str, ...] = ()

    kind: ClassVar[str] = "format"

    def __post_init__(self):
        if isinstance(self.args, str):
            object.__setattr__(self, "args", (self.args,))
        else:
            object.__setattr__(self, "args", tuple(self.args))
        _check(self)

    def evaluate(self, record: Any, *leading: Any) -> str:
        values = [*leading, *(field_value(record, name) for name in self.args)]
        return substitute(self.template, values)


@dataclass(frozen=True)
class MapExpr:
    """Binds the field value to `variable` and evaluates `expression` on it."""

    variable: str
    expression: Callable[[Any], Any]

    kind: ClassVar[str] = "map_expr"

    def __post_init__(self):
        _check(self)

    def apply(self, value: Any) -> Any:
        return self.expression(value)


# ---------------------------------------------------------------------------
# Attribute sources
# ---------------------------------------------------------------------------


class Method(Enum):
    """Request methods understood by the request framework."""

    GET = "get"
    POST = "post"
    PUT = "put"
    PATCH = "patch"
    DELETE = "delete"

    @property
    def attribute(self) -> str:
        return f"{settings.ATTRIBUTE_PREFIX}{self.value}"

    @classmethod
    def parse(cls, value: Method | str) -> Method:
        if isinstance(value, Method):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise SchemaError(f"Unknown request method: {value!r}") from None


@dataclass(frozen=True)
class StaticAttr:
    """A literal key="value" pair."""

    key: str
    value: str

    kind: ClassVar[str] = "static"

    def __post_init__(self):
        _check(self)


@dataclass(frozen=True)
class DynamicAttr:
    """An attribute whose value is computed from the record on every render."""

    key: str
    expr: FormatExpr

    kind: ClassVar[str] = "dynamic"

    def __post_init__(self):
        object.__setattr__(self, "expr", _as_format(self.expr))
        _check(self)


@dataclass(frozen=True)
class RequestAttr:
    """A literal pair in the request framework's namespace: key "target" renders as hx-target."""

    key: str
    value: str

    kind: ClassVar[str] = "request_attr"

    def __post_init__(self):
        _check(self)


@dataclass(frozen=True)
class Request:
    """
    The element's request binding (method + templated path).

    With encode=True each substituted argument is percent-encoded; the literal
    path text is left alone.
    """

    method: Method
    path: FormatExpr
    encode: bool = False

    kind: ClassVar[str] = "request"

    def __post_init__(self):
        object.__setattr__(self, "method", Method.parse(self.method))
        object.__setattr__(self, "path", _as_format(self.path))
        _check(self)


AttributeSource = StaticAttr | DynamicAttr | RequestAttr | Request


# ---------------------------------------------------------------------------
# Elements
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ElementSpec:
    """
    One element's configuration.

    tag=None means no wrapping element: content and children are written
    straight into the parent. `before` and `after` are literal markup placed
    just inside the open and close tags.
    """

    tag: str | None = None
    attributes: tuple[AttributeSource, ...] = ()
    content: FormatExpr | None = None
    before: str = ""
    after: str = ""

    kind: ClassVar[str] = "element"

    def __post_init__(self):
        object.__setattr__(self, "attributes", tuple(self.attributes))
        if self.content is not None:
            object.__setattr__(self, "content", _as_format(self.content))
        _check(self)

    @property
    def request(self) -> Request | None:
        for attr in self.attributes:
            if attr.kind == "request":
                return attr
        return None

    def open(self, record: Any) -> str:
        return open_tag(self, record)

    def close(self) -> str:
        return close_tag(self)

    def render_content(self, record: Any, value: Any) -> str:
        return render_content(self, record, value)


# A field with no element renders its content straight into the parent
BARE_ELEMENT = ElementSpec()


# ---------------------------------------------------------------------------
# Field policies
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PlainPolicy:
    """Render the field value through its element."""

    kind: ClassVar[str] = "plain"

    def __post_init__(self):
        _check(self)


@dataclass(frozen=True)
class OptionalPolicy:
    """
    The value may be None (absent).

    Absent without a default: the whole element is skipped.
    Absent with a default: the default string stands in for the value.
    Present with a map: the map runs on the unwrapped value.
    default and map are mutually exclusive.
    """

    default: str | None = None
    map: MapExpr | None = None

    kind: ClassVar[str] = "optional"

    def __post_init__(self):
        _check(self)


@dataclass(frozen=True)
class MapPolicy:
    """Feed map(value) to the content instead of the raw value."""

    map: MapExpr

    kind: ClassVar[str] = "map"

    def __post_init__(self):
        _check(self)


@dataclass(frozen=True)
class ListPolicy:
    """
    The value is a sequence.

    Flat (item_schema=None): one element per item, concatenated, no wrapper.
    Nested: every item rendered through item_schema, all inside one wrapper
    taken from the field's element (if it has a tag).
    """

    item_schema: Schema | None = None

    kind: ClassVar[str] = "list"

    def __post_init__(self):
        _check(self)

    @property
    def nested(self) -> bool:
        return self.item_schema is not None


@dataclass(frozen=True)
class NestPolicy:
    """The value is a record rendered through `schema`, wrapped by the field's element."""

    schema: Schema
    optional: bool = False

    kind: ClassVar[str] = "nest"

    def __post_init__(self):
        _check(self)


FieldPolicy = PlainPolicy | OptionalPolicy | MapPolicy | ListPolicy | NestPolicy


# ---------------------------------------------------------------------------
# Fields and schemas
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Field:
    """One rendered record field: its policy and its element."""

    name: str
    policy: FieldPolicy = field(default_factory=PlainPolicy)
    element: ElementSpec | None = None

    kind: ClassVar[str] = "field"

    def __post_init__(self):
        _check(self)


@dataclass(frozen=True)
class Schema:
    """
    The resolved rendering configuration for one record type.

    `fields` are rendered in order. `element` wraps the whole record and is
    emitted unconditionally. `record_type`, when a dataclass or pydantic
    model, lets construction check every referenced field name.
    """

    fields: tuple[Field, ...] = ()
    element: ElementSpec | None = None
    name: str | None = None
    record_type: type | None = field(default=None, compare=False)

    kind: ClassVar[str] = "schema"

    def __post_init__(self):
        object.__setattr__(self, "fields", tuple(self.fields))
        _check(self)
        logger.debug("schema: built %s with %d field(s)", self.display_name, len(self.fields))

    @property
    def display_name(self) -> str:
        if self.name:
            return self.name
        if self.record_type is not None:
            return self.record_type.__name__
        return "<anonymous>"


def schema(
    *fields: Field,
    element: ElementSpec | None = None,
    name: str | None = None,
    record_type: type | None = None,
) -> Schema:
    """Shorthand: schema(Field(...), Field(...), element=ElementSpec("div"))."""
    return Schema(fields=tuple(fields), element=element, name=name, record_type=record_type)


def attributes(
    static: Iterable[tuple[str, str]] | dict[str, str] = (),
    dynamic: Iterable[tuple[str, FormatExpr | str]] | dict[str, FormatExpr | str] = (),
    hx: Iterable[tuple[str, str]] | dict[str, str] = (),
    request: Request | None = None,
) -> tuple[AttributeSource, ...]:
    """Build an attribute tuple from grouped sources (dicts keep their order)."""

    def pairs(source):
        return source.items() if isinstance(source, dict) else source

    out: list[AttributeSource] = []
    out.extend(DynamicAttr(k, v) for k, v in pairs(dynamic))
    out.extend(StaticAttr(k, v) for k, v in pairs(static))
    out.extend(RequestAttr(k, v) for k, v in pairs(hx))
    if request is not None:
        out.append(request)
    return tuple(out)
