"""
hxpress Kernel — Schema Documents

Schemas declared as plain mappings (the shape JSON or YAML gives you),
validated with pydantic and compiled into kernel Schemas.

    {
      "parent": {
        "element": {"tag": "div", "request": {"method": "post", "path": "/p/{}", "args": ["id"]}},
        "fields": [
          {"name": "title", "element": {"tag": "h1"}},
          {"name": "child", "nest": "child"},
          {"name": "tags", "list": true, "element": {"tag": "li"}}
        ]
      },
      "child": {...}
    }

Nested references name another document. They are resolved depth-first;
unknown names and reference cycles are rejected. Map expressions name an
entry in the `mappers` table, since documents cannot carry code.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Any

from pydantic import BaseModel, Field, ValidationError, field_validator

from hxpress.kernel.errors import SchemaError
from hxpress.kernel.types import (
    AttributeSource,
    DynamicAttr,
    ElementSpec,
    FieldPolicy,
    FormatExpr,
    ListPolicy,
    MapExpr,
    MapPolicy,
    NestPolicy,
    OptionalPolicy,
    PlainPolicy,
    Request,
    RequestAttr,
    Schema,
    StaticAttr,
)
from hxpress.kernel.types import Field as SchemaField

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Document models
# ---------------------------------------------------------------------------


class FormatDocument(BaseModel):
    """A template and the record fields that fill it."""

    model_config = {"extra": "forbid"}

    template: str
    args: list[str] = Field(default_factory=list)


class RequestDocument(BaseModel):
    """The element's request binding."""

    model_config = {"extra": "forbid"}

    method: str
    path: str
    args: list[str] = Field(default_factory=list)
    urlencode: bool = False

    @field_validator("method")
    @classmethod
    def _method_lower(cls, v: str) -> str:
        return v.lower()


class ElementDocument(BaseModel):
    """One element. Attribute groups keep their declaration order."""

    model_config = {"extra": "forbid"}

    tag: str | None = None
    attrs: dict[str, str] = Field(default_factory=dict)
    dynamic: dict[str, str | FormatDocument] = Field(default_factory=dict)
    hx: dict[str, str] = Field(default_factory=dict)
    request: RequestDocument | None = None
    content: str | FormatDocument | None = None
    before: str = ""
    after: str = ""


class FieldDocument(BaseModel):
    """One field and the policy flags that shape it."""

    model_config = {"extra": "forbid", "populate_by_name": True}

    name: str
    element: ElementDocument | None = None
    optional: bool = False
    default: str | None = None
    map_with: str | None = Field(default=None, alias="map")
    as_list: bool = Field(default=False, alias="list")
    nest: str | None = None


class SchemaDocument(BaseModel):
    """A record type's schema."""

    model_config = {"extra": "forbid"}

    element: ElementDocument | None = None
    fields: list[FieldDocument] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def compile_schemas(
    documents: Mapping[str, Mapping[str, Any]],
    mappers: Mapping[str, Callable[[Any], Any]] | None = None,
) -> dict[str, Schema]:
    """
    Validate and compile a set of named schema documents.

    Returns {name: Schema} in document order. Raises SchemaError on any
    validation failure, unknown reference or reference cycle. No partial
    result is returned.
    """
    parsed: dict[str, SchemaDocument] = {}
    errors: list[str] = []
    for name, raw in documents.items():
        try:
            parsed[name] = SchemaDocument.model_validate(raw)
        except ValidationError as e:
            for err in e.errors():
                location = ".".join(str(p) for p in err["loc"])
                errors.append(f"{name}.{location}: {err['msg']}")
    if errors:
        logger.warning("documents: %d validation error(s)", len(errors))
        raise SchemaError(errors)

    compiler = _Compiler(parsed, mappers or {})
    schemas = {name: compiler.schema(name) for name in parsed}
    logger.info("documents: compiled %d schema(s)", len(schemas))
    return schemas


def compile_schema(
    document: Mapping[str, Any],
    mappers: Mapping[str, Callable[[Any], Any]] | None = None,
    name: str = "schema",
) -> Schema:
    """Compile a single self-contained document."""
    return compile_schemas({name: document}, mappers)[name]


# ---------------------------------------------------------------------------
# Compilation
# ---------------------------------------------------------------------------


class _Compiler:
    """Depth-first resolver: every nested schema is built before its parent."""

    def __init__(self, documents: dict[str, SchemaDocument], mappers: Mapping[str, Callable[[Any], Any]]):
        self.documents = documents
        self.mappers = mappers
        self.built: dict[str, Schema] = {}
        self.resolving: list[str] = []

    def schema(self, name: str) -> Schema:
        if name in self.built:
            return self.built[name]
        if name in self.resolving:
            cycle = " -> ".join([*self.resolving[self.resolving.index(name):], name])
            raise SchemaError(f"Schema reference cycle: {cycle}")
        if name not in self.documents:
            raise SchemaError(f"Unknown schema reference: {name!r}")

        self.resolving.append(name)
        try:
            doc = self.documents[name]
            built = Schema(
                fields=tuple(self.field(name, f) for f in doc.fields),
                element=self.element(doc.element),
                name=name,
            )
        finally:
            self.resolving.pop()

        logger.debug("documents: built schema %s", name)
        self.built[name] = built
        return built

    def field(self, owner: str, doc: FieldDocument) -> SchemaField:
        try:
            return SchemaField(
                name=doc.name,
                policy=self.policy(doc),
                element=self.element(doc.element),
            )
        except SchemaError as e:
            raise SchemaError([f"{owner}.{doc.name}: {err}" for err in e.errors]) from e

    def policy(self, doc: FieldDocument) -> FieldPolicy:
        if doc.as_list:
            if doc.optional or doc.default is not None or doc.map_with is not None:
                raise SchemaError("list fields cannot be optional, defaulted or mapped")
            item_schema = self.schema(doc.nest) if doc.nest else None
            return ListPolicy(item_schema=item_schema)

        if doc.nest:
            if doc.default is not None or doc.map_with is not None:
                raise SchemaError("nested fields cannot be defaulted or mapped")
            return NestPolicy(schema=self.schema(doc.nest), optional=doc.optional)

        if doc.default is not None and not doc.optional:
            raise SchemaError("default requires optional")

        map_expr = self.mapper(doc.map_with) if doc.map_with else None
        if doc.optional:
            return OptionalPolicy(default=doc.default, map=map_expr)
        if map_expr is not None:
            return MapPolicy(map=map_expr)
        return PlainPolicy()

    def mapper(self, name: str) -> MapExpr:
        if name not in self.mappers:
            raise SchemaError(f"unknown mapper {name!r}")
        return MapExpr(variable=name, expression=self.mappers[name])

    def element(self, doc: ElementDocument | None) -> ElementSpec | None:
        if doc is None:
            return None
        return ElementSpec(
            tag=doc.tag,
            attributes=self.attributes(doc),
            content=_format(doc.content) if doc.content is not None else None,
            before=doc.before,
            after=doc.after,
        )

    def attributes(self, doc: ElementDocument) -> tuple[AttributeSource, ...]:
        out: list[AttributeSource] = []
        if doc.request is not None:
            req = doc.request
            out.append(Request(req.method, FormatExpr(req.path, tuple(req.args)), encode=req.urlencode))
        out.extend(DynamicAttr(key, _format(value)) for key, value in doc.dynamic.items())
        out.extend(StaticAttr(key, value) for key, value in doc.attrs.items())
        out.extend(RequestAttr(key, value) for key, value in doc.hx.items())
        return tuple(out)


def _format(doc: str | FormatDocument) -> FormatExpr:
    if isinstance(doc, str):
        return FormatExpr(doc)
    return FormatExpr(doc.template, tuple(doc.args))
