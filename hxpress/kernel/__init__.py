"""
hxpress Kernel — the pure engine.

Components:
  types      — schema data model (frozen, self-validating)
  validation — structural checks returning error lists
  elements   — attribute composition, open/close tags, content
  renderer   — (schema, record) → markup  (pure, deterministic)
  documents  — schema documents (mappings) → validated Schemas
"""

from hxpress.kernel.documents import compile_schema, compile_schemas
from hxpress.kernel.errors import SchemaError
from hxpress.kernel.renderer import render, render_field
from hxpress.kernel.types import (
    DynamicAttr,
    ElementSpec,
    Field,
    FormatExpr,
    ListPolicy,
    MapExpr,
    MapPolicy,
    Method,
    NestPolicy,
    OptionalPolicy,
    PlainPolicy,
    Request,
    RequestAttr,
    Schema,
    StaticAttr,
    attributes,
    schema,
)

__all__ = [
    "render",
    "render_field",
    "compile_schema",
    "compile_schemas",
    "SchemaError",
    "Schema",
    "Field",
    "ElementSpec",
    "FormatExpr",
    "MapExpr",
    "Method",
    "StaticAttr",
    "DynamicAttr",
    "RequestAttr",
    "Request",
    "PlainPolicy",
    "OptionalPolicy",
    "MapPolicy",
    "ListPolicy",
    "NestPolicy",
    "attributes",
    "schema",
]
