"""
hxpress - render records into request-driven HTML fragments.

A Schema says how each field of a record maps to an element, its attributes
and its request binding; render(schema, record) turns a record into markup.
"""

__version__ = "0.1.0"

# Configure logging for library use
import logging

logging.getLogger(__name__).addHandler(logging.NullHandler())

# Re-export the kernel's public API
from hxpress.kernel import (  # noqa: E402
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
    SchemaError,
    StaticAttr,
    attributes,
    compile_schema,
    compile_schemas,
    render,
    render_field,
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
