"""
hxpress Kernel — Schema Validation

Structural checks for every schema building block. Each model type calls
`validate()` from its constructor and refuses to exist if any error comes
back, so a Schema that was built is always renderable.

Validation is per-object: a composite only checks what its own parts cannot
see (field policy vs. element, duplicate field names, record references).
Its parts already validated themselves when they were constructed.

Dispatch is on the model's `kind` tag, so this module never imports the
model classes.
"""

from __future__ import annotations

import dataclasses
import re
from typing import TYPE_CHECKING, Any

from hxpress.kernel.formatting import placeholder_count

if TYPE_CHECKING:
    from hxpress.kernel.types import (
        DynamicAttr,
        ElementSpec,
        Field,
        FormatExpr,
        ListPolicy,
        MapExpr,
        NestPolicy,
        OptionalPolicy,
        Request,
        RequestAttr,
        Schema,
        StaticAttr,
    )

ATTRIBUTE_KINDS: set[str] = {"static", "dynamic", "request_attr", "request"}
POLICY_KINDS: set[str] = {"plain", "optional", "map", "list", "nest"}

FIELD_NAME_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
TAG_PATTERN = re.compile(r"^[A-Za-z][A-Za-z0-9:-]*$")
ATTRIBUTE_KEY_PATTERN = re.compile(r"^[^\s\"'<>/=]+$")

# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def validate(obj: Any) -> list[str]:
    """
    Validate one schema building block.
    Returns a list of error strings. Empty list = valid.
    """
    kind = getattr(obj, "kind", None)
    validator = _VALIDATORS.get(kind)
    if validator is None:
        return [f"Unknown schema component: {type(obj).__name__}"]
    return validator(obj)


def template_errors(expr: FormatExpr, expected: int, where: str) -> list[str]:
    """Check that a FormatExpr has exactly `expected` placeholders."""
    try:
        found = placeholder_count(expr.template)
    except ValueError as e:
        return [f"{where}: invalid template {expr.template!r}: {e}"]
    if found != expected:
        return [f"{where}: template {expr.template!r} has {found} placeholder(s), expected {expected}"]
    return []


# ---------------------------------------------------------------------------
# Leaf validators
# ---------------------------------------------------------------------------


def _validate_format(expr: FormatExpr) -> list[str]:
    errors: list[str] = []
    if not isinstance(expr.template, str):
        return [f"Format template must be a string, got {type(expr.template).__name__}"]
    try:
        placeholder_count(expr.template)
    except ValueError as e:
        errors.append(f"Invalid template {expr.template!r}: {e}")
    for arg in expr.args:
        if not isinstance(arg, str) or not FIELD_NAME_PATTERN.match(arg):
            errors.append(f"Invalid field reference in {expr.template!r}: {arg!r}")
    return errors


def _validate_map(expr: MapExpr) -> list[str]:
    errors: list[str] = []
    if not isinstance(expr.variable, str) or not FIELD_NAME_PATTERN.match(expr.variable):
        errors.append(f"Invalid map variable name: {expr.variable!r}")
    if not callable(expr.expression):
        errors.append(f"Map expression for {expr.variable!r} must be callable")
    return errors


def _key_errors(key: Any) -> list[str]:
    if not isinstance(key, str) or not ATTRIBUTE_KEY_PATTERN.match(key):
        return [f"Invalid attribute key: {key!r}"]
    return []


def _validate_static(attr: StaticAttr) -> list[str]:
    errors = _key_errors(attr.key)
    if not isinstance(attr.value, str):
        errors.append(f"Attribute {attr.key!r} value must be a string")
    return errors


def _validate_request_attr(attr: RequestAttr) -> list[str]:
    return _validate_static(attr)


def _validate_dynamic(attr: DynamicAttr) -> list[str]:
    errors = _key_errors(attr.key)
    errors.extend(template_errors(attr.expr, len(attr.expr.args), f"attribute {attr.key!r}"))
    return errors


def _validate_request(req: Request) -> list[str]:
    errors = template_errors(req.path, len(req.path.args), f"{req.method.name} request")
    if req.encode and not req.path.args:
        errors.append(f"{req.method.name} request {req.path.template!r}: urlencode requires at least one argument")
    return errors


# ---------------------------------------------------------------------------
# Composite validators
# ---------------------------------------------------------------------------


def _validate_element(element: ElementSpec) -> list[str]:
    errors: list[str] = []

    if element.tag is not None and (not isinstance(element.tag, str) or not TAG_PATTERN.match(element.tag)):
        errors.append(f"Invalid element tag: {element.tag!r}")

    for attr in element.attributes:
        if getattr(attr, "kind", None) not in ATTRIBUTE_KINDS:
            errors.append(f"Unknown attribute source: {attr!r}")

    requests = [a for a in element.attributes if getattr(a, "kind", None) == "request"]
    if len(requests) > 1:
        methods = ", ".join(r.method.name for r in requests)
        errors.append(f"Cannot have more than one request method on an element ({methods})")

    if element.tag is None and element.attributes:
        errors.append("Attributes require an element tag")

    if not isinstance(element.before, str) or not isinstance(element.after, str):
        errors.append("before/after must be strings")

    return errors


def _validate_optional(policy: OptionalPolicy) -> list[str]:
    errors: list[str] = []
    if policy.default is not None and policy.map is not None:
        errors.append("Optional field cannot have both a default and a map")
    if policy.default is not None and not isinstance(policy.default, str):
        errors.append(f"Default must be a string, got {type(policy.default).__name__}")
    return errors


def _validate_map_policy(policy: Any) -> list[str]:
    if getattr(policy.map, "kind", None) != "map_expr":
        return ["Map policy requires a MapExpr"]
    return []


def _validate_list(policy: ListPolicy) -> list[str]:
    if policy.item_schema is not None and getattr(policy.item_schema, "kind", None) != "schema":
        return ["List item schema must be a Schema"]
    return []


def _validate_nest(policy: NestPolicy) -> list[str]:
    if getattr(policy.schema, "kind", None) != "schema":
        return ["Nested field requires a Schema"]
    return []


def _validate_field(field: Field) -> list[str]:
    errors: list[str] = []
    name = field.name
    if not isinstance(name, str) or not FIELD_NAME_PATTERN.match(name):
        errors.append(f"Invalid field name: {name!r}")

    kind = getattr(field.policy, "kind", None)
    if kind not in POLICY_KINDS:
        errors.append(f"Field {name!r}: unknown policy {field.policy!r}")
        return errors

    element = field.element
    if element is not None and getattr(element, "kind", None) != "element":
        errors.append(f"Field {name!r}: element must be an ElementSpec")
        return errors

    if kind == "list" and field.policy.item_schema is None:
        if element is None or element.tag is None:
            errors.append(f"Field {name!r}: list requires an element or a nested item schema")

    nested = kind == "nest" or (kind == "list" and field.policy.item_schema is not None)
    if nested and element is not None and element.content is not None:
        errors.append(f"Field {name!r}: nested content comes from the nested schema, not a format")

    if element is not None and element.content is not None and not errors:
        # Content receives the field's own value first, then its extra args
        expected = 1 + len(element.content.args)
        errors.extend(template_errors(element.content, expected, f"Field {name!r} content"))

    return errors


def _validate_schema(schema: Schema) -> list[str]:
    errors: list[str] = []

    if schema.element is not None:
        if getattr(schema.element, "kind", None) != "element":
            errors.append("Record element must be an ElementSpec")
        elif schema.element.content is not None:
            errors.append("Record element cannot have content; its children are its fields")

    seen: set[str] = set()
    for field in schema.fields:
        if getattr(field, "kind", None) != "field":
            errors.append(f"Schema fields must be Field instances, got {type(field).__name__}")
            continue
        if field.name in seen:
            errors.append(f"Duplicate field: {field.name!r}")
        seen.add(field.name)

    if schema.record_type is not None and not errors:
        errors.extend(_record_type_errors(schema))

    return errors


def _record_type_errors(schema: Schema) -> list[str]:
    """Every referenced name must exist on the declared record type."""
    record_type = schema.record_type
    if dataclasses.is_dataclass(record_type):
        known = {f.name for f in dataclasses.fields(record_type)}
    elif hasattr(record_type, "model_fields"):
        known = set(record_type.model_fields)
    else:
        return []

    errors: list[str] = []
    type_name = getattr(record_type, "__name__", repr(record_type))
    for name in _referenced_names(schema):
        if name not in known:
            errors.append(f"{type_name} has no field {name!r}")
    return errors


def _referenced_names(schema: Schema) -> list[str]:
    names: list[str] = []

    def from_element(element: ElementSpec | None) -> None:
        if element is None:
            return
        for attr in element.attributes:
            if attr.kind == "dynamic":
                names.extend(attr.expr.args)
            elif attr.kind == "request":
                names.extend(attr.path.args)
        if element.content is not None:
            names.extend(element.content.args)

    from_element(schema.element)
    for field in schema.fields:
        names.append(field.name)
        from_element(field.element)

    # Stable, de-duplicated
    return list(dict.fromkeys(names))


_VALIDATORS = {
    "format": _validate_format,
    "map_expr": _validate_map,
    "static": _validate_static,
    "dynamic": _validate_dynamic,
    "request_attr": _validate_request_attr,
    "request": _validate_request,
    "element": _validate_element,
    "plain": lambda policy: [],
    "optional": _validate_optional,
    "map": _validate_map_policy,
    "list": _validate_list,
    "nest": _validate_nest,
    "field": _validate_field,
    "schema": _validate_schema,
}
