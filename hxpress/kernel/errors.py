"""
hxpress Kernel — Errors

Schema construction is the only place the kernel fails. Rendering a schema
that constructed successfully has no error path.
"""

from __future__ import annotations


class SchemaError(ValueError):
    """A schema authoring defect: conflicting or malformed declarations."""

    def __init__(self, errors: list[str] | str):
        if isinstance(errors, str):
            errors = [errors]
        self.errors: list[str] = list(errors)
        super().__init__("; ".join(self.errors))
