from __future__ import annotations


class SchemaError(ValueError):
    """The input is not a well-formed .zmes file. Aborts the whole parse."""


class MissingSchemaError(SchemaError):
    """A required table or column is absent or unreadable."""


class UnknownTypeError(SchemaError):
    """A tree node references a parameter type id that is not in RecordParameterTypes."""


class NoRootError(SchemaError):
    """A root-type-scoped tree has no root node (or, in strict mode, more than one)."""
