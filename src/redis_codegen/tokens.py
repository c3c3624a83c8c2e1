"""Descriptors of the types synthesized from command arguments.

A `TypeDescriptor` is one distinct argument shape: an alias of a scalar, a record of fields
or a choice of variants. Its `scope` (the names of the command and arguments it was found under)
only decides where the type is placed. Two descriptors with the same name, wire token and shape are
equal wherever they were found, which is what lets the registry deduplicate them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing_extensions import override

from redis_codegen.helper import to_camel


@dataclass(frozen=True)
class TypeRef:
    """A reference to another synthesized type.

    The reference is relative to the scope of the referencing descriptor, e.g. a record found in
    `SET` with a field of type `expiration.Ex` refers to the type whose fqtn is `SET.expiration.Ex`.
    """

    scope: tuple[str, ...]
    name: str

    @override
    def __str__(self) -> str:
        return ".".join((*self.scope, self.name))


# A primitive type name (e.g. 'int') or a reference to a synthesized type.
FieldType = str | TypeRef


@dataclass(frozen=True)
class RecordField:
    """A field of a record or of an inline record variant.

    A field with a `flag_token` is a boolean flag: the token is written when the flag is set.
    A `multiple` field holds a sequence of values of its type, an `optional` one may be None and is then
    not written at all.
    """

    name: str
    source_name: str
    type: FieldType
    flag_token: str | None = None
    multiple: bool = False
    optional: bool = False

    @property
    def is_flag(self) -> bool:
        return self.flag_token is not None


@dataclass(frozen=True)
class MarkerVariant:
    """A variant whose only wire representation is its token."""

    name: str
    token: str | None


@dataclass(frozen=True)
class WrapperVariant:
    """A variant carrying a single value, or a sequence of values if `multiple` is set."""

    name: str
    token: str | None
    type: FieldType
    multiple: bool = False


@dataclass(frozen=True)
class InlineRecordVariant:
    """A variant carrying several named fields."""

    name: str
    token: str | None
    fields: tuple[RecordField, ...]


Variant = MarkerVariant | WrapperVariant | InlineRecordVariant


@dataclass(frozen=True)
class AliasShape:
    type: str


@dataclass(frozen=True)
class RecordShape:
    fields: tuple[RecordField, ...]


@dataclass(frozen=True)
class ChoiceShape:
    variants: tuple[Variant, ...]


Shape = AliasShape | RecordShape | ChoiceShape


@dataclass(frozen=True)
class TypeDescriptor:
    """A synthesized type.

    Attributes:
        name: The type name, the camel cased wire token if there is one, else the camel cased argument name.
        wire_token: The token written before the value of this type, if any.
        shape: The alias, record or choice this type consists of.
        scope: The command and argument names this type was found under. Excluded from equality.
    """

    name: str
    wire_token: str | None
    shape: Shape
    scope: tuple[str, ...] = field(default=(), compare=False)

    @classmethod
    def new_alias(cls, source_name: str, token: str | None, type_name: str, scope: tuple[str, ...]) -> TypeDescriptor:
        return cls(to_camel(token or source_name), token, AliasShape(type_name), scope)

    @classmethod
    def new_record(
        cls, source_name: str, token: str | None, fields: tuple[RecordField, ...], scope: tuple[str, ...]
    ) -> TypeDescriptor:
        return cls(to_camel(token or source_name), token, RecordShape(fields), scope)

    @classmethod
    def new_choice(
        cls, source_name: str, token: str | None, variants: tuple[Variant, ...], scope: tuple[str, ...]
    ) -> TypeDescriptor:
        return cls(to_camel(token or source_name), token, ChoiceShape(variants), scope)

    @property
    def fqtn(self) -> tuple[str, ...]:
        """The fully qualified token name: the scope followed by the type name."""
        return (*self.scope, self.name)

    @property
    def content_key(self) -> tuple[str, str | None, Shape]:
        """The key used for deduplication. It does not depend on where the type was found."""
        return (self.name, self.wire_token, self.shape)

