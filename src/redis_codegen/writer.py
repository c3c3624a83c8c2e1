"""Emits the Python module that declares all synthesized argument types."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

from redis_codegen import helper
from redis_codegen.commands import CommandDefinition
from redis_codegen.flatten import flatten_commands
from redis_codegen.namespace import Namespace, build_namespace
from redis_codegen.redis_types import DEFAULT_RUNTIME_MODULE, DEFAULT_TYPES_MODULE, PlacementType
from redis_codegen.registry import TypeRegistry, TypeRegistryEntry
from redis_codegen.scope import Scope
from redis_codegen.tokens import (
    AliasShape,
    ChoiceShape,
    FieldType,
    InlineRecordVariant,
    MarkerVariant,
    RecordField,
    RecordShape,
    WrapperVariant,
)

logger = logging.getLogger(__name__)

TYPES_MODULE_DOCSTRING = [
    '"""Argument types of Redis commands.',
    "",
    "Every type writes itself as command arguments with `write_redis_args`, starting with its token, if any.",
    "Generated by redis-codegen, do not edit.",
    '"""',
]

SERIALIZER_NAME = "write_redis_args"
SERIALIZER_PARAMETERS = ["self", helper.TypeHintedVariable("out", "RedisWrite")]


class TypesWriter:
    """Writes the declarations and serializers of all registered types into a scope."""

    def __init__(
        self,
        registry: TypeRegistry,
        scope: Scope | None = None,
        runtime_module: str = DEFAULT_RUNTIME_MODULE,
    ):
        """Initialize the writer.

        Args:
            registry (TypeRegistry): The registry, after all types are inserted. It is only read.
            scope (Scope | None, optional): The scope to write into. Defaults to a new scope.
            runtime_module (str, optional): The module that generated code imports its runtime support from.
        """
        self.registry = registry
        self.scope = scope if scope is not None else Scope(name=registry.path_prefix)
        self.runtime_module = runtime_module

    def write_header(self):
        """Write the module docstring and imports."""
        for line in TYPES_MODULE_DOCSTRING:
            self.scope.add(line)
        self.scope.blank()
        self.scope.add("from __future__ import annotations")
        self.scope.blank()
        self.scope.add("from dataclasses import dataclass")
        self.scope.blank()
        self.scope.add(f"from {self.runtime_module} import RedisWrite, write_redis_args")

    def write_namespace(self, namespace: Namespace, path: tuple[str, ...] = ()):
        """Write the types of a namespace, followed by its child namespaces in sorted order.

        Args:
            namespace (Namespace): The namespace to write.
            path (tuple[str, ...], optional): The path of the namespace. Defaults to the root.
        """
        for entry in namespace.entries:
            self.write_entry(entry)

        for child in namespace.sorted_children():
            child_path = (*path, child.name)
            self.scope.blank()
            self.scope.blank()
            self.scope.add(helper.new_class_declaration(child.name))
            with self.scope.indent():
                self.scope.add(helper.new_docstring(f"Argument types in namespace `{'.'.join(child_path)}`."))
                self.write_namespace(child, child_path)

    def write_entry(self, entry: TypeRegistryEntry):
        """Write the declaration of a registered type, followed by its serializer."""
        descriptor = entry.descriptor
        logger.debug("Writing type %s", entry.local_name)

        self.scope.blank()
        self.scope.blank()

        if isinstance(descriptor.shape, AliasShape):
            self.scope.add(helper.new_decorator("dataclass"))
            self.scope.add(helper.new_class_declaration(descriptor.name))
            with self.scope.indent():
                self.scope.add(helper.new_docstring(f"Redis Type: {descriptor.wire_token or descriptor.name}"))
                self.scope.blank()
                self.scope.add(str(helper.TypeHintedVariable("value", self._type_hint(entry, descriptor.shape.type))))
                self._write_serializer(entry)

        elif isinstance(descriptor.shape, RecordShape):
            fields = descriptor.shape.fields
            self.scope.add(self._dataclass_decorator(fields))
            self.scope.add(helper.new_class_declaration(descriptor.name))
            with self.scope.indent():
                self.scope.add(helper.new_docstring(f"Redis Block: {descriptor.name}"))
                if fields:
                    self.scope.blank()
                    self._write_fields(entry, fields)
                self._write_serializer(entry)

        elif isinstance(descriptor.shape, ChoiceShape):
            variants = descriptor.shape.variants
            self.scope.add(helper.new_decorator("dataclass"))
            self.scope.add(helper.new_class_declaration(descriptor.name))
            with self.scope.indent():
                self.scope.add(helper.new_docstring(f"Redis Type: {descriptor.wire_token or descriptor.name}"))
                for variant in variants:
                    self.scope.blank()
                    self._write_variant(entry, variant)
                if variants:
                    self.scope.blank()
                    self.scope.add(str(helper.TypeHintedVariable("variant", helper.new_union([v.name for v in variants]))))
                self._write_serializer(entry)

    def _type_hint(self, entry: TypeRegistryEntry, field_type: FieldType, multiple: bool = False) -> str:
        type_hint = self.registry.resolve(entry.descriptor.scope, field_type)
        if multiple:
            return f"list[{type_hint}]"
        return type_hint

    @staticmethod
    def _dataclass_decorator(fields: Sequence[RecordField]) -> str:
        if fields:
            return helper.new_decorator("dataclass", ["kw_only=True"])
        return helper.new_decorator("dataclass")

    def _write_fields(self, entry: TypeRegistryEntry, fields: Sequence[RecordField]):
        for record_field in fields:
            self.scope.add(f"#: {record_field.source_name}")
            if record_field.is_flag:
                self.scope.add(str(helper.TypeHintedVariable(record_field.name, "bool", "False")))
            elif record_field.optional:
                type_hint = self._type_hint(entry, record_field.type, record_field.multiple)
                self.scope.add(str(helper.TypeHintedVariable(record_field.name, f"{type_hint} | None", "None")))
            else:
                type_hint = self._type_hint(entry, record_field.type, record_field.multiple)
                self.scope.add(str(helper.TypeHintedVariable(record_field.name, type_hint)))

    def _write_variant(self, entry: TypeRegistryEntry, variant: MarkerVariant | WrapperVariant | InlineRecordVariant):
        docstring = helper.new_docstring(variant.token or "Unknown")

        if isinstance(variant, InlineRecordVariant):
            self.scope.add(self._dataclass_decorator(variant.fields))
        else:
            self.scope.add(helper.new_decorator("dataclass"))

        self.scope.add(helper.new_class_declaration(variant.name))
        with self.scope.indent():
            self.scope.add(docstring)

            if isinstance(variant, WrapperVariant):
                self.scope.blank()
                type_hint = self._type_hint(entry, variant.type, variant.multiple)
                self.scope.add(str(helper.TypeHintedVariable("inner", type_hint)))

            elif isinstance(variant, InlineRecordVariant) and variant.fields:
                self.scope.blank()
                self._write_fields(entry, variant.fields)

    def _write_serializer(self, entry: TypeRegistryEntry):
        """Write the `write_redis_args` method: the token first, then the payload of the shape."""
        descriptor = entry.descriptor
        body: list[str] = []

        if descriptor.wire_token is not None:
            body.append(_write_token(descriptor.wire_token))

        if isinstance(descriptor.shape, AliasShape):
            body.append(f"{SERIALIZER_NAME}(self.value, out)")

        elif isinstance(descriptor.shape, RecordShape):
            body.extend(_write_fields("self", descriptor.shape.fields))

        elif isinstance(descriptor.shape, ChoiceShape):
            body.extend(_write_dispatch(descriptor.shape.variants))

        self.scope.blank()
        self.scope.add(helper.new_function(SERIALIZER_NAME, SERIALIZER_PARAMETERS))
        with self.scope.indent():
            for line in body or ["pass"]:
                self.scope.add(line)


def _write_token(token: str) -> str:
    return f"{SERIALIZER_NAME}({helper.new_string_literal(token)}, out)"


def _write_fields(owner: str, fields: Iterable[RecordField]) -> list[str]:
    lines: list[str] = []
    for record_field in fields:
        if record_field.flag_token is not None:
            lines.append(f"if {owner}.{record_field.name}:")
            lines.append(f"    {_write_token(record_field.flag_token)}")
        elif record_field.optional:
            lines.append(f"if {owner}.{record_field.name} is not None:")
            lines.append(f"    {SERIALIZER_NAME}({owner}.{record_field.name}, out)")
        else:
            lines.append(f"{SERIALIZER_NAME}({owner}.{record_field.name}, out)")
    return lines


def _write_dispatch(variants: Sequence[MarkerVariant | WrapperVariant | InlineRecordVariant]) -> list[str]:
    """Dispatch on the variant that is set. Markers without a token write nothing and get no branch."""
    branches: list[tuple[str, list[str]]] = []

    for variant in variants:
        body: list[str] = []
        if variant.token is not None:
            body.append(_write_token(variant.token))

        if isinstance(variant, WrapperVariant):
            body.append(f"{SERIALIZER_NAME}(variant.inner, out)")
        elif isinstance(variant, InlineRecordVariant):
            body.extend(_write_fields("variant", variant.fields))

        if body:
            branches.append((variant.name, body))

    if not branches:
        return []

    lines = ["variant = self.variant"]
    for i, (name, body) in enumerate(branches):
        keyword = "if" if i == 0 else "elif"
        lines.append(f"{keyword} isinstance(variant, self.{name}):")
        lines.extend(f"    {line}" for line in body)
    return lines


def generate_types(
    commands: Iterable[tuple[str, CommandDefinition]],
    scope: Scope,
    path_prefix: str = DEFAULT_TYPES_MODULE,
    placement: PlacementType = "nested",
    runtime_module: str = DEFAULT_RUNTIME_MODULE,
) -> TypeRegistry:
    """Generate the argument types module of a command set.

    All commands are flattened and registered before anything is written, so every reference is
    resolved against the complete registry.

    Args:
        commands (Iterable[tuple[str, CommandDefinition]]): Pairs of command name and definition, in processing order.
        scope (Scope): The scope to write the module into.
        path_prefix (str, optional): The name of the generated types module. Defaults to 'arg_types'.
        placement (PlacementType, optional): How namespace paths are chosen. Defaults to 'nested'.
        runtime_module (str, optional): The module generated code imports its runtime support from.

    Returns:
        TypeRegistry: The registry of all generated types, for resolving types in other generated modules.
    """
    registry = TypeRegistry(path_prefix, placement)

    descriptors = flatten_commands(commands)
    for descriptor in descriptors:
        registry.insert(descriptor)

    logger.info("Synthesized %d argument types, %d after deduplication", len(descriptors), len(registry))

    namespace = build_namespace(registry)

    writer = TypesWriter(registry, scope, runtime_module)
    writer.write_header()
    writer.write_namespace(namespace)

    return registry
