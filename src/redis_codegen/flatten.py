"""Flattening of command argument trees into type descriptors."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

from redis_codegen.commands import CommandArgument, CommandDefinition
from redis_codegen.helper import to_camel, to_snake, unique_name
from redis_codegen.redis_types import REDIS_SCALAR_TO_PYTHON, RedisArgType
from redis_codegen.tokens import (
    InlineRecordVariant,
    MarkerVariant,
    RecordField,
    TypeDescriptor,
    TypeRef,
    Variant,
    WrapperVariant,
)

logger = logging.getLogger(__name__)

# Arguments waiting to be turned into descriptors, together with the scope they were found under.
WorkQueue = list[tuple[tuple[str, ...], CommandArgument]]


def flatten_command(command_name: str, arguments: Sequence[CommandArgument]) -> list[TypeDescriptor]:
    """Synthesize a descriptor for every argument of a command that needs its own type.

    Each top-level argument is processed with an explicit LIFO work queue, so nesting depth is not
    limited by the call stack. Oneofs, blocks, pure tokens and scalars with a token get a descriptor,
    untokened scalars are used as primitives by whoever references them.

    Args:
        command_name (str): The name of the command, the root of every scope.
        arguments (Sequence[CommandArgument]): The top-level arguments of the command.

    Returns:
        list[TypeDescriptor]: The descriptors, in the order they were produced.
    """
    descriptors: list[TypeDescriptor] = []

    for argument in arguments:
        queue: WorkQueue = [((command_name,), argument)]

        while queue:
            scope, arg = queue.pop()
            descriptor = _new_descriptor(scope, arg, queue)
            if descriptor is not None:
                descriptors.append(descriptor)

    return descriptors


def flatten_commands(commands: Iterable[tuple[str, CommandDefinition]]) -> list[TypeDescriptor]:
    """Flatten the arguments of all commands, in the given command order."""
    descriptors: list[TypeDescriptor] = []
    for command_name, definition in commands:
        descriptors.extend(flatten_command(command_name, definition.arguments))

    return descriptors


def _new_descriptor(scope: tuple[str, ...], arg: CommandArgument, queue: WorkQueue) -> TypeDescriptor | None:
    if arg.type == RedisArgType.ONEOF:
        variants = _choice_variants(arg.name, scope, arg.arguments, queue)
        return TypeDescriptor.new_choice(arg.name, arg.token, variants, scope)

    if arg.type == RedisArgType.BLOCK:
        fields = _record_fields((arg.name,), scope, arg.arguments, queue)
        return TypeDescriptor.new_record(arg.name, arg.token, fields, scope)

    if arg.type == RedisArgType.PURE_TOKEN:
        return TypeDescriptor.new_record(arg.name, arg.token, (), scope)

    if arg.type in REDIS_SCALAR_TO_PYTHON:
        if arg.token is None:
            return None
        return TypeDescriptor.new_alias(arg.name, arg.token, REDIS_SCALAR_TO_PYTHON[arg.type], scope)

    logger.debug("Skipping argument %s of unsupported type '%s'", ".".join((*scope, arg.name)), arg.type)
    return None


def _is_supported(arg: CommandArgument) -> bool:
    return arg.type in REDIS_SCALAR_TO_PYTHON or arg.is_composite or arg.type == RedisArgType.PURE_TOKEN


def _queue_child(
    ref: TypeRef,
    member_name: str,
    scope: tuple[str, ...],
    arg: CommandArgument,
    queue: WorkQueue,
    refs: set[TypeRef],
) -> TypeRef:
    """Queue a sub-argument that needs its own type and return the reference to it.

    A reference that a sibling already uses is moved under `member_name`, the field or variant name that
    refers to it. Every queued child thereby gets a fully qualified name of its own.
    """
    if ref in refs:
        ref = TypeRef((*ref.scope, member_name), ref.name)
    refs.add(ref)

    queue.append(((*scope, *ref.scope), arg))
    return ref


def _record_fields(
    owner_path: tuple[str, ...],
    scope: tuple[str, ...],
    arguments: Sequence[CommandArgument],
    queue: WorkQueue,
) -> tuple[RecordField, ...]:
    """Build the fields of a block, queueing every sub-argument that needs its own type.

    Args:
        owner_path (tuple[str, ...]): The path of the block relative to `scope`. This is the block name, or
            the oneof name and the variant name for a block that is inlined into a oneof.
        scope (tuple[str, ...]): The scope of the descriptor the fields belong to.
        arguments (Sequence[CommandArgument]): The sub-arguments of the block.
        queue (WorkQueue): The work queue of the current top-level argument.

    Returns:
        tuple[RecordField, ...]: The fields, in argument order.
    """
    child_scope = (*scope, *owner_path)
    fields: list[RecordField] = []
    used: set[str] = set()
    refs: set[TypeRef] = set()

    for sub in arguments:
        if not _is_supported(sub):
            logger.debug("Skipping field %s of unsupported type '%s'", ".".join((*child_scope, sub.name)), sub.type)
            continue

        if sub.token is None and sub.type == RedisArgType.PURE_TOKEN:
            logger.debug("Skipping pure token %s without a token", ".".join((*child_scope, sub.name)))
            continue

        field_name = unique_name(to_snake(sub.name), used)

        # Optional pure tokens become a flag on the record itself.
        if sub.token is not None and sub.type == RedisArgType.PURE_TOKEN and sub.optional:
            fields.append(RecordField(field_name, sub.name, "bool", flag_token=sub.token))
            continue

        if sub.token is None and not sub.is_composite:
            field_type: str | TypeRef = REDIS_SCALAR_TO_PYTHON[sub.type]
        else:
            ref = TypeRef(owner_path, to_camel(sub.token or sub.name))
            field_type = _queue_child(ref, field_name, scope, sub, queue, refs)

        fields.append(RecordField(field_name, sub.name, field_type, multiple=sub.multiple, optional=sub.optional))

    return tuple(fields)


def _choice_variants(
    owner_name: str,
    scope: tuple[str, ...],
    arguments: Sequence[CommandArgument],
    queue: WorkQueue,
) -> tuple[Variant, ...]:
    """Build the variants of a oneof, queueing every alternative that needs its own type.

    The sub-arguments of a block alternative are queued under the oneof and the variant name, so same-named
    children of different alternatives never share a fully qualified name.
    """
    variants: list[Variant] = []
    used: set[str] = set()
    refs: set[TypeRef] = set()

    for alternative in arguments:
        type_name = to_camel(alternative.token or alternative.name)

        if alternative.type == RedisArgType.PURE_TOKEN:
            variants.append(MarkerVariant(unique_name(type_name, used), alternative.token))

        elif alternative.type in REDIS_SCALAR_TO_PYTHON:
            variant_type = REDIS_SCALAR_TO_PYTHON[alternative.type]
            variants.append(
                WrapperVariant(unique_name(type_name, used), alternative.token, variant_type, alternative.multiple)
            )

        elif alternative.type == RedisArgType.ONEOF:
            variant_name = unique_name(type_name, used)
            variant_ref = _queue_child(TypeRef((owner_name,), type_name), variant_name, scope, alternative, queue, refs)
            variants.append(WrapperVariant(variant_name, alternative.token, variant_ref, alternative.multiple))

        elif alternative.type == RedisArgType.BLOCK:
            variant_name = unique_name(type_name, used)
            fields = _record_fields((owner_name, variant_name), scope, alternative.arguments, queue)
            variants.append(InlineRecordVariant(variant_name, alternative.token, fields))

        else:
            logger.debug(
                "Skipping alternative %s of unsupported type '%s'",
                ".".join((*scope, owner_name, alternative.name)),
                alternative.type,
            )

    return tuple(variants)
