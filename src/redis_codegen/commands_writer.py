"""Emits the Python module with one builder method per command."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from redis_codegen import helper
from redis_codegen.commands import CommandArgument, CommandDefinition
from redis_codegen.redis_types import (
    COMMAND_BLACKLIST,
    COMMAND_FLAGS,
    COMMAND_GROUPS,
    COMMAND_NAME_OVERWRITE,
    DEFAULT_RUNTIME_MODULE,
    REDIS_PARAMETER_TO_PYTHON,
)
from redis_codegen.registry import TypeRegistry
from redis_codegen.scope import Scope
from redis_codegen.writer_dto import CommandInfo, ParameterInfo

logger = logging.getLogger(__name__)

COMMANDS_CLASS_NAME = "Commands"

# Local variable of every builder body.
COMMAND_VARIABLE = "cmd"

# Doc flag of commands whose builders are marked deprecated.
DEPRECATED_DOC_FLAG = "deprecated"


def build_docs(command_name: str, definition: CommandDefinition) -> list[str]:
    """Build the docstring lines of a command builder.

    Args:
        command_name (str): The command name.
        definition (CommandDefinition): The command definition.

    Returns:
        list[str]: The docstring lines.
    """
    docs = [
        command_name,
        "",
        definition.summary,
        "",
        f"Since: Redis {definition.since}",
        f"Group: {COMMAND_GROUPS.get(definition.group, definition.group)}",
    ]

    if definition.deprecated_since is not None:
        docs.append(f"Deprecated Since: Redis {definition.deprecated_since}")

    if definition.replaced_by is not None:
        docs.append(f"Replaced By: {definition.replaced_by}")

    if definition.complexity is not None:
        docs.append(f"Complexity: {definition.complexity}")

    if definition.command_flags:
        docs.append("CommandFlags:")
        for command_flag in definition.command_flags:
            docs.append(f"* {COMMAND_FLAGS.get(command_flag.lower(), command_flag)}")

    if definition.acl_categories:
        docs.append("ACL Categories:")
        for acl_category in definition.acl_categories:
            docs.append(f"* {acl_category}")

    return docs


def deprecation_message(definition: CommandDefinition) -> str | None:
    """The message of the `@deprecated` decorator of a builder, or None if redis does not deprecate the command."""
    if DEPRECATED_DOC_FLAG not in definition.doc_flags:
        return None

    if definition.deprecated_since is not None:
        return f"Deprecated in redis since redis version {definition.deprecated_since}."
    return "Deprecated in redis itself."


def method_name_for(command_name: str) -> str:
    """The builder method name of a command, e.g. 'client_kill' for 'CLIENT KILL'."""
    if command_name in COMMAND_NAME_OVERWRITE:
        return COMMAND_NAME_OVERWRITE[command_name]
    return helper.to_snake(command_name)


def map_argument(command_name: str, argument: CommandArgument, registry: TypeRegistry, used: set[str]) -> ParameterInfo | None:
    """Map a top-level argument to a builder parameter.

    A tokened argument uses the type synthesized for it, which writes the token itself. Without such a
    type, keys, patterns and strings accept any `RedisArg`, integers and doubles their number type, and
    oneofs and blocks the type synthesized for them.

    Args:
        command_name (str): The command the argument belongs to.
        argument (CommandArgument): The argument.
        registry (TypeRegistry): The registry of synthesized types.
        used (set[str]): The parameter names already taken in this builder.

    Returns:
        ParameterInfo | None: The parameter, or None if the argument can not be mapped.
    """
    type_hint: str | None = None
    token = argument.token

    if argument.token is not None:
        entry = registry.lookup((command_name, helper.to_camel(argument.token)))
        if entry is not None:
            type_hint = entry.qualified_name
            token = None
        else:
            logger.debug("Missing type for %s.%s, falling back to its value type", command_name, argument.name)

    if type_hint is None:
        if argument.type in REDIS_PARAMETER_TO_PYTHON:
            type_hint = REDIS_PARAMETER_TO_PYTHON[argument.type]

        elif argument.is_composite:
            entry = registry.lookup((command_name, helper.to_camel(argument.name)))
            if entry is not None:
                type_hint = entry.qualified_name

    if type_hint is None:
        logger.debug("Skipping argument %s.%s of type '%s'", command_name, argument.name, argument.type)
        return None

    return ParameterInfo(helper.unique_name(helper.to_snake(argument.name), used), type_hint, argument, token)


def new_command_info(command_name: str, definition: CommandDefinition, registry: TypeRegistry) -> CommandInfo:
    """Collect everything needed to write the builder of a command."""
    # Parameters must not shadow the builder's local variable or the types module.
    used = {COMMAND_VARIABLE, registry.path_prefix}
    parameters: list[ParameterInfo] = []

    for argument in definition.arguments:
        parameter = map_argument(command_name, argument, registry, used)
        if parameter is not None:
            parameters.append(parameter)

    return CommandInfo(
        command_name=command_name,
        method_name=method_name_for(command_name),
        definition=definition,
        parameters=parameters,
        docs=build_docs(command_name, definition),
    )


class CommandsWriter:
    """Writes the `Commands` class, with a static builder method per command."""

    def __init__(
        self,
        registry: TypeRegistry,
        scope: Scope | None = None,
        runtime_module: str = DEFAULT_RUNTIME_MODULE,
        package: str = "",
    ):
        """Initialize the writer.

        Args:
            registry (TypeRegistry): The registry returned when generating the types module.
            scope (Scope | None, optional): The scope to write into. Defaults to a new scope.
            runtime_module (str, optional): The module that generated code imports its runtime support from.
            package (str, optional): The package of the generated modules, used to import the types module.
        """
        self.registry = registry
        self.scope = scope if scope is not None else Scope(name=COMMANDS_CLASS_NAME)
        self.runtime_module = runtime_module
        self.package = package
        self._method_names: set[str] = set()

    def write_header(self, uses_deprecated: bool = False):
        """Write the module docstring and imports.

        Args:
            uses_deprecated (bool, optional): Whether any builder is marked deprecated. Defaults to False.
        """
        self.scope.add('"""Builders of Redis commands.')
        self.scope.blank()
        self.scope.add("Generated by redis-codegen, do not edit.")
        self.scope.add('"""')
        self.scope.blank()
        self.scope.add("from __future__ import annotations")
        self.scope.blank()
        self.scope.add("from collections.abc import Sequence")
        self.scope.blank()
        if uses_deprecated:
            self.scope.add("from typing_extensions import deprecated")
            self.scope.blank()
        self.scope.add(f"from {self.runtime_module} import Cmd, RedisArg")
        if self.package:
            self.scope.add(f"from {self.package} import {self.registry.path_prefix}")
        else:
            self.scope.add(f"import {self.registry.path_prefix}")

    def write_commands(self, commands: Iterable[tuple[str, CommandDefinition]]):
        """Write the `Commands` class. Blacklisted commands are skipped.

        Args:
            commands (Iterable[tuple[str, CommandDefinition]]): Pairs of command name and definition, in output order.
        """
        self.scope.blank()
        self.scope.blank()
        self.scope.add(helper.new_class_declaration(COMMANDS_CLASS_NAME))
        with self.scope.indent():
            self.scope.add(helper.new_docstring("Builders of every Redis command, each returning the `Cmd` to send."))

            for command_name, definition in commands:
                if command_name in COMMAND_BLACKLIST:
                    logger.debug("Skipping blacklisted command %s", command_name)
                    continue

                self.write_command(new_command_info(command_name, definition, self.registry))

    def write_command(self, info: CommandInfo):
        """Write the builder method of a single command."""
        method_name = helper.unique_name(info.method_name, self._method_names)

        self.scope.blank()
        self.scope.add(helper.new_decorator("staticmethod"))
        message = deprecation_message(info.definition)
        if message is not None:
            self.scope.add(helper.new_decorator("deprecated", [helper.new_string_literal(message)]))
        self.scope.add(helper.new_function(method_name, info.signature_parameters(), "Cmd"))

        with self.scope.indent():
            for line in helper.new_docstring_lines(info.docs):
                self.scope.add(line)

            name_parts = helper.join_parameters([helper.new_string_literal(part) for part in info.name_parts])
            self.scope.add(f"{COMMAND_VARIABLE} = Cmd({name_parts})")

            for parameter in info.parameters:
                self._write_parameter(parameter)

            self.scope.add(f"return {COMMAND_VARIABLE}")

    def _write_parameter(self, parameter: ParameterInfo):
        if parameter.token is None:
            self.scope.add(f"{COMMAND_VARIABLE}.arg({parameter.name})")
            return

        write = f"{COMMAND_VARIABLE}.arg({helper.new_string_literal(parameter.token)}).arg({parameter.name})"
        if parameter.optional:
            self.scope.add(f"if {parameter.name} is not None:")
            with self.scope.indent():
                self.scope.add(write)
        else:
            self.scope.add(write)


def generate_commands(
    commands: Iterable[tuple[str, CommandDefinition]],
    registry: TypeRegistry,
    scope: Scope,
    runtime_module: str = DEFAULT_RUNTIME_MODULE,
    package: str = "",
) -> None:
    """Generate the command builders module, resolving argument types through the registry of the types module.

    Args:
        commands (Iterable[tuple[str, CommandDefinition]]): Pairs of command name and definition, in output order.
        registry (TypeRegistry): The registry returned by `generate_types`.
        scope (Scope): The scope to write the module into.
        runtime_module (str, optional): The module generated code imports its runtime support from.
        package (str, optional): The package of the generated modules.
    """
    commands = list(commands)
    uses_deprecated = any(
        name not in COMMAND_BLACKLIST and deprecation_message(definition) is not None for name, definition in commands
    )

    writer = CommandsWriter(registry, scope, runtime_module, package)
    writer.write_header(uses_deprecated)
    writer.write_commands(commands)
