"""Model and parser of the Redis `commands.json` command-set description."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from redis_codegen.redis_types import RedisArgType

logger = logging.getLogger(__name__)


class CommandSetError(ValueError):
    """Raised when a command set description is malformed."""

    def __init__(self, path: str, message: str):
        self.path = path
        super().__init__(f"{path}: {message}")


@dataclass(frozen=True)
class CommandArgument:
    """One argument of a command, possibly with nested sub-arguments (`oneof` and `block`)."""

    name: str
    type: str
    token: str | None = None
    optional: bool = False
    multiple: bool = False
    multiple_token: bool = False
    key_spec_index: int | None = None
    arguments: tuple[CommandArgument, ...] = ()

    @property
    def is_composite(self) -> bool:
        return self.type in RedisArgType.COMPOSITE


@dataclass(frozen=True)
class CommandDefinition:
    """Everything `commands.json` states about a single command."""

    summary: str = ""
    since: str = ""
    group: str = ""
    complexity: str | None = None
    deprecated_since: str | None = None
    replaced_by: str | None = None
    history: tuple[tuple[str, str], ...] = ()
    acl_categories: tuple[str, ...] = ()
    arity: int = 0
    arguments: tuple[CommandArgument, ...] = ()
    command_flags: tuple[str, ...] = ()
    doc_flags: tuple[str, ...] = ()


@dataclass
class CommandSet:
    """All commands of a command set, by command name."""

    commands: dict[str, CommandDefinition] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.commands)

    def __iter__(self) -> Iterator[str]:
        return iter(self.commands)

    def __getitem__(self, name: str) -> CommandDefinition:
        return self.commands[name]

    def sorted_commands(self) -> list[tuple[str, CommandDefinition]]:
        """The commands, ordered by group and then by name.

        Returns:
            list[tuple[str, CommandDefinition]]: Pairs of command name and definition.
        """
        return sorted(self.commands.items(), key=lambda item: (item[1].group, item[0]))


def _expect(value: Any, kind: type | tuple[type, ...], path: str) -> Any:
    if not isinstance(value, kind) or (kind is int and isinstance(value, bool)):
        names = kind.__name__ if isinstance(kind, type) else " or ".join(k.__name__ for k in kind)
        raise CommandSetError(path, f"expected {names}, got {type(value).__name__}")
    return value


def _optional_str(data: Mapping[str, Any], key: str, path: str) -> str | None:
    value = data.get(key)
    if value is None:
        return None
    return _expect(value, str, f"{path}.{key}")


def _str_list(data: Mapping[str, Any], key: str, path: str) -> tuple[str, ...]:
    values = _expect(data.get(key, []), list, f"{path}.{key}")
    return tuple(_expect(value, str, f"{path}.{key}[{i}]") for i, value in enumerate(values))


def parse_argument(data: Any, path: str) -> CommandArgument:
    """Parse one argument and all of its sub-arguments.

    Args:
        data (Any): The JSON object of the argument.
        path (str): The JSON path of the argument, used in error messages.

    Raises:
        CommandSetError: If the argument is malformed.

    Returns:
        CommandArgument: The parsed argument.
    """
    _expect(data, dict, path)

    if "name" not in data:
        raise CommandSetError(path, "missing field 'name'")
    if "type" not in data:
        raise CommandSetError(path, "missing field 'type'")

    name = _expect(data["name"], str, f"{path}.name")
    arg_type = _expect(data["type"], str, f"{path}.type")

    # An empty token is the same as no token at all.
    token = _optional_str(data, "token", path) or None

    sub_arguments: tuple[CommandArgument, ...] = ()
    if arg_type in RedisArgType.COMPOSITE:
        if "arguments" not in data:
            raise CommandSetError(path, f"missing field 'arguments' for argument type '{arg_type}'")
        raw_arguments = _expect(data["arguments"], list, f"{path}.arguments")
        sub_arguments = tuple(parse_argument(arg, f"{path}.arguments[{i}]") for i, arg in enumerate(raw_arguments))

    key_spec_index = data.get("key_spec_index")
    if key_spec_index is not None:
        _expect(key_spec_index, int, f"{path}.key_spec_index")

    return CommandArgument(
        name=name,
        type=arg_type,
        token=token,
        optional=_expect(data.get("optional", False), bool, f"{path}.optional"),
        multiple=_expect(data.get("multiple", False), bool, f"{path}.multiple"),
        multiple_token=_expect(data.get("multiple_token", False), bool, f"{path}.multiple_token"),
        key_spec_index=key_spec_index,
        arguments=sub_arguments,
    )


def parse_command(data: Any, path: str) -> CommandDefinition:
    """Parse the definition of a single command.

    Args:
        data (Any): The JSON object of the command.
        path (str): The JSON path of the command, used in error messages.

    Raises:
        CommandSetError: If the definition is malformed.

    Returns:
        CommandDefinition: The parsed definition.
    """
    _expect(data, dict, path)

    history: list[tuple[str, str]] = []
    for i, entry in enumerate(_expect(data.get("history", []), list, f"{path}.history")):
        entry_path = f"{path}.history[{i}]"
        _expect(entry, list, entry_path)
        if len(entry) != 2:
            raise CommandSetError(entry_path, f"expected a pair of version and description, got {len(entry)} items")
        history.append((_expect(entry[0], str, f"{entry_path}[0]"), _expect(entry[1], str, f"{entry_path}[1]")))

    arguments = _expect(data.get("arguments", []), list, f"{path}.arguments")

    return CommandDefinition(
        summary=_expect(data.get("summary", ""), str, f"{path}.summary"),
        since=_expect(data.get("since", ""), str, f"{path}.since"),
        group=_expect(data.get("group", ""), str, f"{path}.group"),
        complexity=_optional_str(data, "complexity", path),
        deprecated_since=_optional_str(data, "deprecated_since", path),
        replaced_by=_optional_str(data, "replaced_by", path),
        history=tuple(history),
        acl_categories=_str_list(data, "acl_categories", path),
        arity=_expect(data.get("arity", 0), int, f"{path}.arity"),
        arguments=tuple(parse_argument(arg, f"{path}.arguments[{i}]") for i, arg in enumerate(arguments)),
        command_flags=_str_list(data, "command_flags", path),
        doc_flags=_str_list(data, "doc_flags", path),
    )


def parse_command_set(data: Any) -> CommandSet:
    """Parse a decoded `commands.json` document.

    Args:
        data (Any): The decoded JSON document, an object mapping command names to definitions.

    Raises:
        CommandSetError: If the document is malformed. The error names the JSON path of the offending value.

    Returns:
        CommandSet: The parsed command set.
    """
    _expect(data, dict, "$")

    command_set = CommandSet()
    for name, definition in data.items():
        command_set.commands[name] = parse_command(definition, f"$[{json.dumps(name)}]")

    logger.debug("Parsed %d commands", len(command_set))
    return command_set


def load_command_set(path: str | Path) -> CommandSet:
    """Load and parse a `commands.json` file.

    Args:
        path (str | Path): The path of the file.

    Raises:
        CommandSetError: If the file is not valid JSON or describes a malformed command set.

    Returns:
        CommandSet: The parsed command set.
    """
    text = Path(path).read_text(encoding="utf-8")
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise CommandSetError("$", f"invalid JSON in {path}: {e}") from e

    return parse_command_set(data)
