"""Helper functionality that is used in other modules of this package."""

from __future__ import annotations

import json
import keyword
import re
from collections.abc import Sequence
from dataclasses import dataclass
from typing_extensions import override

# Argument names made only of a symbol get a spelled-out type name.
SYMBOL_NAMES: dict[str, str] = {
    "*": "Star",
    "=": "Equals",
    "~": "Approx",
    "$": "LastId",
}

# Names the generated modules import or declare themselves, which must not be shadowed.
RESERVED_NAMES = frozenset(
    {
        "annotations",
        "bool",
        "bytes",
        "Cmd",
        "dataclass",
        "deprecated",
        "float",
        "int",
        "RedisArg",
        "RedisWrite",
        "Sequence",
        "str",
        "write_redis_args",
    }
)

_NON_IDENTIFIER = re.compile(r"[^0-9A-Za-z]+")


def split_words(name: str) -> list[str]:
    """Split a raw name into lower case words.

    Word boundaries are any non-alphanumeric character and lower-to-upper case transitions,
    so 'sorted-set', 'sortedSet' and 'SORTED_SET' all give ['sorted', 'set'].
    A run of capitals is kept as one word, e.g. 'GETEX' gives ['getex'].

    Args:
        name (str): The raw name.

    Returns:
        list[str]: The words, in lower case.
    """
    normalized = _NON_IDENTIFIER.sub("_", name)

    out: list[str] = []
    for i, c in enumerate(normalized):
        if c.isupper():
            if i > 0 and (
                normalized[i - 1].islower() or (i + 1 < len(normalized) and normalized[i + 1].islower())
            ):
                out.append("_")
            out.append(c.lower())
        else:
            out.append(c)

    return [word for word in "".join(out).split("_") if word]


def sanitize_name(name: str) -> str:
    """Sanitize a name to avoid Python keywords and names reserved by generated modules.

    If the name is a Python keyword or reserved, append an underscore.
    E.g. 'del' becomes 'del_', 'int' becomes 'int_'.
    Names that would start with a digit get a leading underscore, an empty name becomes '_'.

    Args:
        name (str): The original name.

    Returns:
        str: The sanitized name.
    """
    if not name:
        return "_"

    if name[0].isdigit():
        name = f"_{name}"

    if keyword.iskeyword(name) or name in RESERVED_NAMES:
        return f"{name}_"
    return name


def to_snake(name: str) -> str:
    """Converts a raw name to a `snake_case` field or namespace identifier.

    E.g. 'unix-time-seconds' becomes 'unix_time_seconds', 'DEL' becomes 'del_'.

    Args:
        name (str): The raw name.

    Returns:
        str: The snake case identifier.
    """
    return sanitize_name("_".join(split_words(name)))


def to_camel(name: str) -> str:
    """Converts a raw name or wire token to a `CamelCase` type identifier.

    E.g. 'EX' becomes 'Ex', 'unix-time-seconds' becomes 'UnixTimeSeconds' and '*' becomes 'Star'.

    Args:
        name (str): The raw name.

    Returns:
        str: The camel case identifier.
    """
    if name in SYMBOL_NAMES:
        return SYMBOL_NAMES[name]

    return sanitize_name("".join(word[:1].upper() + word[1:] for word in split_words(name)))


def unique_name(name: str, used: set[str]) -> str:
    """Return `name`, or `name` with the first free numeric suffix if it is already used.

    The returned name is added to `used`.
    """
    candidate = name
    suffix = 2
    while candidate in used:
        candidate = f"{name}{suffix}"
        suffix += 1

    used.add(candidate)
    return candidate


def new_string_literal(text: str) -> str:
    """Create a Python string literal for arbitrary text.

    Args:
        text (str): The text.

    Returns:
        str: The quoted and escaped literal.
    """
    return json.dumps(text)


def escape_docstring(text: str) -> str:
    """Escape text so it can be placed inside a triple quoted docstring."""
    escaped = text.replace("\\", "\\\\").replace('"""', '\\"\\"\\"')
    if escaped.endswith('"'):
        escaped = f"{escaped[:-1]}\\\""
    return escaped


def new_docstring(text: str) -> str:
    """Create a single line docstring.

    Args:
        text (str): The text of the docstring.

    Returns:
        str: The docstring, including its quotes.
    """
    return f'"""{escape_docstring(text)}"""'


def new_docstring_lines(lines: Sequence[str]) -> list[str]:
    """Create a docstring that spans several lines.

    The first line is placed right after the opening quotes, the closing quotes get a line of their own.

    Args:
        lines (Sequence[str]): The lines of the docstring. Empty strings become empty lines.

    Returns:
        list[str]: The docstring lines, including the quotes.
    """
    if len(lines) <= 1:
        return [new_docstring(lines[0] if lines else "")]

    out = [f'"""{escape_docstring(lines[0])}']
    out.extend(escape_docstring(line) for line in lines[1:])
    out.append('"""')
    return out


def join_parameters(parameters: Sequence[TypeHintedVariable | str] | None) -> str:
    """Joins parameters by means of ', '.

    Args:
        parameters (Sequence[TypeHintedVariable | str] | None): The parameters to join.

    Returns:
        str: The joined parameters.
    """
    if parameters:
        return ", ".join(str(p) for p in parameters if p)

    else:
        return ""


@dataclass
class TypeHintedVariable:
    """A class that represents a type hinted variable, e.g. a parameter or a dataclass field."""

    name: str
    type_hint: str
    default: str = ""

    @override
    def __str__(self) -> str:
        """String representation of this object.

        Returns:
            str: E.g. 'ttl: int | None = None'.
        """
        if self.default:
            return f"{self.name}: {self.type_hint} = {self.default}"

        return f"{self.name}: {self.type_hint}"


def new_function(
    name: str,
    parameters: Sequence[TypeHintedVariable | str] | None = None,
    return_type: str | None = None,
) -> str:
    """Create the header line of a function definition.

    Args:
        name (str): The function name.
        parameters (Sequence[TypeHintedVariable | str] | None, optional): The function parameters, if any.
            Defaults to None.
        return_type (str | None, optional): The function's return type. Defaults to None.

    Returns:
        str: The function header, ending in a colon.
    """
    if return_type is None:
        return_type = "None"

    arguments = join_parameters(parameters)
    return f"def {name}({arguments}) -> {return_type}:"


def new_decorator(name: str, parameters: Sequence[TypeHintedVariable | str] | None = None) -> str:
    """Create a new decorator.

    Args:
        name (str): The name of the decorator.
        parameters (Sequence[TypeHintedVariable | str] | None, optional): The parameters (args, kwargs) of the
            decorator, if any. Defaults to None.

    Returns:
        str: The decorator string.
    """
    if parameters:
        return f"@{name}({join_parameters(parameters)})"

    else:
        return f"@{name}"


def new_class_declaration(name: str, parameters: Sequence[str] | None = None) -> str:
    """Creates a string for declaring a class.

    If no parameters are provided, the output is just 'class SomeClass:'.

    Args:
        name (str): The class name.
        parameters (Sequence[str] | None, optional):
            A list of parameters that are part of the class declaration. Defaults to None.

    Returns:
        str: The class declaration.
    """
    if parameters:
        return f"class {name}({join_parameters(parameters)}):"
    else:
        return f"class {name}:"


def new_union(members: Sequence[str]) -> str:
    """Join type names to a union, e.g. 'Ex | Px | Persist'."""
    return " | ".join(members)
