"""Runtime support imported by generated modules.

Generated argument types serialize themselves through `write_redis_args`, and generated
command builders collect their arguments in a `Cmd`.
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from typing import Protocol, runtime_checkable

from typing_extensions import override

# Values that can be passed wherever a command takes a key, a pattern or a string.
RedisArg = str | bytes | int | float


class RedisWrite(Protocol):
    """Anything that collects the arguments of a command."""

    def write_arg(self, arg: bytes) -> None: ...


@runtime_checkable
class ToRedisArgs(Protocol):
    """A value that knows how to write itself as command arguments, e.g. every generated argument type."""

    def write_redis_args(self, out: RedisWrite) -> None: ...


def write_redis_args(value: object, out: RedisWrite) -> None:
    """Write a value as command arguments.

    Args:
        value (object): A generated argument type, str, bytes, int, float, bool, or a sequence of those.
        out (RedisWrite): The argument collector.

    Raises:
        TypeError: If the value can not be written as an argument.
    """
    if isinstance(value, ToRedisArgs):
        value.write_redis_args(out)

    # bool before int: True is an int as well.
    elif isinstance(value, bool):
        out.write_arg(b"1" if value else b"0")

    elif isinstance(value, (bytes, bytearray, memoryview)):
        out.write_arg(bytes(value))

    elif isinstance(value, str):
        out.write_arg(value.encode("utf-8"))

    elif isinstance(value, int):
        out.write_arg(str(value).encode("ascii"))

    elif isinstance(value, float):
        out.write_arg(repr(value).encode("ascii"))

    elif isinstance(value, Sequence):
        for item in value:
            write_redis_args(item, out)

    else:
        raise TypeError(f"Can not write a value of type {type(value).__name__} as a Redis argument.")


class Cmd:
    """The arguments of one command, starting with the command name.

    E.g. `Cmd("CLIENT", "KILL").arg("ID").arg(5)` holds `[b"CLIENT", b"KILL", b"ID", b"5"]`.
    """

    def __init__(self, *name: str):
        self.args: list[bytes] = []
        for part in name:
            self.write_arg(part.encode("utf-8"))

    def write_arg(self, arg: bytes) -> None:
        self.args.append(bytes(arg))

    def arg(self, value: object) -> Cmd:
        """Append a value as arguments. `None` stands for an omitted optional argument and is skipped.

        Returns:
            Cmd: This command, for chaining.
        """
        if value is not None:
            write_redis_args(value, self)
        return self

    def pack(self) -> bytes:
        """Encode the command as a RESP request, an array of bulk strings."""
        out = [f"*{len(self.args)}\r\n".encode("ascii")]
        for arg in self.args:
            out.append(f"${len(arg)}\r\n".encode("ascii"))
            out.append(arg)
            out.append(b"\r\n")
        return b"".join(out)

    def __iter__(self) -> Iterator[bytes]:
        return iter(self.args)

    def __len__(self) -> int:
        return len(self.args)

    @override
    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Cmd):
            return NotImplemented
        return self.args == other.args

    @override
    def __repr__(self) -> str:
        return f"Cmd({', '.join(repr(arg) for arg in self.args)})"
