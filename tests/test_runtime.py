"""Tests for the runtime support of generated modules."""

from __future__ import annotations

from dataclasses import dataclass

import pytest

from redis_codegen.runtime import Cmd, RedisWrite, write_redis_args


@dataclass
class Limit:
    """Written like a generated alias type."""

    value: int

    def write_redis_args(self, out: RedisWrite) -> None:
        write_redis_args("LIMIT", out)
        write_redis_args(self.value, out)


def written(value: object) -> list[bytes]:
    cmd = Cmd()
    write_redis_args(value, cmd)
    return cmd.args


class TestWriteRedisArgs:
    """Tests for write_redis_args."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("value", [b"value"]),
            ("hé", [b"h\xc3\xa9"]),
            (b"\x00raw", [b"\x00raw"]),
            (bytearray(b"ab"), [b"ab"]),
            (42, [b"42"]),
            (-1, [b"-1"]),
            (1.5, [b"1.5"]),
            (True, [b"1"]),
            (False, [b"0"]),
            (["a", 1], [b"a", b"1"]),
            (("a", ["b", "c"]), [b"a", b"b", b"c"]),
            ([], []),
        ],
    )
    def test_values(self, value, expected):
        assert written(value) == expected

    def test_generated_type_writes_itself(self):
        assert written(Limit(10)) == [b"LIMIT", b"10"]
        assert written([Limit(1), Limit(2)]) == [b"LIMIT", b"1", b"LIMIT", b"2"]

    @pytest.mark.parametrize("value", [None, {"a": 1}, object()])
    def test_unsupported_values(self, value):
        with pytest.raises(TypeError, match="Can not write a value of type"):
            written(value)


class TestCmd:
    """Tests for the Cmd argument collector."""

    def test_name_parts(self):
        assert Cmd("CLIENT", "NO-TOUCH").args == [b"CLIENT", b"NO-TOUCH"]

    def test_arg_chains(self):
        cmd = Cmd("XTRIM").arg("stream").arg(Limit(5))
        assert list(cmd) == [b"XTRIM", b"stream", b"LIMIT", b"5"]
        assert len(cmd) == 4

    def test_none_is_skipped(self):
        assert Cmd("SCAN").arg(0).arg(None).args == [b"SCAN", b"0"]

    def test_pack(self):
        assert Cmd("GET").arg("key").pack() == b"*2\r\n$3\r\nGET\r\n$3\r\nkey\r\n"

    def test_pack_binary(self):
        assert Cmd("SET").arg("k").arg(b"a\r\nb").pack() == b"*3\r\n$3\r\nSET\r\n$1\r\nk\r\n$4\r\na\r\nb\r\n"

    def test_equality(self):
        assert Cmd("DEL").arg(["a", "b"]) == Cmd("DEL", "a", "b")
        assert Cmd("DEL") != Cmd("GET")
        assert Cmd("DEL") != "DEL"

    def test_repr(self):
        assert repr(Cmd("GET").arg("key")) == "Cmd(b'GET', b'key')"
