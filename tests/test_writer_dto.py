"""Tests for writer_dto.py - Data Transfer Objects.

These tests verify the parameter types and the signature order of command builders.
"""

from __future__ import annotations

from redis_codegen.commands import CommandArgument, CommandDefinition
from redis_codegen.writer_dto import CommandInfo, ParameterInfo


def parameter(name: str, type_hint: str = "RedisArg", **kwargs) -> ParameterInfo:
    return ParameterInfo(name, type_hint, CommandArgument(name=name, type="string", **kwargs))


class TestParameterInfo:
    """Tests for ParameterInfo."""

    def test_required(self):
        info = parameter("key")
        assert info.full_type_hint == "RedisArg"
        assert str(info.to_parameter()) == "key: RedisArg"

    def test_optional(self):
        info = parameter("condition", "arg_types.set.Condition", optional=True)
        assert info.optional
        assert info.full_type_hint == "arg_types.set.Condition | None"
        assert str(info.to_parameter()) == "condition: arg_types.set.Condition | None = None"

    def test_multiple(self):
        info = parameter("key", multiple=True)
        assert info.full_type_hint == "Sequence[RedisArg]"

    def test_optional_multiple(self):
        info = parameter("member", optional=True, multiple=True)
        assert info.full_type_hint == "Sequence[RedisArg] | None"


class TestCommandInfo:
    """Tests for CommandInfo."""

    def test_name_parts(self):
        info = CommandInfo("CLIENT NO-TOUCH", "client_no_touch", CommandDefinition())
        assert info.name_parts == ["CLIENT", "NO-TOUCH"]

    def test_all_required_are_positional(self):
        info = CommandInfo("SETEX", "setex", CommandDefinition(), [parameter("key"), parameter("value")])
        assert [str(p) for p in info.signature_parameters()] == ["key: RedisArg", "value: RedisArg"]

    def test_keyword_only_from_first_optional(self):
        parameters = [
            parameter("key"),
            parameter("condition", optional=True),
            parameter("threshold"),
            parameter("limit", optional=True),
        ]
        info = CommandInfo("X", "x", CommandDefinition(), parameters)

        assert [str(p) for p in info.signature_parameters()] == [
            "key: RedisArg",
            "*",
            "condition: RedisArg | None = None",
            "threshold: RedisArg",
            "limit: RedisArg | None = None",
        ]
