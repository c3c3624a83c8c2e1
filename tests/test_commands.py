"""Tests for parsing the commands.json command-set description."""

from __future__ import annotations

import json

import pytest

from redis_codegen.commands import CommandSetError, load_command_set, parse_argument, parse_command_set
from redis_codegen.redis_types import RedisArgType


class TestParseCommandSet:
    """Tests against the fixture command set."""

    def test_all_commands_parsed(self, command_set):
        assert "SET" in command_set
        assert "CLIENT NO-TOUCH" in command_set
        assert len(command_set) == 12

    def test_definition_metadata(self, command_set):
        definition = command_set["SETEX"]
        assert definition.group == "string"
        assert definition.since == "2.0.0"
        assert definition.deprecated_since == "2.6.12"
        assert definition.replaced_by == "`SET` with the `EX` argument"
        assert definition.command_flags == ("write", "denyoom")
        assert definition.doc_flags == ("deprecated",)
        assert definition.arity == 4

    def test_history(self, command_set):
        assert command_set["EXPIRE"].history == (("7.0.0", "Added options: `NX`, `XX`, `GT` and `LT`."),)

    def test_nested_arguments(self, command_set):
        trim = command_set["XTRIM"].arguments[1]
        assert trim.type == RedisArgType.BLOCK
        assert trim.is_composite
        assert [arg.name for arg in trim.arguments] == ["strategy", "operator", "threshold", "count"]

        operator = trim.arguments[1]
        assert operator.optional
        assert [arg.token for arg in operator.arguments] == ["=", "~"]

    def test_argument_flags(self, command_set):
        key = command_set["DEL"].arguments[0]
        assert key.type == RedisArgType.KEY
        assert key.multiple
        assert key.key_spec_index == 0
        assert not key.optional
        assert key.token is None

    def test_sorted_commands(self, command_set):
        names = [name for name, _ in command_set.sorted_commands()]
        assert names == [
            "CLIENT NO-TOUCH",
            "DEL",
            "EXPIRE",
            "MOVE",
            "PEXPIRE",
            "SCAN",
            "GEOSEARCH",
            "LPOS",
            "XTRIM",
            "GETEX",
            "SET",
            "SETEX",
        ]


def test_empty_token_is_no_token():
    argument = parse_argument({"name": "value", "type": "string", "token": ""}, "$")
    assert argument.token is None


def test_unknown_argument_type_is_kept():
    """Unsupported types are not a parse error, they are skipped when types are synthesized."""
    argument = parse_argument({"name": "id", "type": "something-new"}, "$")
    assert argument.type == "something-new"


class TestErrors:
    """Malformed input raises CommandSetError naming the offending path."""

    def test_not_an_object(self):
        with pytest.raises(CommandSetError, match=r"^\$: expected dict"):
            parse_command_set([])

    def test_missing_name(self):
        data = {"GET": {"arguments": [{"type": "key"}]}}
        with pytest.raises(CommandSetError) as info:
            parse_command_set(data)
        assert info.value.path == '$["GET"].arguments[0]'
        assert "missing field 'name'" in str(info.value)

    def test_wrong_type_in_nested_argument(self):
        data = {
            "SET": {
                "arguments": [
                    {"name": "condition", "type": "oneof", "arguments": [{"name": "nx", "type": "pure-token", "optional": "yes"}]}
                ]
            }
        }
        with pytest.raises(CommandSetError) as info:
            parse_command_set(data)
        assert info.value.path == '$["SET"].arguments[0].arguments[0].optional'

    def test_composite_without_arguments(self):
        with pytest.raises(CommandSetError, match="missing field 'arguments'"):
            parse_argument({"name": "trim", "type": "block"}, "$")

    def test_bool_is_not_an_int(self):
        with pytest.raises(CommandSetError, match="arity"):
            parse_command_set({"GET": {"arity": True}})

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "commands.json"
        path.write_text("{not json")
        with pytest.raises(CommandSetError, match="invalid JSON"):
            load_command_set(path)

    def test_load_roundtrip(self, tmp_path):
        path = tmp_path / "commands.json"
        path.write_text(json.dumps({"PING": {"summary": "Returns the server's liveliness response.", "group": "connection"}}))
        command_set = load_command_set(path)
        assert command_set["PING"].arguments == ()
        assert command_set["PING"].group == "connection"
