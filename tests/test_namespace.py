"""Tests for building the namespace tree from the registry."""

from __future__ import annotations

import pytest

from redis_codegen.flatten import flatten_commands
from redis_codegen.namespace import Namespace, NamespaceError, build_namespace
from redis_codegen.registry import TypeRegistry, TypeRegistryEntry
from redis_codegen.tokens import MarkerVariant, TypeDescriptor


def marker_type(name: str, scope: tuple[str, ...]) -> TypeDescriptor:
    return TypeDescriptor.new_choice(name, None, (MarkerVariant(name.upper(), name.upper()),), scope)


def fixture_registry(command_set, placement="nested") -> TypeRegistry:
    registry = TypeRegistry(placement=placement)
    for descriptor in flatten_commands(command_set.sorted_commands()):
        registry.insert(descriptor)
    return registry


def walk(namespace: Namespace, path: tuple[str, ...] = ()) -> list[tuple[tuple[str, ...], Namespace]]:
    """All namespaces of a tree with their paths, depth first in sorted order."""
    result = [(path, namespace)]
    for child in namespace.sorted_children():
        result.extend(walk(child, (*path, child.name)))
    return result


def test_root_entries():
    registry = TypeRegistry(placement="shortest")
    registry.insert(marker_type("a", ("CMD",)))
    root = build_namespace(registry)

    assert [entry.name for entry in root.entries] == ["A"]
    assert root.children == {}


def test_nested_namespaces():
    registry = TypeRegistry()
    registry.insert(marker_type("unit", ("GEOSEARCH", "by")))
    registry.insert(marker_type("by", ("GEOSEARCH",)))
    root = build_namespace(registry)

    geosearch = root.children["geosearch"]
    assert [entry.name for entry in geosearch.entries] == ["By"]
    assert [entry.name for entry in geosearch.children["by"].entries] == ["Unit"]


def test_children_are_sorted():
    registry = TypeRegistry()
    for command in ("ZADD", "APPEND", "MSET"):
        registry.insert(marker_type(command.lower(), (command,)))
    root = build_namespace(registry)

    assert [child.name for child in root.sorted_children()] == ["append", "mset", "zadd"]


def test_entries_keep_registry_order_within_namespace():
    registry = TypeRegistry()
    registry.insert(marker_type("zeta", ("CMD",)))
    registry.insert(marker_type("alpha", ("CMD",)))
    root = build_namespace(registry)

    assert [entry.name for entry in root.children["cmd"].entries] == ["Zeta", "Alpha"]


def test_sorted_children():
    registry = TypeRegistry()
    registry.insert(marker_type("unit", ("GEOSEARCH", "by")))
    registry.insert(marker_type("condition", ("EXPIRE",)))
    root = build_namespace(registry)

    assert [path for path, _ in walk(root)] == [(), ("expire",), ("geosearch",), ("geosearch", "by")]


def test_empty_segment_is_fatal():
    registry = TypeRegistry()
    registry.entries.append(TypeRegistryEntry(marker_type("a", ("CMD",)), ("cmd", "", "x")))

    with pytest.raises(NamespaceError, match="Empty namespace name"):
        build_namespace(registry)


def test_insertion_order_does_not_change_tree(command_set):
    """The tree only depends on the paths of the entries."""
    registry = fixture_registry(command_set)
    reversed_registry = TypeRegistry()
    for entry in reversed(registry.entries):
        reversed_registry.insert(entry.descriptor)

    def shape(namespace: Namespace) -> list[tuple[tuple[str, ...], list[str]]]:
        return [(path, sorted(entry.name for entry in node.entries)) for path, node in walk(namespace)]

    assert shape(build_namespace(registry)) == shape(build_namespace(reversed_registry))


def test_fixture_tree(command_set):
    root = build_namespace(fixture_registry(command_set))

    assert [child.name for child in root.sorted_children()] == [
        "client_no_touch",
        "expire",
        "geosearch",
        "getex",
        "lpos",
        "scan",
        "set",
        "xtrim",
    ]
    assert list(root.children["geosearch"].children) == ["by"]
    assert [child.name for child in root.children["geosearch"].children["by"].sorted_children()] == ["box", "circle"]
    assert list(root.children["xtrim"].children) == ["trim"]
    assert [entry.name for entry in root.children["scan"].entries] == ["Match", "Count", "Type"]
    assert [entry.name for entry in root.children["lpos"].entries] == ["Rank", "Maxlen"]
