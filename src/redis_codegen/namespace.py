"""Grouping of registered types into a tree of nested namespaces."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from itertools import groupby

from redis_codegen.registry import TypeRegistry, TypeRegistryEntry


class NamespaceError(RuntimeError):
    """Raised when a namespace path can not be split into namespace names."""


@dataclass
class Namespace:
    """A namespace with the types declared directly in it and its child namespaces."""

    name: str = ""
    entries: list[TypeRegistryEntry] = field(default_factory=list)
    children: dict[str, Namespace] = field(default_factory=dict)

    def child(self, name: str) -> Namespace:
        """Return the child namespace of this name, creating it if needed."""
        if name not in self.children:
            self.children[name] = Namespace(name)
        return self.children[name]

    def sorted_children(self) -> Iterator[Namespace]:
        for name in sorted(self.children):
            yield self.children[name]


def build_namespace(registry: TypeRegistry) -> Namespace:
    """Build the namespace tree of all registered types.

    Entries are grouped by namespace path and the groups are sorted by path, so the tree only depends
    on the paths and not on the order of insertion. Within a group, entries keep registry order.

    Args:
        registry (TypeRegistry): The registry, after all types are inserted.

    Raises:
        NamespaceError: If a path contains an empty namespace name.

    Returns:
        Namespace: The root namespace.
    """
    ordered = sorted(registry.entries, key=lambda entry: entry.path_string)

    root = Namespace()
    for path_string, group in groupby(ordered, key=lambda entry: entry.path_string):
        namespace = root

        if path_string:
            for name in path_string.split("."):
                if not name:
                    raise NamespaceError(f"Empty namespace name in path '{path_string}'")
                namespace = namespace.child(name)

        namespace.entries.extend(group)

    return root
