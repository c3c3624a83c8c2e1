"""Registry of the distinct types synthesized from a command set."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass

from redis_codegen.helper import to_snake
from redis_codegen.redis_types import DEFAULT_TYPES_MODULE, PlacementType
from redis_codegen.tokens import FieldType, TypeDescriptor, TypeRef

logger = logging.getLogger(__name__)


class RegistryError(RuntimeError):
    """Raised when the registry can not place a type. This indicates a bug, not bad input."""


@dataclass
class TypeRegistryEntry:
    """A registered type and the namespace path it is declared in."""

    descriptor: TypeDescriptor
    path: tuple[str, ...]
    prefix: str = ""

    @property
    def name(self) -> str:
        return self.descriptor.name

    @property
    def path_string(self) -> str:
        return ".".join(self.path)

    @property
    def local_name(self) -> str:
        """The dotted name of the type inside the generated types module, e.g. 'set.Expiration'."""
        return ".".join((*self.path, self.name))

    @property
    def qualified_name(self) -> str:
        """The dotted name of the type from outside the types module, e.g. 'arg_types.set.Expiration'."""
        return ".".join(part for part in (self.prefix, self.local_name) if part)


class TypeRegistry:
    """A type registry.

    Inserting a descriptor that is equal to an already registered one (name, wire token and shape, not
    location) does not register it again. Its fqtn is still indexed, pointing to the existing entry, so
    references to it resolve to the type that is actually declared.

    New types are placed under the namespace path of their scope. With the 'shortest' placement the
    shortest prefix of the scope is tried first instead. If the path already holds a different type
    of the same name, longer prefixes of the fqtn are tried.
    """

    def __init__(self, path_prefix: str = DEFAULT_TYPES_MODULE, placement: PlacementType = "nested"):
        """Initialize the registry.

        Args:
            path_prefix (str): The name of the generated types module, used for qualified names.
            placement (PlacementType): How a namespace path is chosen for a new type.
        """
        self.path_prefix = path_prefix
        self.placement: PlacementType = placement
        self.entries: list[TypeRegistryEntry] = []
        self.index: dict[tuple[str, ...], TypeRegistryEntry] = {}
        self._by_content: dict[object, TypeRegistryEntry] = {}
        self._slots: set[tuple[tuple[str, ...], str]] = set()

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[TypeRegistryEntry]:
        return iter(self.entries)

    def insert(self, descriptor: TypeDescriptor) -> bool:
        """Register a descriptor, unless an equal one is registered already.

        Args:
            descriptor (TypeDescriptor): The descriptor to register.

        Raises:
            RegistryError: If no free namespace path is left for the descriptor.

        Returns:
            bool: True if a new entry was created.
        """
        existing = self._by_content.get(descriptor.content_key)
        if existing is not None:
            logger.debug("Type %s equals %s", ".".join(descriptor.fqtn), existing.local_name)
            self._index(descriptor.fqtn, existing)
            return False

        path = self._place(descriptor)
        entry = TypeRegistryEntry(descriptor, path, self.path_prefix)

        self.entries.append(entry)
        self._by_content[descriptor.content_key] = entry
        self._slots.add((path, descriptor.name))
        self._index(descriptor.fqtn, entry)

        logger.debug("Registered type %s", entry.local_name)
        return True

    def _index(self, fqtn: tuple[str, ...], entry: TypeRegistryEntry):
        previous = self.index.get(fqtn)
        if previous is not None and previous is not entry:
            logger.warning("Type %s is rebound from %s to %s", ".".join(fqtn), previous.local_name, entry.local_name)
        self.index[fqtn] = entry

    def _place(self, descriptor: TypeDescriptor) -> tuple[str, ...]:
        fqtn = descriptor.fqtn
        start = len(descriptor.scope) if self.placement == "nested" else 0

        for length in range(start, len(fqtn) + 1):
            path = tuple(to_snake(ident) for ident in fqtn[:length])
            if (path, descriptor.name) not in self._slots:
                return path

        raise RegistryError(f"No free namespace path left for type {'.'.join(fqtn)}")

    def lookup(self, fqtn: tuple[str, ...]) -> TypeRegistryEntry | None:
        """Return the entry registered for a fqtn, if any."""
        return self.index.get(tuple(fqtn))

    def resolve(self, scope: tuple[str, ...], field_type: FieldType, qualified: bool = False) -> str:
        """Resolve a type used by a descriptor to the name it is declared under.

        Args:
            scope (tuple[str, ...]): The scope of the descriptor the type is used in.
            field_type (FieldType): A primitive type name or a reference to a synthesized type.
            qualified (bool, optional): Whether to prefix the name with the types module. Defaults to False.

        Returns:
            str: The primitive name unchanged, the dotted name of the registered type, or the plain
                dotted reference if it could not be resolved.
        """
        if not isinstance(field_type, TypeRef):
            return field_type

        entry = self.lookup((*scope, *field_type.scope, field_type.name))
        if entry is None:
            logger.warning("Unresolved type reference %s in %s", field_type, ".".join(scope))
            return str(field_type)

        return entry.qualified_name if qualified else entry.local_name
