"""Indentation-aware line buffer that generated sources are written into."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field

INDENTATION = "    "


class ScopeError(RuntimeError):
    """Raised when a scope is left more often than it was entered."""


@dataclass
class Scope:
    """A buffer of source lines, with the current indentation depth.

    Lines are stored with their indentation applied, so the buffer can be dumped as is.
    """

    name: str = ""
    lines: list[str] = field(default_factory=list)
    depth: int = 0

    def add(self, line: str) -> None:
        """Add a line at the current depth. Empty lines are kept free of trailing whitespace."""
        if line:
            self.lines.append(f"{INDENTATION * self.depth}{line}")
        else:
            self.lines.append("")

    def blank(self) -> None:
        self.lines.append("")

    def enter(self) -> None:
        self.depth += 1

    def exit(self) -> None:
        if self.depth == 0:
            raise ScopeError(f"Scope '{self.name}' is not indented.")
        self.depth -= 1

    @contextmanager
    def indent(self) -> Iterator[None]:
        """Indent all lines added within the context by one level."""
        self.enter()
        try:
            yield
        finally:
            self.exit()

    def dumps(self) -> str:
        """The buffered lines as one string, ending in a newline."""
        return "\n".join(self.lines) + "\n"
