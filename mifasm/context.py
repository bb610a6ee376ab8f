"""Shared state of one assembly run: location counter and symbol table."""

from __future__ import annotations

from dataclasses import dataclass, field

from .errors import DuplicateSymbolError, UndefinedSymbolError


@dataclass
class AssemblyContext:
    """Location counter and symbol table shared by all lines of a program."""

    pc: int = 0
    symbols: dict[str, int] = field(default_factory=dict)

    def advance(self, amount: int) -> int:
        """Move the location counter forward and return its new value."""
        self.pc += amount
        return self.pc

    def define(self, name: str, value: int) -> None:
        """Bind a new symbol; a symbol may be bound only once."""
        if name in self.symbols:
            raise DuplicateSymbolError(name)
        self.symbols[name] = value

    def lookup(self, name: str) -> int:
        """Return the value of a symbol, failing if it was never defined."""
        try:
            return self.symbols[name]
        except KeyError:
            raise UndefinedSymbolError(name) from None

    def __contains__(self, name: object) -> bool:
        return name in self.symbols