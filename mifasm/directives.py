"""Assembler directives: origin, constant definitions and labels."""

from __future__ import annotations

import re
from abc import ABC, abstractmethod

from .context import AssemblyContext
from .errors import (
    DuplicateSymbolError,
    MalformedInstructionError,
    MalformedSymbolError,
)
from .output import MifOutput


class Directive(ABC):
    """A line that steers the assembler instead of producing code."""

    @abstractmethod
    def apply(
        self,
        operands: str,
        context: AssemblyContext,
        output: MifOutput | None = None,
    ) -> None:
        """Carry out the directive on the assembly state."""


class Org(Directive):
    """Set the location counter; the origin is written as digits and ``h``."""

    _PATTERN = re.compile(r"([0-9]+)h")

    def apply(self, operands, context, output=None):
        match = self._PATTERN.fullmatch(operands)
        if match is None:
            raise MalformedInstructionError(operands)
        context.pc = int(match.group(1), 16)


class Define(Directive):
    """Bind a name to a hexadecimal (``h`` suffix) or decimal constant."""

    _PATTERN = re.compile(r"(.*)\s+(.*)")
    _HEX = re.compile(r"([0-9a-f]+)[hH]")
    _DECIMAL = re.compile(r"([0-9]+)")

    def apply(self, operands, context, output=None):
        match = self._PATTERN.fullmatch(operands)
        if match is not None:
            name, number = match.groups()
            if name in context:
                raise DuplicateSymbolError(name)
            if (value := self._HEX.match(number)) is not None:
                context.define(name, int(value.group(1), 16))
                return
            if (value := self._DECIMAL.match(number)) is not None:
                context.define(name, int(value.group(1)))
                return
        raise MalformedSymbolError(operands)


class Label(Directive):
    """Bind a name to the current location counter."""

    def apply(self, operands, context, output=None):
        context.define(operands, context.pc)


def directive_table() -> dict[str, Directive]:
    """Return the directives that may be written as ``.name operands``."""
    return {"org": Org(), "define": Define()}