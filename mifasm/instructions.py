"""Machine instructions and how their operands are encoded into memory."""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from typing import ClassVar

from .context import AssemblyContext
from .errors import MalformedInstructionError, UndefinedSymbolError
from .output import MifOutput

_LEADING_INT = {
    10: re.compile(r"\s*([+-]?)([0-9]+)"),
    16: re.compile(r"\s*([+-]?)(?:0[xX])?([0-9a-fA-F]+)"),
}
_HEX_NUMBER = re.compile(r"[0-9a-f]+[hH]")
_HEX_DIGITS = re.compile(r"[0-9a-f]+")
_DEC_DIGITS = re.compile(r"[0-9]+")


def _leading_int(text: str, base: int) -> int:
    """Parse the integer at the start of ``text``, ignoring what follows it."""
    match = _LEADING_INT[base].match(text)
    if match is None:
        raise MalformedInstructionError(text)
    value = int(match.group(2), base)
    return -value if match.group(1) == "-" else value


class Instruction(ABC):
    """An instruction mnemonic bound to its operation code."""

    size: ClassVar[int] = 1

    def __init__(self, opcode: int) -> None:
        self.opcode = opcode

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.opcode:#04x})"

    def length(self, operands: str) -> int:
        """Return how many bytes the instruction occupies."""
        return self.size

    @abstractmethod
    def encode(
        self, operands: str, context: AssemblyContext, output: MifOutput
    ) -> None:
        """Write the encoded instruction at the current location counter."""

    @staticmethod
    def _emit(context: AssemblyContext, output: MifOutput, *values: int) -> None:
        for value in values:
            address = context.pc
            context.pc += 1
            output.write_location(address, value)


class NoOperand(Instruction):
    """An instruction made of its operation code alone."""

    size = 1

    def encode(self, operands, context, output):
        self._emit(context, output, self.opcode)


class Jump(Instruction):
    """An unconditional transfer to an absolute address given by a symbol."""

    size = 3

    def encode(self, operands, context, output):
        self._emit(context, output, self.opcode)
        target = context.lookup(operands)
        self._emit(context, output, target, target >> 8)


class ConditionalBranch(Instruction):
    """A branch to a symbol, encoded relative to the next instruction."""

    size = 3

    def encode(self, operands, context, output):
        start = context.pc
        self._emit(context, output, self.opcode)
        offset = context.lookup(operands) - (start + self.size)
        self._emit(context, output, offset, offset >> 8)


class SingleRegister(Instruction):
    """An instruction taking one register operand."""

    size = 2
    _PATTERN = re.compile(r"r([0-9a-f]+)")

    def encode(self, operands, context, output):
        self._emit(context, output, self.opcode)
        match = self._PATTERN.fullmatch(operands)
        if match is not None:
            register = int(match.group(1), 16)
            if register <= 15:
                self._emit(context, output, register << 4)
                return
        raise MalformedInstructionError(operands)


class RegisterArithmetic(Instruction):
    """An operation on two registers."""

    size = 2
    _PATTERN = re.compile(r"r([0-9a-f]+),\s*r([0-9a-f]+)")

    def encode(self, operands, context, output):
        self._emit(context, output, self.opcode)
        match = self._PATTERN.fullmatch(operands)
        if match is not None:
            first = int(match.group(1), 16)
            second = int(match.group(2), 16)
            if first <= 15 and second <= 15:
                self._emit(context, output, first << 4 | second)
                return
        raise MalformedInstructionError(operands)


class ImmediateArithmetic(Instruction):
    """An operation on a register and a 16-bit immediate value."""

    size = 4
    _PATTERN = re.compile(r"r([0-9a-f]+),\s*#(.*)")

    def encode(self, operands, context, output):
        self._emit(context, output, self.opcode)
        match = self._PATTERN.fullmatch(operands)
        if match is None:
            raise MalformedInstructionError(operands)
        register = int(match.group(1), 16)
        if register > 15:
            raise MalformedInstructionError(operands)
        self._emit(context, output, register << 4)
        value = self._immediate(match.group(2), operands, context)
        self._emit(context, output, value, value >> 8)

    @staticmethod
    def _immediate(text: str, operands: str, context: AssemblyContext) -> int:
        if text in context:
            return context.lookup(text)
        if _HEX_NUMBER.search(text):
            return _leading_int(text, 16)
        if _HEX_DIGITS.search(text):
            return _leading_int(text, 10)
        raise MalformedInstructionError(operands)


class LoadStore(Instruction):
    """A memory access with register-indirect, displaced, or absolute address."""

    _OPERANDS = re.compile(r"r([0-9a-f]+),\s*(.*)")
    _INDIRECT = re.compile(r"\(r([0-9a-f]+)\)")
    _DISPLACED = re.compile(r"\(r([0-9a-f])\)\s*(.*)")
    _MEMORY_INDIRECT = re.compile(r"\((.*)\)")
    _SHORT_FORM = re.compile(r"^r[0-9a-f]+,\s*\(r[0-9a-f]\)$")

    def length(self, operands: str) -> int:
        return 2 if self._SHORT_FORM.search(operands) else 4

    def encode(self, operands, context, output):
        match = self._OPERANDS.fullmatch(operands)
        if match is None:
            raise MalformedInstructionError(operands)
        first = self._register(match.group(1), operands)
        address = match.group(2)

        if (match := self._INDIRECT.fullmatch(address)) is not None:
            second = self._register(match.group(1), operands)
            self._emit(context, output, self.opcode | 0x03, first << 4 | second)
        elif (match := self._DISPLACED.fullmatch(address)) is not None:
            second = self._register(match.group(1), operands)
            displacement = self._number(match.group(2), context)
            self._emit(
                context,
                output,
                self.opcode | 0x02,
                first << 4 | second,
                displacement,
                displacement >> 8,
            )
        elif (match := self._MEMORY_INDIRECT.fullmatch(address)) is not None:
            target = self._number(match.group(1), context)
            self._emit(
                context, output, self.opcode | 0x01, first << 4, target, target >> 8
            )
        else:
            target = self._number(address, context)
            self._emit(context, output, self.opcode, first << 4, target, target >> 8)

    @staticmethod
    def _register(digits: str, operands: str) -> int:
        register = int(digits, 16)
        if register > 16:
            raise MalformedInstructionError(operands)
        return register

    @staticmethod
    def _number(text: str, context: AssemblyContext) -> int:
        if text in context:
            return context.lookup(text)
        if _HEX_NUMBER.search(text):
            return _leading_int(text, 16)
        if _DEC_DIGITS.search(text):
            return _leading_int(text, 10)
        raise UndefinedSymbolError(text)


class Shift(Instruction):
    """A shift or rotate by a register or by an immediate count."""

    size = 2
    _OPERANDS = re.compile(r"r([0-9a-f]+),\s*(.*)")
    _BY_REGISTER = re.compile(r"r([0-9a-f]+)")
    _BY_HEX = re.compile(r"#([0-9a-f]+)[hH]")
    _BY_DECIMAL = re.compile(r"#([0-9]+)")

    def encode(self, operands, context, output):
        match = self._OPERANDS.fullmatch(operands)
        if match is None:
            raise MalformedInstructionError(operands)
        first = int(match.group(1), 16)
        count = match.group(2)

        if (match := self._BY_REGISTER.fullmatch(count)) is not None:
            second = int(match.group(1), 16)
            self._emit(context, output, self.opcode, first << 4 | second)
            return
        if (match := self._BY_HEX.fullmatch(count)) is not None:
            amount = int(match.group(1), 16)
        elif (match := self._BY_DECIMAL.fullmatch(count)) is not None:
            amount = int(match.group(1))
        else:
            raise MalformedInstructionError(operands)
        self._emit(context, output, self.opcode | 1 << 4, first << 4 | (amount & 0xFF))


_MNEMONICS: tuple[tuple[str, type[Instruction], int], ...] = (
    ("bcar", ConditionalBranch, 0x0E),
    ("bgrt", ConditionalBranch, 0x00),
    ("beql", ConditionalBranch, 0x08),
    ("bz", ConditionalBranch, 0x08),
    ("bgrte", ConditionalBranch, 0x01),
    ("bgrteu", ConditionalBranch, 0x05),
    ("bgrtu", ConditionalBranch, 0x04),
    ("blsseu", ConditionalBranch, 0x07),
    ("blssu", ConditionalBranch, 0x06),
    ("blss", ConditionalBranch, 0x02),
    ("blsse", ConditionalBranch, 0x03),
    ("bncar", ConditionalBranch, 0x0F),
    ("bneg", ConditionalBranch, 0x0A),
    ("bneql", ConditionalBranch, 0x09),
    ("bnz", ConditionalBranch, 0x09),
    ("bnneg", ConditionalBranch, 0x0B),
    ("bnovf", ConditionalBranch, 0x0D),
    ("bovf", ConditionalBranch, 0x0C),
    ("jmp", Jump, 0x20),
    ("call", Jump, 0x21),
    ("push", SingleRegister, 0x60),
    ("pop", SingleRegister, 0x61),
    ("rand", SingleRegister, 0x62),
    ("ret", NoOperand, 0x40),
    ("sret", NoOperand, 0x41),
    ("inte", NoOperand, 0x42),
    ("intd", NoOperand, 0x43),
    ("srand", NoOperand, 0x44),
    ("halt", NoOperand, 0x45),
    ("inc", SingleRegister, 0x63),
    ("dec", SingleRegister, 0x64),
    ("cl", SingleRegister, 0x65),
    ("not", SingleRegister, 0x66),
    ("compl", SingleRegister, 0x67),
    ("add", RegisterArithmetic, 0x80),
    ("sub", RegisterArithmetic, 0x81),
    ("mul", RegisterArithmetic, 0x82),
    ("div", RegisterArithmetic, 0x83),
    ("mod", RegisterArithmetic, 0x84),
    ("cmp", RegisterArithmetic, 0x85),
    ("and", RegisterArithmetic, 0x86),
    ("or", RegisterArithmetic, 0x87),
    ("xor", RegisterArithmetic, 0x88),
    ("tst", RegisterArithmetic, 0x89),
    ("addi", ImmediateArithmetic, 0x90),
    ("subi", ImmediateArithmetic, 0x91),
    ("muli", ImmediateArithmetic, 0x92),
    ("divi", ImmediateArithmetic, 0x93),
    ("modi", ImmediateArithmetic, 0x94),
    ("cmpi", ImmediateArithmetic, 0x95),
    ("andi", ImmediateArithmetic, 0x96),
    ("ori", ImmediateArithmetic, 0x97),
    ("xori", ImmediateArithmetic, 0x98),
    ("tsti", ImmediateArithmetic, 0x99),
    ("lb", LoadStore, 0xA0),
    ("lw", LoadStore, 0xA8),
    ("sb", LoadStore, 0xB0),
    ("sw", LoadStore, 0xB8),
    ("li", ImmediateArithmetic, 0x9A),
    ("mv", RegisterArithmetic, 0x8A),
    ("asl", Shift, 0xC0),
    ("lsl", Shift, 0xC1),
    ("rol", Shift, 0xC2),
    ("rolc", Shift, 0xC3),
    ("asr", Shift, 0xC4),
    ("lsr", Shift, 0xC5),
    ("ror", Shift, 0xC6),
    ("rorc", Shift, 0xC7),
)


def instruction_table() -> dict[str, Instruction]:
    """Return every known mnemonic mapped to its instruction."""
    return {name: kind(opcode) for name, kind, opcode in _MNEMONICS}