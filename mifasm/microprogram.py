"""Compiler for microprogram listings into a 128-bit wide MIF image."""

from __future__ import annotations

import argparse
import re
from collections.abc import Iterable, Iterator
from enum import Enum
from pathlib import Path


class Radix(Enum):
    """Number base used for addresses or data in a MIF file."""

    BIN = "BIN"
    HEX = "HEX"


class MicroprogramError(Exception):
    """A microprogram line could not be compiled."""


MEMORY_DEPTH = 256
WORD_WIDTH = 128
BRANCH_TARGET_BIT = WORD_WIDTH - 8
CONDITION_BIT = WORD_WIDTH - 13
ADDRESS_RADIX = Radix.HEX
DATA_RADIX = Radix.BIN

DEFAULT_INPUT = "mikro_program.txt"
DEFAULT_OUTPUT = "output.mif"

_WORD_MASK = (1 << WORD_WIDTH) - 1
_FIRST_CONDITION = 2

_DECLARATION = re.compile(r"\.(.*)\s+(.*);.*")
_MICROINSTRUCTION = re.compile(r"madr([0-9a-f]*)\s+(.*);.*")
_CONDITIONAL_BRANCH = re.compile(
    r".*br.*\(if\s+(.*)\s+then\s+madr([0-9a-f]*)\).*"
)
_UNCONDITIONAL_BRANCH = re.compile(r".*br\s+madr([0-9a-f]*).*")


def set_bits(bits: int, value: int, start: int) -> int:
    """Return ``bits`` with the binary digits of ``value`` set from bit ``start``."""
    if value < 0:
        raise ValueError("value must not be negative")
    return (bits | value << start) & _WORD_MASK


def _address(digits: str) -> int:
    if not digits:
        raise MicroprogramError("Adresa madr nije zadata")
    return int(digits, 16)


def _format_address(address: int, radix: Radix) -> str:
    if radix is Radix.BIN:
        return f"{address:0{MEMORY_DEPTH}b}"
    return f"{address:02x}"


def _format_word(word: int, radix: Radix) -> str:
    if radix is Radix.BIN:
        return ",".join(f"{word:0{WORD_WIDTH}b}")
    return f"{word:0{WORD_WIDTH // 4}x}"


def _encode(fields: str, signals: dict[str, int], conditions: dict[str, int]) -> int:
    word = 0
    for field in fields.split(","):
        if (match := _CONDITIONAL_BRANCH.fullmatch(field)) is not None:
            condition = match[1]
            if condition not in conditions:
                raise MicroprogramError(f"Ne postoji uslov {condition}")
            word = set_bits(word, conditions[condition], CONDITION_BIT)
            word = set_bits(word, _address(match[2]), BRANCH_TARGET_BIT)
        elif (match := _UNCONDITIONAL_BRANCH.fullmatch(field)) is not None:
            word = set_bits(word, 1, CONDITION_BIT)
            word = set_bits(word, _address(match[1]), BRANCH_TARGET_BIT)
        else:
            signal = field.replace(" ", "")
            word = set_bits(word, 1 << signals.setdefault(signal, 0), 0)
    return word


def _compile(lines: Iterable[str]) -> Iterator[str]:
    yield f"DEPTH = {MEMORY_DEPTH};\n"
    yield f"WIDTH = {WORD_WIDTH};\n"
    yield f"ADDRESS_RADIX = {ADDRESS_RADIX.value};\n"
    yield f"DATA_RADIX = {DATA_RADIX.value};\n"
    yield "CONTENT\n"
    yield "BEGIN\n"

    signals: dict[str, int] = {}
    conditions: dict[str, int] = {}
    next_signal = 0
    next_condition = _FIRST_CONDITION

    for raw in lines:
        line = raw.rstrip("\n").lower()
        if ";" not in line:
            continue
        if (match := _DECLARATION.fullmatch(line)) is not None:
            kind, name = match[1], match[2]
            if kind == "condition":
                conditions[name] = next_condition
                next_condition += 1
            elif kind == "signal":
                signals[name] = next_signal
                next_signal += 1
        elif (match := _MICROINSTRUCTION.fullmatch(line)) is not None:
            address = _address(match[1])
            word = _encode(match[2], signals, conditions)
            yield (
                f"{_format_address(address, ADDRESS_RADIX)} : "
                f"{_format_word(word, DATA_RADIX)}\n"
            )

    yield "END;"


def compile_microprogram(lines: Iterable[str] | str) -> str:
    """Compile microprogram lines and return the text of the MIF image."""
    if isinstance(lines, str):
        lines = lines.splitlines()
    return "".join(_compile(lines))


def main(argv: list[str] | None = None) -> int:
    """Compile a microprogram file into a MIF file."""
    parser = argparse.ArgumentParser(
        prog="mifasm-micro", description="Compile a microprogram into a MIF image."
    )
    parser.add_argument("input", nargs="?", default=DEFAULT_INPUT)
    parser.add_argument("output", nargs="?", default=DEFAULT_OUTPUT)
    args = parser.parse_args(argv)

    try:
        source = Path(args.input).read_text(encoding="utf-8")
    except OSError:
        print("Ne moze da se otvri ulazni file")
        return 1

    try:
        image = compile_microprogram(source.splitlines())
    except MicroprogramError as exc:
        print(exc)
        return 1

    try:
        Path(args.output).write_text(image, encoding="utf-8")
    except OSError:
        print("Ne moze da se otvori izlazni file")
        return 1
    return 0