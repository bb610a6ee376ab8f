"""Two-pass assembler that turns a source listing into MIF memory images."""

from __future__ import annotations

import argparse
import re
import time
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from pathlib import Path

from .context import AssemblyContext
from .directives import Label, directive_table
from .errors import AssemblerError, UnknownDirectiveError, UnknownInstructionError
from .instructions import instruction_table
from .output import MifOutput

_LEADING_SPACE = re.compile(r"^\s+")
_TRAILING_SPACE = re.compile(r"\s+$")
_SPACE_RUNS = re.compile(r"\s{2,}")

_DIRECTIVE_SCAN = re.compile(r"\.([A-Za-z]*)\s+(.*)")
_DIRECTIVE_EMIT = re.compile(r"\.([A-Za-z]*) (.*)")
_LABEL = re.compile(r"(.*):(.*)")
_MNEMONIC = re.compile(r"([A-Za-z]+)\s*(.*)")

DEFAULT_SOURCE = "ulaz.asm"


def clean_line(line: str) -> str:
    """Drop the comment, trim and lower-case a line, and rename sp/bp registers."""
    text = line.split(";", 1)[0]
    text = _LEADING_SPACE.sub("", text)
    text = _TRAILING_SPACE.sub("", text)
    text = _SPACE_RUNS.sub("", text)
    text = text.lower()
    return text.replace("sp", "rf").replace("bp", "re")


@contextmanager
def _at_line(number: int) -> Iterator[None]:
    try:
        yield
    except AssemblerError as exc:
        exc.lineno = number
        raise


def assemble(lines: Iterable[str] | str) -> MifOutput:
    """Assemble a program and return its finished memory images.

    Errors are raised as :class:`AssemblerError` carrying the 1-based
    ``lineno`` of the offending line.
    """
    if isinstance(lines, str):
        lines = lines.splitlines()
    source = [line.rstrip("\n") for line in lines]

    instructions = instruction_table()
    directives = directive_table()
    label = Label()
    context = AssemblyContext()
    output = MifOutput()

    for number, raw in enumerate(source, 1):
        with _at_line(number):
            line = clean_line(raw)
            if (match := _DIRECTIVE_SCAN.fullmatch(line)) is not None:
                directive = directives.get(match[1])
                if directive is None:
                    raise UnknownDirectiveError(line)
                directive.apply(match[2], context, output)
                continue
            if (match := _LABEL.fullmatch(line)) is not None:
                label.apply(match[1], context, output)
                line = match[2]
            match = _MNEMONIC.fullmatch(line)
            if match is not None and match[1] in instructions:
                context.advance(instructions[match[1]].length(match[2]))

    for number, raw in enumerate(source, 1):
        with _at_line(number):
            line = clean_line(raw)
            if (match := _DIRECTIVE_EMIT.fullmatch(line)) is not None:
                if match[1] == "org":
                    directives["org"].apply(match[2], context, output)
                continue
            if (match := _LABEL.fullmatch(line)) is not None:
                line = clean_line(match[2])
            if (match := _MNEMONIC.fullmatch(line)) is not None:
                instruction = instructions.get(match[1])
                if instruction is None:
                    raise UnknownInstructionError(line)
                output.write_comment(context.pc, line)
                instruction.encode(match[2], context, output)

    output.finish()
    return output


def main(argv: list[str] | None = None) -> int:
    """Assemble a source file into MIF images in the output directory."""
    parser = argparse.ArgumentParser(
        prog="mifasm", description="Assemble a program into MIF memory images."
    )
    parser.add_argument("source", nargs="?", default=DEFAULT_SOURCE)
    parser.add_argument("-o", "--output-dir", default=".")
    args = parser.parse_args(argv)

    started = time.perf_counter()
    try:
        text = Path(args.source).read_text(encoding="utf-8")
    except OSError:
        print("Greska pri otvaranju ulaznog fajla")
        return 1

    status = 0
    try:
        assemble(text.splitlines()).save(args.output_dir)
    except AssemblerError as exc:
        print(f"Greska na liniji {getattr(exc, 'lineno', 1)}")
        print(exc)
        status = 1
    else:
        print("Prevedeno bez gresaka")

    print((time.perf_counter() - started) * 1000.0)
    return status