"""Exceptions raised while assembling a program."""


class AssemblerError(Exception):
    """Base class for every error reported by the assembler."""


class OutputFileError(AssemblerError):
    """An output file could not be opened for writing."""

    def __init__(self) -> None:
        super().__init__("Greska pri otvaranju izlaznog fajla")


class InvalidAddressError(AssemblerError):
    """An address lies outside the memory covered by the output files."""

    def __init__(self, address: int) -> None:
        self.address = address
        super().__init__(f"Adresa {address} nije validna")


class DuplicateSymbolError(AssemblerError):
    """A symbol was defined more than once."""

    def __init__(self, symbol: str) -> None:
        self.symbol = symbol
        super().__init__(f"Simbol {symbol} je vec definisan")


class MalformedSymbolError(AssemblerError):
    """A symbol definition could not be parsed."""

    def __init__(self, symbol: str) -> None:
        self.symbol = symbol
        super().__init__(f"Simbol {symbol} je lose definisan")


class UndefinedSymbolError(AssemblerError):
    """A symbol was used without being defined."""

    def __init__(self, symbol: str) -> None:
        self.symbol = symbol
        super().__init__(f"Simbol {symbol} nije definisan")


class UnknownInstructionError(AssemblerError):
    """A line names an instruction the assembler does not know."""

    def __init__(self, line: str) -> None:
        self.line = line
        super().__init__(f"Nepostojeca instrukcija: {line}")


class UnknownDirectiveError(AssemblerError):
    """A line names a directive the assembler does not know."""

    def __init__(self, line: str) -> None:
        self.line = line
        super().__init__(f"Nepostojeca direktiva: {line}")


class MalformedInstructionError(AssemblerError):
    """The operands of an instruction could not be parsed."""

    def __init__(self, instruction: str) -> None:
        self.instruction = instruction
        super().__init__(f"Instrukcija {instruction} je lose definisana")