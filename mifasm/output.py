"""Memory image split over three MIF files by address range."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from .errors import InvalidAddressError, OutputFileError

_HEADER_TAIL = (
    "WIDTH = 8;\n"
    "ADDRESS_RADIX = HEX;\n"
    "DATA_RADIX = HEX;\n"
    "CONTENT\n"
    "BEGIN\n"
)

MEMORY_END = 57344


@dataclass
class _Section:
    filename: str
    base: int
    depth: int
    separator: str
    parts: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.parts.append(f"DEPTH = {self.depth};\n")
        self.parts.append(_HEADER_TAIL)

    @property
    def end(self) -> int:
        return self.base + self.depth

    def text(self) -> str:
        return "".join(self.parts)


class MifOutput:
    """Byte-wide memory contents written to three MIF images."""

    def __init__(self) -> None:
        self._sections = [
            _Section("Program0-32KB.mif", 0, 32768, " : "),
            _Section("Program32-48KB.mif", 32768, 16384, " : "),
            _Section("Program48-56KB.mif", 49152, 8192, ":"),
        ]

    def _section_for(self, address: int) -> _Section:
        if not 0 <= address < MEMORY_END:
            raise InvalidAddressError(address)
        return next(s for s in self._sections if address < s.end)

    def write_all(self, line: str) -> None:
        """Append a raw line to every image."""
        for section in self._sections:
            section.parts.append(f"{line}\n")

    def write_location(self, address: int, value: int) -> None:
        """Store the low byte of ``value`` at ``address``."""
        section = self._section_for(address)
        value &= 0xFF
        section.parts.append(
            f"{address - section.base:x}{section.separator}{value:x};\n"
        )

    def write_comment(self, address: int, text: str) -> None:
        """Add a comment to the image that holds ``address``."""
        section = self._section_for(address)
        section.parts.append(f"%{text}%\n")

    def finish(self) -> None:
        """Close the content block of every image."""
        for section in self._sections:
            section.parts.append("END;")

    def render(self) -> dict[str, str]:
        """Return the text of each image keyed by its file name."""
        return {s.filename: s.text() for s in self._sections}

    def save(self, directory: str | Path = ".") -> list[Path]:
        """Write every image into ``directory`` and return the paths written."""
        directory = Path(directory)
        written = []
        for filename, text in self.render().items():
            path = directory / filename
            try:
                path.write_text(text, encoding="utf-8")
            except OSError as exc:
                raise OutputFileError() from exc
            written.append(path)
        return written