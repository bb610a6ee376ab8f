"""Two-pass assembler and microprogram compiler that produce MIF memory images."""

__version__ = "0.1.0"