# mifasm

Two small tools for an educational 8-bit processor. Both produce
Memory Initialization Files (`.mif`), which FPGA toolchains load into
on-chip memories:

* **`mifasm`** assembles a program into three MIF images, one for each
  region of the 56 KB address space.
* **`mifasm-micro`** compiles a microprogram into a 256 × 128-bit control
  store image.

The package has no dependencies outside the standard library.

## Installation

```
pip install .
```

To run the test suite:

```
pip install ".[test]"
pytest
```

## The assembler

```
mifasm [source] [-o OUTPUT_DIR]
```

`source` defaults to `ulaz.asm`; `-o/--output-dir` defaults to the current
directory. The tool writes:

| File                 | Addresses       | Depth  |
|----------------------|-----------------|--------|
| `Program0-32KB.mif`  | `0000`–`7FFF`   | 32768  |
| `Program32-48KB.mif` | `8000`–`BFFF`   | 16384  |
| `Program48-56KB.mif` | `C000`–`DFFF`   | 8192   |

Every image is 8 bits wide with hexadecimal addresses and data; addresses
are written relative to the start of their image. Before each instruction's
bytes, the cleaned source line is written as a `%…%` comment. On success the
tool prints `Prevedeno bez gresaka`; on failure it prints
`Greska na liniji N` followed by a description of the error and exits with
status 1. It then prints the time taken, in milliseconds.

### Source syntax

Each line is cleaned before it is assembled (see `clean_line`):

* Everything after the first `;` is a comment.
* Leading and trailing whitespace is removed, and any run of two or more
  whitespace characters inside the line is removed entirely, so separate
  words with single spaces.
* The line is lower-cased, so case does not matter.
* Every occurrence of `sp` becomes `rf` and every `bp` becomes `re`, also
  inside symbol names. Registers are `r0`–`rf`.

Further rules:

* A label is written `name:` and may be followed by an instruction on the
  same line.
* Numbers are decimal, or hexadecimal with an `h` suffix (`1fh`). A defined
  symbol may be used wherever a number is expected.
* Directives:
  * `.org <digits>h` sets the location counter; the digits are read as
    hexadecimal (for example `.org 100h`). Any other form is an error.
  * `.define <name> <value>` defines a symbolic constant.

The assembler makes two passes: the first collects labels and constants and
measures instruction lengths, the second emits the bytes.

### Instruction set

| Group                | Mnemonics                                                        | Operands                 | Bytes |
|----------------------|------------------------------------------------------------------|--------------------------|-------|
| Conditional branches | `bgrt bgrte blss blsse bgrtu bgrteu blssu blsseu beql bz bneql bnz bneg bnneg bovf bnovf bcar bncar` | `label` (relative to the next instruction) | 3 |
| Jumps                | `jmp call`                                                       | `label`                  | 3     |
| No operand           | `ret sret inte intd srand halt`                                  | –                        | 1     |
| One register         | `push pop rand inc dec cl not compl`                             | `rX`                     | 2     |
| Register arithmetic  | `add sub mul div mod cmp and or xor tst mv`                      | `rX, rY`                 | 2     |
| Immediate arithmetic | `addi subi muli divi modi cmpi andi ori xori tsti li`            | `rX, #value`             | 4     |
| Load / store         | `lb lw sb sw`                                                    | `rX, addr` · `rX, (addr)` · `rX, (rY)` · `rX, (rY) disp` | 2 for `(rY)`, otherwise 4 |
| Shifts / rotates     | `asl lsl rol rolc asr lsr ror rorc`                              | `rX, rY` · `rX, #n`      | 2     |

Sixteen-bit values (addresses, immediates, branch offsets) are stored low
byte first.

Example:

```
.define count 10
.org 0h
start: li r1, #count
loop: dec r1
bnz loop
halt
```

### Using it from Python

```python
from mifasm.assembler import assemble, clean_line

print(clean_line("  ADD sp, R1   ; comment"))   # "add rf, r1"

result = assemble(["li r1, #5", "halt"])
images = result.render()        # {"Program0-32KB.mif": "...", ...}
result.save("build")            # writes the three files into ./build
```

`assemble` accepts an iterable of lines or a single string and returns a
finished `mifasm.output.MifOutput`. `MifOutput` offers `write_location`,
`write_comment`, `write_all`, `finish`, `render` and `save`; `save` raises
`OutputFileError` if a file cannot be written.

Problems in the source raise subclasses of `mifasm.errors.AssemblerError`
(`UndefinedSymbolError`, `DuplicateSymbolError`, `MalformedSymbolError`,
`UnknownInstructionError`, `UnknownDirectiveError`,
`MalformedInstructionError`, `InvalidAddressError`). Errors raised by
`assemble` carry the 1-based number of the offending line in their
`lineno` attribute.

The building blocks are available too: `mifasm.context.AssemblyContext`
(location counter and symbol table), `mifasm.instructions.instruction_table()`
and `mifasm.directives.directive_table()`.

## The microprogram compiler

```
mifasm-micro [input] [output]
```

`input` defaults to `mikro_program.txt` and `output` to `output.mif`. The
image has 256 words of 128 bits, hexadecimal addresses and binary data; each
word is written most significant bit first with the bits separated by
commas. Input is lower-cased, and only lines that contain a `;` are looked
at:

```
.signal lda;
.signal incpc;
.condition start;
madr00 lda, br (if start then madr05);
madr01 incpc, br madr00;
```

* `.signal name;` gives the next control-signal bit, counting from 0.
* `.condition name;` gives the next branch-condition code, counting from 2.
  Code 1 means an unconditional branch.
* `madrXX …;` defines the word at hexadecimal address `XX`. It holds a
  comma-separated list of signals, optionally with `br madrYY` or
  `br (if cond then madrYY)`. The condition code is stored from bit 115
  upwards and the branch target from bit 120 upwards. A signal that was
  never declared sets bit 0.

A branch on an undeclared condition, or a `madr` without an address, stops
compilation with an error message and exit status 1.

From Python, `mifasm.microprogram.compile_microprogram(lines)` returns the
text of the image and raises `MicroprogramError` on such errors;
`set_bits(bits, value, start)` is the helper that places a value inside a
128-bit word.