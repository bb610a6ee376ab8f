import re

import pytest

from mifasm.context import AssemblyContext
from mifasm.errors import MalformedInstructionError, UndefinedSymbolError
from mifasm.instructions import (
    ConditionalBranch,
    ImmediateArithmetic,
    Jump,
    LoadStore,
    NoOperand,
    RegisterArithmetic,
    Shift,
    SingleRegister,
    instruction_table,
)
from mifasm.output import MifOutput


def _cells(output):
    cells = {}
    for line in output.render()["Program0-32KB.mif"].splitlines():
        match = re.fullmatch(r"([0-9a-f]+) : ([0-9a-f]+);", line)
        if match:
            cells[int(match.group(1), 16)] = int(match.group(2), 16)
    return cells


def _run(instruction, operands, context=None):
    context = context if context is not None else AssemblyContext()
    output = MifOutput()
    instruction.encode(operands, context, output)
    cells = _cells(output)
    return [cells[address] for address in sorted(cells)], context


def test_no_operand_writes_opcode_only():
    values, context = _run(NoOperand(0x45), "")
    assert values == [0x45]
    assert context.pc == 1


def test_register_arithmetic_packs_registers():
    values, context = _run(RegisterArithmetic(0x80), "r1, r2")
    assert values == [0x80, 1 << 4 | 2]
    assert context.pc == 2


def test_register_arithmetic_rejects_register_above_fifteen():
    with pytest.raises(MalformedInstructionError):
        _run(RegisterArithmetic(0x80), "r10, r1")


def test_register_arithmetic_rejects_missing_comma():
    with pytest.raises(MalformedInstructionError):
        _run(RegisterArithmetic(0x80), "r1 r2")


def test_immediate_hex_value():
    values, _ = _run(ImmediateArithmetic(0x90), "r3, #1234h")
    assert values == [0x90, 3 << 4, 0x34, 0x12]


def test_immediate_decimal_value():
    values, _ = _run(ImmediateArithmetic(0x90), "r3, #300")
    assert values == [0x90, 3 << 4, 300 & 0xFF, 300 >> 8]


def test_immediate_symbol_value():
    context = AssemblyContext()
    context.define("max", 0x1234)
    values, _ = _run(ImmediateArithmetic(0x9A), "r1, #max", context)
    assert values == [0x9A, 1 << 4, 0x34, 0x12]


@pytest.mark.parametrize("operands", ["r1, #zz", "r1, #", "r1, 5", "r10, #5"])
def test_immediate_rejects_bad_operands(operands):
    with pytest.raises(MalformedInstructionError):
        _run(ImmediateArithmetic(0x90), operands)


def test_single_register():
    values, _ = _run(SingleRegister(0x60), "rf")
    assert values == [0x60, 15 << 4]


@pytest.mark.parametrize("operands", ["r5,", "r10", "5"])
def test_single_register_rejects_bad_operands(operands):
    with pytest.raises(MalformedInstructionError):
        _run(SingleRegister(0x60), operands)


def test_jump_uses_absolute_address():
    context = AssemblyContext()
    context.define("loop", 0x1234)
    values, context = _run(Jump(0x20), "loop", context)
    assert values == [0x20, 0x34, 0x12]
    assert context.pc == 3


def test_jump_to_undefined_symbol():
    with pytest.raises(UndefinedSymbolError):
        _run(Jump(0x21), "nowhere")


@pytest.mark.parametrize("start,target", [(0x10, 0x40), (0x10, 0x00), (0x100, 0x100)])
def test_conditional_branch_is_relative_to_next_instruction(start, target):
    context = AssemblyContext(pc=start)
    context.define("target", target)
    values, context = _run(ConditionalBranch(0x08), "target", context)
    assert values[0] == 0x08
    offset = int.from_bytes(bytes(values[1:]), "little", signed=True)
    assert start + ConditionalBranch(0x08).length("target") + offset == target
    assert context.pc == start + 3


def test_conditional_branch_undefined_symbol():
    with pytest.raises(UndefinedSymbolError):
        _run(ConditionalBranch(0x09), "missing")


def test_load_register_indirect():
    instruction = LoadStore(0xA0)
    values, context = _run(instruction, "r1, (r2)")
    assert values == [0xA0 | 3, 1 << 4 | 2]
    assert instruction.length("r1, (r2)") == context.pc


def test_load_displaced():
    instruction = LoadStore(0xA8)
    values, context = _run(instruction, "r1, (r2)8")
    assert values == [0xA8 | 2, 1 << 4 | 2, 8, 0]
    assert instruction.length("r1, (r2)8") == context.pc


def test_store_memory_indirect():
    values, _ = _run(LoadStore(0xB0), "r1, (100h)")
    assert values == [0xB0 | 1, 1 << 4, 0x00, 0x01]


def test_store_absolute_symbol():
    context = AssemblyContext()
    context.define("var", 0x2345)
    values, _ = _run(LoadStore(0xB8), "r4, var", context)
    assert values == [0xB8, 4 << 4, 0x45, 0x23]


def test_load_store_decimal_address():
    values, _ = _run(LoadStore(0xA0), "r1, 20")
    assert values == [0xA0, 1 << 4, 20, 0]


def test_load_store_undefined_symbol():
    with pytest.raises(UndefinedSymbolError):
        _run(LoadStore(0xA0), "r1, nothing")


def test_load_store_malformed():
    with pytest.raises(MalformedInstructionError):
        _run(LoadStore(0xA0), "bad")


def test_load_store_length_short_form_needs_single_digit_register():
    instruction = LoadStore(0xA0)
    assert instruction.length("r1, (r2)") == 2
    assert instruction.length("r1, (r12)") == 4


def test_shift_by_register():
    values, _ = _run(Shift(0xC0), "r1, r2")
    assert values == [0xC0, 1 << 4 | 2]


def test_shift_by_decimal_count():
    values, _ = _run(Shift(0xC5), "r1, #3")
    assert values == [0xC5 | 1 << 4, 1 << 4 | 3]


def test_shift_by_hex_count():
    values, _ = _run(Shift(0xC0), "r1, #ah")
    assert values == [0xC0 | 1 << 4, 1 << 4 | 0xA]


@pytest.mark.parametrize("operands", ["r1, x", "x", "r1, #zz"])
def test_shift_rejects_bad_operands(operands):
    with pytest.raises(MalformedInstructionError):
        _run(Shift(0xC0), operands)


def test_table_opcodes():
    table = instruction_table()
    assert table["add"].opcode == 0x80
    assert isinstance(table["add"], RegisterArithmetic)
    assert table["bz"].opcode == table["beql"].opcode
    assert table["bnz"].opcode == table["bneql"].opcode
    assert isinstance(table["li"], ImmediateArithmetic)
    assert isinstance(table["rorc"], Shift)


_SAMPLE_OPERANDS = {
    ConditionalBranch: "target",
    Jump: "target",
    SingleRegister: "r1",
    NoOperand: "",
    RegisterArithmetic: "r1, r2",
    ImmediateArithmetic: "r1, #5",
    LoadStore: "r1, (r2)8",
    Shift: "r1, r2",
}


@pytest.mark.parametrize("mnemonic", sorted(instruction_table()))
def test_encoded_size_matches_length(mnemonic):
    instruction = instruction_table()[mnemonic]
    operands = _SAMPLE_OPERANDS[type(instruction)]
    context = AssemblyContext()
    context.define("target", 0x40)
    values, context = _run(instruction, operands, context)
    assert len(values) == instruction.length(operands) == context.pc
    expected_first = instruction.opcode | (2 if isinstance(instruction, LoadStore) else 0)
    assert values[0] == expected_first