import re

import pytest

from mifasm.assembler import assemble, clean_line, main
from mifasm.errors import (
    DuplicateSymbolError,
    UndefinedSymbolError,
    UnknownDirectiveError,
    UnknownInstructionError,
)

FIRST = "Program0-32KB.mif"
SECOND = "Program32-48KB.mif"
_ENTRY = re.compile(r"([0-9a-f]+) ?: ?([0-9a-f]+);")


def _entries(text):
    result = {}
    for line in text.splitlines():
        match = _ENTRY.fullmatch(line)
        if match:
            result[int(match[1], 16)] = int(match[2], 16)
    return result


def test_clean_line_strips_comment_and_case():
    assert clean_line("  HALT   ; stop here") == "halt"


def test_clean_line_keeps_text_before_first_semicolon():
    assert clean_line("ret;a;b") == "ret"


def test_clean_line_renames_stack_registers():
    assert clean_line("mv sp, bp") == "mv rf, re"


def test_clean_line_is_idempotent():
    once = clean_line("  ADD r1, r2   ; comment")
    assert clean_line(once) == once


def test_single_halt():
    text = assemble([".org 0h", "halt"]).render()[FIRST]
    assert _entries(text) == {0: 0x45}
    assert "%halt%" in text
    assert text.endswith("END;")


def test_jump_to_label():
    text = assemble([".org 10h", "start:", "jmp start"]).render()[FIRST]
    assert _entries(text) == {0x10: 0x20, 0x11: 0x10, 0x12: 0}


def test_backward_branch_is_relative_to_next_instruction():
    entries = _entries(assemble([".org 0h", "loop:", "bz loop"]).render()[FIRST])
    assert entries[0] == 0x08
    offset = entries[1] | entries[2] << 8
    if offset >= 0x8000:
        offset -= 0x10000
    assert 0 + 3 + offset == 0


def test_forward_jump_targets_labelled_instruction():
    program = [".org 0h", "jmp end", "halt", "end:", "halt"]
    entries = _entries(assemble(program).render()[FIRST])
    target = entries[1] | entries[2] << 8
    assert entries[target] == 0x45
    assert entries[target - 1] == 0x45


def test_define_used_as_immediate():
    entries = _entries(
        assemble([".define max 5", ".org 0h", "li r1, #max"]).render()[FIRST]
    )
    assert entries[0] == 0x9A
    assert entries[1] >> 4 == 1
    assert entries[2] == 5
    assert entries[3] == 0


def test_location_counter_carries_over_without_org():
    entries = _entries(assemble(["halt"]).render()[FIRST])
    assert entries == {1: 0x45}


def test_upper_memory_goes_to_second_image():
    images = assemble([".org 8000h", "halt"]).render()
    assert _entries(images[SECOND]) == {0: 0x45}
    assert _entries(images[FIRST]) == {}


def test_string_input_matches_list_input():
    program = [".org 0h", "push r2", "halt"]
    assert assemble("\n".join(program)).render() == assemble(program).render()


def test_unknown_instruction_reports_line():
    with pytest.raises(UnknownInstructionError) as info:
        assemble([".org 0h", "foo r1"])
    assert info.value.lineno == 2


def test_unknown_directive_reports_line():
    with pytest.raises(UnknownDirectiveError) as info:
        assemble([".bogus 1"])
    assert info.value.lineno == 1


def test_duplicate_label():
    with pytest.raises(DuplicateSymbolError) as info:
        assemble([".org 0h", "a:", "a:"])
    assert info.value.lineno == 3


def test_undefined_jump_target():
    with pytest.raises(UndefinedSymbolError):
        assemble([".org 0h", "jmp nowhere"])


def test_main_writes_images(tmp_path, capsys):
    program = [".org 0h", "halt"]
    source = tmp_path / "prog.asm"
    source.write_text("\n".join(program) + "\n", encoding="utf-8")
    assert main([str(source), "-o", str(tmp_path)]) == 0
    for name, text in assemble(program).render().items():
        assert (tmp_path / name).read_text(encoding="utf-8") == text
    assert "Prevedeno bez gresaka" in capsys.readouterr().out


def test_main_reports_error_line(tmp_path, capsys):
    source = tmp_path / "prog.asm"
    source.write_text(".org 0h\nfoo r1\n", encoding="utf-8")
    assert main([str(source), "-o", str(tmp_path)]) == 1
    out = capsys.readouterr().out
    assert "Greska na liniji 2" in out
    assert "Nepostojeca instrukcija" in out


def test_main_missing_source(tmp_path, capsys):
    assert main([str(tmp_path / "missing.asm"), "-o", str(tmp_path)]) == 1
    assert "Greska pri otvaranju ulaznog fajla" in capsys.readouterr().out