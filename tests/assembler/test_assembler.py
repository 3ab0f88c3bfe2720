import pytest

import nova.common.ops as ops
from nova.common.isa import Instruction
from nova.nasm.asm import compile_source, assemble_file
from nova.nasm.errors import (
    CompileSyntaxError, InvalidOperandError, UnresolvedLabelError, DuplicateLabelError, Position
)

from unit_utils import records


def single(statement: str) -> Instruction:
    binary = compile_source(f'main: {{ {statement} }}')
    assert len(binary) == 10
    return Instruction.unpack(binary)


def test_hcf_only():
    assert compile_source('main: { hcf }') == bytes(10)


def test_forward_jump():
    binary = compile_source('a: { jump b }\nb: { hcf }')
    assert binary[:2] == bytes([0x0F, 0x05])
    assert binary[2:6] == (10).to_bytes(4, 'big')
    assert binary[6:10] == bytes(4)
    assert binary[10:] == bytes(10)


def test_backward_jump():
    binary = compile_source('a: { mu } b: { mu mu } c: { jump b }')
    assert records(binary)[3] == Instruction(ops.JMP, ops.CONST_LONGWORD, 10, 0)


def test_load_immediate():
    assert compile_source('main: { 42 -> reg3 byte }') == bytes.fromhex('05000000002a00000003')


def test_load_immediate_hex():
    assert single('0x1FF -> reg15 longword') == Instruction(ops.LDI, ops.LONGWORD, 0x1FF, 15)


@pytest.mark.parametrize('mnemonic, opcode', [
    ('hcf', ops.HCF),
    ('mu', ops.MU),
    ('add', ops.ADD),
    ('sub', ops.SUB),
    ('div', ops.DIV),
    ('mul', ops.MUL),
])
def test_no_operand(mnemonic, opcode):
    assert single(mnemonic) == Instruction(opcode)


@pytest.mark.parametrize('mnemonic, opcode', [
    ('not', ops.NOT),
    ('and', ops.AND),
    ('or', ops.BOR),
    ('xor', ops.XOR),
    ('copy', ops.CPY),
])
def test_register_pair(mnemonic, opcode):
    assert single(f'{mnemonic} reg1 -> reg12') == Instruction(opcode, ops.BYTE, 1, 12)


def test_move_registers():
    assert single('move word reg2 -> reg3') == Instruction(ops.MOV, ops.WORD, 2, 3)


def test_move_addresses():
    inst = single('move longword 0x200000 -> 2097160')
    assert inst == Instruction(ops.MOV, ops.LONGWORD, 0x200000, 0x200008)


def test_load():
    assert single('load word reg7 <- 2097152') == Instruction(ops.LDM, ops.WORD, 2097152, 7)


def test_store():
    assert single('store byte reg7 -> 2097152') == Instruction(ops.STM, ops.BYTE, 7, 2097152)


def test_swap():
    assert single('swap reg9') == Instruction(ops.SWP, ops.BYTE, 0, 9)


def test_exchange():
    assert single('exchange reg4 <-> reg5') == Instruction(ops.XCH, ops.BYTE, 4, 5)


def test_debug():
    assert single('debug reg6') == Instruction(ops.OUT, ops.BYTE, 0, 6)


def test_jump_if_equal_zero():
    binary = compile_source('top: { mu jump to top if reg4 is equal to zero }')
    assert records(binary)[1] == Instruction(ops.JEZ, ops.CONST_LONGWORD, 4, 0)


def test_jump_if_not_equal_zero():
    binary = compile_source('top: { mu } next: { jump to next if reg4 is not equal to zero }')
    assert records(binary)[1] == Instruction(ops.JNZ, ops.CONST_LONGWORD, 4, 10)


def test_jump_to_register():
    assert single('jump reg3') == Instruction(ops.JMP, ops.BYTE, 3, 0)
    assert single('jump to reg3 if reg1 is equal to zero') == Instruction(ops.JEZ, ops.BYTE, 1, 3)


def test_separator():
    prefixed = compile_source('main: { | hcf mu }')
    infixed = compile_source('main: { hcf | mu }')
    plain = compile_source('main: { hcf mu }')
    assert prefixed == infixed == plain
    assert [r.opcode for r in records(plain)] == [ops.HCF, ops.MU]


def test_empty_block_shares_offset():
    binary = compile_source('a: { } b: { hcf } c: { jump a jump b }')
    assert [r.source for r in records(binary)[1:]] == [0, 0]


def test_empty_program():
    assert compile_source('') == b''


def test_unresolved_label():
    with pytest.raises(UnresolvedLabelError) as e:
        compile_source('main: {\n  jump nowhere\n}')

    assert e.value.label == 'nowhere'
    assert e.value.position == Position(2, 8)


def test_unresolved_conditional_label():
    with pytest.raises(UnresolvedLabelError):
        compile_source('main: { jump to nowhere if reg0 is equal to zero }')


def test_duplicate_label():
    with pytest.raises(DuplicateLabelError):
        compile_source('a: { hcf } a: { hcf }')


def test_unknown_register():
    with pytest.raises(InvalidOperandError) as e:
        compile_source('main: { copy reg1 -> reg16 }')

    assert e.value.kind == 'register'
    assert e.value.text == 'reg16'


def test_unknown_size():
    with pytest.raises(InvalidOperandError):
        compile_source('main: { 1 -> reg1 quadword }')


def test_unknown_mnemonic():
    with pytest.raises(CompileSyntaxError) as e:
        compile_source('main: { jmp there }')

    assert e.value.expected == 'instruction'
    assert e.value.actual == 'jmp'


def test_bad_condition():
    with pytest.raises(CompileSyntaxError):
        compile_source('main: { jump to main if reg0 is less than zero }')


def test_missing_arrow():
    with pytest.raises(CompileSyntaxError) as e:
        compile_source('main: { copy reg1 reg2 }')

    assert e.value.position == Position(1, 19)


def test_unterminated_block():
    with pytest.raises(CompileSyntaxError) as e:
        compile_source('main: { hcf')

    assert e.value.actual == 'end of input'


def test_register_named_label():
    with pytest.raises(InvalidOperandError) as e:
        compile_source('reg3: { hcf } main: { jump reg3 }')

    assert e.value.kind == 'label'
    assert e.value.text == 'reg3'
    assert e.value.position == Position(1, 1)


def test_label_named_to():
    with pytest.raises(InvalidOperandError) as e:
        compile_source('main: { hcf }\nto: { hcf }')

    assert e.value.text == 'to'
    assert e.value.position == Position(2, 1)


def test_register_like_label_name():
    binary = compile_source('reg: { hcf } main: { jump reg }')
    assert records(binary)[1] == Instruction(ops.JMP, ops.CONST_LONGWORD, 0, 0)


def test_block_needs_label():
    with pytest.raises(CompileSyntaxError):
        compile_source('{ hcf }')


def test_assemble_file(tmp_path):
    source = tmp_path / 'prog.nova'
    binary = tmp_path / 'out' / 'prog.bin'
    source.write_text('main: { hcf }')

    assemble_file(source, binary)

    assert binary.read_bytes() == bytes(10)


def test_assemble_file_no_output_on_error(tmp_path):
    source = tmp_path / 'prog.nova'
    binary = tmp_path / 'prog.bin'
    source.write_text('main: { jump nowhere }')

    with pytest.raises(UnresolvedLabelError):
        assemble_file(source, binary)

    assert not binary.exists()
