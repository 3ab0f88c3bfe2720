import logging as lg
from pathlib import Path
from typing import Callable

import nova.common.ops as ops
from nova.common.hwconf import RECORD_SIZE
from nova.nasm.errors import CompileSyntaxError, InvalidOperandError
from nova.nasm.fpp import FPP, SOURCE_FIELD, DEST_FIELD
from nova.nasm.grammar import TokenKind
from nova.nasm.tokenizer import Token, TokenStream, parse_int


def g_cmd(opcode: int) -> Callable[['Assembler'], None]:
    ''' Instruction without operands '''
    return lambda self: self.issue(opcode)


def g_cmd_2(opcode: int) -> Callable[['Assembler'], None]:
    ''' <reg> -> <reg> '''
    return lambda self: self.from_dest(opcode)


class Assembler:
    ''' Single use parser turning a program into a binary image

        program   := block*
        block     := <label> ':' '{' statement* '}'
        statement := instruction | '|'
    '''
    stream: TokenStream
    fpp: FPP

    def __init__(self, text: str):
        self.stream = TokenStream(text)
        self.fpp = FPP()

    # - Operands - #

    def reg(self) -> int:
        tok = self.stream.expect_kind(TokenKind.IDENT, 'register')

        if tok.text not in ops.REGISTERS:
            raise InvalidOperandError(tok.position, 'register', tok.text)

        return ops.REGISTERS[tok.text]

    def size(self) -> int:
        tok = self.stream.expect_kind(TokenKind.IDENT, 'size')

        if tok.text not in ops.SIZES:
            raise InvalidOperandError(tok.position, 'size', tok.text)

        return ops.SIZES[tok.text]

    def reg_or_address(self) -> int:
        tok = self.stream.next()

        if tok.kind == TokenKind.INT:
            return parse_int(tok)

        if tok.kind != TokenKind.IDENT:
            raise CompileSyntaxError(tok.position, 'register or address', tok.describe())

        if tok.text not in ops.REGISTERS:
            raise InvalidOperandError(tok.position, 'register', tok.text)

        return ops.REGISTERS[tok.text]

    def issue(self, opcode: int, size: int = ops.BYTE, source: int = 0, dest: int = 0) -> int:
        return self.fpp.issue_record(opcode, size, source, dest)

    def issue_jump(self, opcode: int, target: Token, field: int, cond: int = 0):
        if target.text in ops.REGISTERS:
            # Target held in a register
            reg = ops.REGISTERS[target.text]
            fields = (reg, 0) if field == SOURCE_FIELD else (cond, reg)
            self.issue(opcode, ops.BYTE, *fields)
            return

        offset = self.issue(opcode, ops.CONST_LONGWORD, cond, 0)
        self.fpp.on_ref(offset, field, target.text, target.position)

    # - Instructions - #

    def from_dest(self, opcode: int):
        src = self.reg()
        self.stream.expect_arrow('->')
        dest = self.reg()
        self.issue(opcode, ops.BYTE, src, dest)

    # move <size> <reg|addr> -> <reg|addr>
    def move(self):
        size = self.size()
        src = self.reg_or_address()
        self.stream.expect_arrow('->')
        dest = self.reg_or_address()
        self.issue(ops.MOV, size, src, dest)

    def load(self):
        size = self.size()
        dest = self.reg()
        self.stream.expect_arrow('<-')
        addr = self.stream.expect_int()
        self.issue(ops.LDM, size, addr, dest)

    def store(self):
        size = self.size()
        src = self.reg()
        self.stream.expect_arrow('->')
        addr = self.stream.expect_int()
        self.issue(ops.STM, size, src, addr)

    def swap(self):
        self.issue(ops.SWP, ops.BYTE, 0, self.reg())

    def exchange(self):
        first = self.reg()
        self.stream.expect_arrow('<->')
        second = self.reg()
        self.issue(ops.XCH, ops.BYTE, first, second)

    def debug(self):
        self.issue(ops.OUT, ops.BYTE, 0, self.reg())

    # jump <label>
    # jump to <label> if <reg> is [not] equal to zero
    def jump(self):
        target = self.stream.expect_kind(TokenKind.IDENT, 'label')

        if target.text != 'to':
            self.issue_jump(ops.JMP, target, SOURCE_FIELD)
            return

        target = self.stream.expect_kind(TokenKind.IDENT, 'label')
        self.stream.expect_text('if')
        cond = self.reg()
        self.stream.expect_text('is')

        word = self.stream.expect_kind(TokenKind.IDENT, "'equal' or 'not'")

        if word.text == 'not':
            self.stream.expect_text('equal')
            opcode = ops.JNZ
        elif word.text == 'equal':
            opcode = ops.JEZ
        else:
            raise CompileSyntaxError(word.position, "'equal' or 'not'", word.text)

        self.stream.expect_text('to')
        self.stream.expect_text('zero')
        self.issue_jump(opcode, target, DEST_FIELD, cond)

    # <int> -> <reg> <size>
    def load_immediate(self, literal: Token):
        value = parse_int(literal)
        self.stream.expect_arrow('->')
        dest = self.reg()
        size = self.size()
        self.issue(ops.LDI, size, value, dest)

    HANDLERS = {
        'hcf': g_cmd(ops.HCF),
        'mu': g_cmd(ops.MU),
        'add': g_cmd(ops.ADD),
        'sub': g_cmd(ops.SUB),
        'div': g_cmd(ops.DIV),
        'mul': g_cmd(ops.MUL),
        'move': move,
        'load': load,
        'store': store,
        'swap': swap,
        'exchange': exchange,
        'not': g_cmd_2(ops.NOT),
        'and': g_cmd_2(ops.AND),
        'or': g_cmd_2(ops.BOR),
        'xor': g_cmd_2(ops.XOR),
        'copy': g_cmd_2(ops.CPY),
        'jump': jump,
        'debug': debug
    }

    # - Structure - #

    def statement(self, tok: Token):
        if tok.kind == TokenKind.IDENT and tok.text in self.HANDLERS:
            self.HANDLERS[tok.text](self)
            return

        if tok.kind == TokenKind.INT:
            self.load_immediate(tok)
            return

        if tok.kind == TokenKind.PUNCT and tok.text == '|':
            # Statement separator
            return

        raise CompileSyntaxError(tok.position, 'instruction', tok.describe())

    def block(self, label: Token):
        self.stream.expect_text(':')
        self.stream.expect_text('{')
        self.fpp.on_label(label.text, label.position)

        while True:
            tok = self.stream.next()

            if tok.kind == TokenKind.PUNCT and tok.text == '}':
                return

            self.statement(tok)

    def program(self) -> bytes:
        while True:
            tok = self.stream.next()

            if tok.kind == TokenKind.EOF:
                break

            if tok.kind != TokenKind.IDENT:
                raise CompileSyntaxError(tok.position, 'label', tok.describe())

            # Jump targets with these names mean a register or a condition
            if tok.text in ops.REGISTERS or tok.text == 'to':
                raise InvalidOperandError(tok.position, 'label', tok.text)

            self.block(tok)

        return self.fpp.resolve()


def compile_source(text: str) -> bytes:
    bytestr = Assembler(text).program()
    lg.info(f'Compiled {len(bytestr) // RECORD_SIZE} records')
    return bytestr


def assemble_file(source: Path, binary: Path):
    lg.debug(f'Assembling {source} -> {binary}')
    bytestr = compile_source(source.read_text())

    # Nothing is written unless compilation succeeded
    binary.parent.mkdir(parents=True, exist_ok=True)
    binary.write_bytes(bytestr)
