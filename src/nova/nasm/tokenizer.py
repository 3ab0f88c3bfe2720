from typing import Iterator

import pyparsing as pp

from nova.nasm.errors import Position, CompileSyntaxError, InvalidOperandError
from nova.nasm.grammar import TokenKind, token
from nova.common.hwconf import REGISTER_MASK


class Token:
    kind: TokenKind
    text: str
    position: Position

    def __init__(self, kind: TokenKind, text: str, position: Position):
        self.kind = kind
        self.text = text
        self.position = position

    def describe(self) -> str:
        if self.kind == TokenKind.EOF:
            return TokenKind.EOF.value

        return self.text

    def __repr__(self) -> str:
        return f'Token({self.kind.name}, {self.text!r}, {self.position})'


def scan(text: str) -> Iterator[Token]:
    ''' Lazily splits text into tokens, finishing with a single EOF token '''
    for (tokens, start, _) in token.scan_string(text):
        (kind, value) = tokens[0]
        yield Token(kind, value, Position(pp.lineno(start, text), pp.col(start, text)))

    end = len(text)
    yield Token(TokenKind.EOF, '', Position(pp.lineno(end, text), pp.col(end, text)))


class TokenStream:
    def __init__(self, text: str):
        self.tokens = scan(text)
        self.last: Token | None = None

    def next(self) -> Token:
        if self.last is not None and self.last.kind == TokenKind.EOF:
            return self.last

        self.last = next(self.tokens)
        return self.last

    def expect_kind(self, kind: TokenKind, expected: str | None = None) -> Token:
        tok = self.next()

        if tok.kind != kind:
            raise CompileSyntaxError(tok.position, expected or kind.value, tok.describe())

        return tok

    def expect_text(self, text: str) -> Token:
        tok = self.next()

        if tok.text != text or tok.kind == TokenKind.EOF:
            raise CompileSyntaxError(tok.position, repr(text), tok.describe())

        return tok

    def expect_ident(self) -> str:
        return self.expect_kind(TokenKind.IDENT).text

    def expect_int(self) -> int:
        return parse_int(self.expect_kind(TokenKind.INT))

    def expect_arrow(self, arrow: str):
        ''' Multi-character arrows are sequences of single punctuation tokens '''
        for char in arrow:
            self.expect_text(char)


def parse_int(tok: Token) -> int:
    value = int(tok.text, 16) if tok.text[:2] in ('0x', '0X') else int(tok.text, 10)

    if value > REGISTER_MASK:
        raise InvalidOperandError(tok.position, 'integer literal', tok.text)

    return value
