import pytest

from nova.nasm.errors import Position, CompileSyntaxError, InvalidOperandError
from nova.nasm.grammar import TokenKind
from nova.nasm.tokenizer import TokenStream, scan


def kinds_and_texts(text: str):
    return [(tok.kind, tok.text) for tok in scan(text)]


def test_simple_block():
    assert kinds_and_texts('main: { hcf }') == [
        (TokenKind.IDENT, 'main'),
        (TokenKind.PUNCT, ':'),
        (TokenKind.PUNCT, '{'),
        (TokenKind.IDENT, 'hcf'),
        (TokenKind.PUNCT, '}'),
        (TokenKind.EOF, ''),
    ]


def test_arrows_are_single_characters():
    assert [text for (_, text) in kinds_and_texts('<->')][:3] == ['<', '-', '>']


def test_integers():
    tokens = kinds_and_texts('42 0x1FF reg_15')
    assert tokens[:3] == [
        (TokenKind.INT, '42'),
        (TokenKind.INT, '0x1FF'),
        (TokenKind.IDENT, 'reg_15'),
    ]


def test_comments_are_skipped():
    text = '// heading\nmain /* inline */ : { }'
    assert [text for (_, text) in kinds_and_texts(text)] == ['main', ':', '{', '}', '']


def test_positions():
    tokens = list(scan('a: {\n    hcf\n}'))
    assert tokens[3].text == 'hcf'
    assert tokens[3].position == Position(2, 5)
    assert tokens[4].position == Position(3, 1)


def test_scan_is_lazy():
    tokens = scan('main: {')
    assert next(tokens).text == 'main'


def test_eof_repeats():
    stream = TokenStream('x')
    assert stream.next().text == 'x'
    assert stream.next().kind == TokenKind.EOF
    assert stream.next().kind == TokenKind.EOF


def test_expect_text_mismatch():
    stream = TokenStream('main ; {')
    stream.expect_ident()

    with pytest.raises(CompileSyntaxError) as e:
        stream.expect_text(':')

    assert e.value.position == Position(1, 6)
    assert e.value.expected == "':'"
    assert e.value.actual == ';'


def test_expect_kind_at_eof():
    stream = TokenStream('')

    with pytest.raises(CompileSyntaxError) as e:
        stream.expect_ident()

    assert e.value.actual == 'end of input'


def test_expect_int():
    stream = TokenStream('10 0xff 4294967295')
    assert stream.expect_int() == 10
    assert stream.expect_int() == 255
    assert stream.expect_int() == 0xFFFFFFFF


def test_expect_int_out_of_range():
    with pytest.raises(InvalidOperandError):
        TokenStream('4294967296').expect_int()
