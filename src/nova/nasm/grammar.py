''' Token grammar '''

from enum import Enum

import pyparsing as pp


class TokenKind(Enum):
    IDENT = 'ident'
    INT = 'int'
    PUNCT = 'punct'
    EOF = 'end of input'


def g_token(expr: pp.ParserElement, kind: TokenKind) -> pp.ParserElement:
    return expr.set_parse_action(lambda r: (kind, r[0]))


id = g_token(pp.Word(pp.alphas + '_', pp.alphanums + '_'), TokenKind.IDENT)
hex_const = g_token(pp.Regex('0[xX][0-9a-fA-F]+'), TokenKind.INT)
dec_const = g_token(pp.Regex('[0-9]+'), TokenKind.INT)
punct = g_token(pp.Regex(r'\S'), TokenKind.PUNCT)

comment = pp.cpp_style_comment

# Order matters: hex before decimal, anything else is a single punctuation char
token = (id | hex_const | dec_const | punct).ignore(comment).parse_with_tabs()
