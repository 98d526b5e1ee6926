"""
Fixed vocabulary of the GEODSL construction language.

Token categories, keyword and operator literals, and separators shared by the
lexer, the parser and the formatter. Keyword and operator literals are stored
in their canonical (upper-case) spelling; the lexer matches source words
against them case-insensitively.

Exports:
    - IDENTIFIER, INTEGER_LITERAL, FRACTIONAL_LITERAL, KEYWORD, OPERATOR, SEPARATOR
    - TOKEN_CATEGORIES
    - keywords
    - OPERATORS
    - SEPARATORS
    - word_hashmap
"""

from typing import NamedTuple

# Token categories
IDENTIFIER = "Identifier"
INTEGER_LITERAL = "IntegerLiteral"
FRACTIONAL_LITERAL = "FractionalLiteral"
KEYWORD = "KeyWord"
OPERATOR = "Operator"
SEPARATOR = "Separator"

TOKEN_CATEGORIES: tuple[str, ...] = (
    IDENTIFIER,
    INTEGER_LITERAL,
    FRACTIONAL_LITERAL,
    KEYWORD,
    OPERATOR,
    SEPARATOR,
)


class Keywords(NamedTuple):
    """Literal spelling of every graphical-object keyword."""

    point: str = "POINT"
    line: str = "LINE"
    segment: str = "SEGMENT"
    perpendicular: str = "PERPENDICULAR"
    triangle: str = "TRIANGLE"


keywords = Keywords()

OPERATORS: frozenset[str] = frozenset({"DRAW", "CONSTRUCT", "BUILD", "MARK"})

LPAREN = "("
RPAREN = ")"
COMMA = ","
TERMINATOR = "."

SEPARATORS: frozenset[str] = frozenset({LPAREN, RPAREN, COMMA, TERMINATOR})

# word -> token category, used by the lexer for reserved words
word_hashmap: dict[str, str] = {
    **{kw: KEYWORD for kw in keywords},
    **{op: OPERATOR for op in OPERATORS},
}
