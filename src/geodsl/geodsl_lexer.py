"""
Lexical analyzer for the GEODSL construction language.

This module converts raw command text into the token stream the parser consumes:

Classes:
    CharacterStream: Stream abstraction for reading characters with offset tracking.
    Token: A single immutable token with category, literal value, and source offset.
    Lexer: Converts a CharacterStream into a sequence of tokens.
    TokenIterator: Cursor over a token list with one-token lookahead.

Features:
    - Skips whitespace and single-line comments (`#`)
    - Recognizes:
        * Identifiers, keywords and operator words (case-insensitive reserved words)
        * Integer and fractional literals, optionally negative
        * Separators `(`, `)`, `,` and the command terminator `.`

Raises:
    GeoSyntaxError: If a character outside the language alphabet is encountered.

Example:
    >>> tokens = tokenize("DRAW POINT A(1, 2).")
    >>> tokens[0]
    Token(Operator, 'DRAW', 0)

Exports:
    - CharacterStream
    - Token
    - Lexer
    - TokenIterator
    - tokenize
"""

from dataclasses import dataclass

from geodsl.geodsl_constants import (
    FRACTIONAL_LITERAL,
    IDENTIFIER,
    INTEGER_LITERAL,
    SEPARATOR,
    SEPARATORS,
    word_hashmap,
)
from geodsl.geodsl_errors import GeoSyntaxError

DIGITS = "0123456789"


def is_digit(ch: str) -> bool:
    """ASCII digits only."""
    return ch != "" and ch in DIGITS


class CharacterStream:
    """
    A utility for reading characters from a string source with offset tracking.

    Attributes:
        source (str): The input source string.
        position (int): Current 0-based index in the source.
    """

    def __init__(self, source: str, position: int = 0):
        self.source = source
        self.position = position

    def next(self) -> str:
        """
        Consumes and returns the next character in the stream.

        Raises:
            IndexError: If reading past the end of the source.
        """
        if self.position >= len(self.source):
            raise IndexError(
                f"CharacterStreamError: Attempted to read past end of source at position=<{self.position}>"
            )
        char = self.source[self.position]
        self.position += 1
        return char

    def peek(self, offset: int = 0) -> str:
        """Returns the character at `offset` from the current position, or '' if out of bounds."""
        index = self.position + offset
        if index < 0 or index >= len(self.source):
            return ""
        return self.source[index]

    def end_of_file(self) -> bool:
        return self.position >= len(self.source)


@dataclass(frozen=True)
class Token:
    """Represents a single lexical token.

    Attributes:
        category (str): One of the categories in `geodsl_constants.TOKEN_CATEGORIES`.
        value (str): The literal lexeme (canonical spelling for reserved words).
        offset (int): 0-based character offset of the token start.
    """

    category: str
    value: str
    offset: int = 0

    def __repr__(self) -> str:
        return f"Token({self.category}, {self.value!r}, {self.offset})"


class Lexer:
    """Lexical analyzer for GEODSL.

    Attributes:
        stream (CharacterStream): The source stream to tokenize.
    """

    def __init__(self, stream: CharacterStream) -> None:
        self.stream = stream

    def peek(self, offset: int = 0) -> str:
        return self.stream.peek(offset)

    def advance(self) -> str:
        return self.stream.next()

    def skip_whitespace(self) -> None:
        """Skips all whitespace and comments in the stream."""
        while not self.stream.end_of_file():
            if self.peek().isspace():
                self.advance()
            elif self.peek() == "#":
                self.skip_comment()
            else:
                break

    def skip_comment(self) -> None:
        while not self.stream.end_of_file() and self.peek() != "\n":
            self.advance()

    def read_number(self) -> Token:
        """Reads an integer or fractional literal, with an optional leading minus."""
        start = self.stream.position
        num = ""
        if self.peek() == "-":
            num += self.advance()
        while is_digit(self.peek()):
            num += self.advance()
        # a dot belongs to the number only when a digit follows it
        if self.peek() == "." and is_digit(self.peek(1)):
            num += self.advance()
            while is_digit(self.peek()):
                num += self.advance()
            return Token(FRACTIONAL_LITERAL, num, start)
        return Token(INTEGER_LITERAL, num, start)

    def next_token(self) -> Token | None:
        """Consumes and returns the next Token, or None at end of input.

        Raises:
            GeoSyntaxError: If the next character cannot start any token.
        """
        self.skip_whitespace()

        if self.stream.end_of_file():
            return None

        ch = self.peek()
        start = self.stream.position

        # 1. Identifier or reserved word
        if ch.isalpha() or ch == "_":
            word = ""
            while self.peek().isalnum() or self.peek() == "_":
                word += self.advance()
            upper = word.upper()
            if upper in word_hashmap:
                return Token(word_hashmap[upper], upper, start)
            return Token(IDENTIFIER, word, start)

        # 2. Number
        if is_digit(ch) or (ch == "-" and is_digit(self.peek(1))):
            return self.read_number()

        # 3. Separator
        if ch in SEPARATORS:
            return Token(SEPARATOR, self.advance(), start)

        raise GeoSyntaxError("valid character", start, ch)

    def tokens(self) -> list[Token]:
        """Lexes the whole stream into a list of tokens."""
        result: list[Token] = []
        while (tok := self.next_token()) is not None:
            result.append(tok)
        return result


class TokenIterator:
    """Cursor over a token list with one-token lookahead.

    `peek_forward()` is idempotent: repeated calls without an intervening
    `next()` return the same token.
    """

    def __init__(self, tokens: list[Token]) -> None:
        self.tokens: list[Token] = list(tokens)
        self.position: int = 0

    def has_next(self) -> bool:
        return self.position < len(self.tokens)

    def next(self) -> Token:
        """Consumes and returns the next token.

        Raises:
            StopIteration: If the stream is exhausted.
        """
        if not self.has_next():
            raise StopIteration("token stream exhausted")
        tok = self.tokens[self.position]
        self.position += 1
        return tok

    def peek_forward(self) -> Token:
        if not self.has_next():
            raise StopIteration("token stream exhausted")
        return self.tokens[self.position]

    def current(self) -> Token | None:
        """Returns the last consumed token, or None before the first `next()`."""
        return self.tokens[self.position - 1] if self.position > 0 else None

    def current_offset(self) -> int:
        tok = self.current()
        return tok.offset if tok is not None else 0

    def current_value(self) -> str:
        tok = self.current()
        return tok.value if tok is not None else ""


def tokenize(source: str) -> list[Token]:
    """Lexes `source` into a list of tokens."""
    return Lexer(CharacterStream(source)).tokens()


__all__ = ["CharacterStream", "Lexer", "Token", "TokenIterator", "tokenize"]
