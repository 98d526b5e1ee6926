"""
GEODSL Parser

Parses GEODSL construction commands into a `TaskNode` AST and a table of
resolved point coordinates.

The parser is a fixed recursive-descent, LL(1) grammar driven through a
`TokenIterator`. Object kinds are selected by peeking the next token's literal
value, never by its category, so a single keyword table drives dispatch.

Grammar
-------
    Task          ::= Command*
    Command       ::= Operator Object '.'
    Object        ::= Point | Line | LineSegment | Perpendicular | Triangle
    Line          ::= LINE Point Point
    LineSegment   ::= SEGMENT Point Point
    Perpendicular ::= PERPENDICULAR Point (Line | LineSegment)
    Triangle      ::= TRIANGLE Point Point Point
    Point         ::= [POINT] Identifier [Coords]
    Coords        ::= '(' Number ',' Number ')'
    Number        ::= IntegerLiteral | FractionalLiteral

Point resolution
----------------
A point's coordinates are, in priority order:
    1. the explicit `(x, y)` written after its identifier;
    2. the coordinates already stored for its identifier;
    3. a running weighted average of every stored point plus a random integer
       jitter in [1, 5] on each axis.
Whatever the source, the table entry for the identifier is rewritten with the
result, so the last definition of a name wins.

Parser Behavior
---------------
- Fail-fast: the first grammar violation raises `GeoSyntaxError`; no recovery,
  no partial AST.
- A Parser instance owns its token stream and table; use one per parse.

Entry Points
------------
- `Parser(stream).parse_task()`
- `parse_source(source)` to lex and parse a string in one step.
"""

from __future__ import annotations

import logging
import math
import random
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Callable, Mapping, Protocol

from geodsl.geodsl_ast import (
    CommandNode,
    CoordsNode,
    GraphicalObjectNode,
    LineNode,
    LineSegmentNode,
    Number,
    ObjectKind,
    PerpendicularNode,
    PointNode,
    TaskNode,
    TriangleNode,
)
from geodsl.geodsl_constants import (
    COMMA,
    FRACTIONAL_LITERAL,
    IDENTIFIER,
    INTEGER_LITERAL,
    KEYWORD,
    LPAREN,
    OPERATOR,
    RPAREN,
    SEPARATOR,
    TERMINATOR,
    keywords,
)
from geodsl.geodsl_errors import GeoSyntaxError, Snapshot, syntax_error
from geodsl.geodsl_lexer import Token, TokenIterator, tokenize

logger = logging.getLogger(__name__)

IdentifiersTable = Mapping[str, CoordsNode]

JITTER_MIN = 1
JITTER_MAX = 5

OBJECT_NAME_EXPECTED = (
    f"name of a graphical object ({keywords.point}, {keywords.line}, "
    f"{keywords.segment}, {keywords.perpendicular}, {keywords.triangle})"
)
BASE_EXPECTED = f"{keywords.line} or {keywords.segment}"
POINT_EXPECTED = "point definition"
NUMBER_EXPECTED = "any number"
INITIAL_EXPECTED = "initial"

OBJECT_KEYWORDS: dict[str, ObjectKind] = {
    keywords.point: ObjectKind.POINT,
    keywords.line: ObjectKind.LINE,
    keywords.segment: ObjectKind.SEGMENT,
    keywords.perpendicular: ObjectKind.PERPENDICULAR,
    keywords.triangle: ObjectKind.TRIANGLE,
}

BASE_KEYWORDS: dict[str, ObjectKind] = {
    keywords.line: ObjectKind.LINE,
    keywords.segment: ObjectKind.SEGMENT,
}

NUMBER_CONVERTERS: dict[str, Callable[[str], Number]] = {
    INTEGER_LITERAL: int,
    FRACTIONAL_LITERAL: float,
}


class JitterSource(Protocol):
    """Bounded integer generator; `random.Random` satisfies it."""

    def randint(self, a: int, b: int) -> int: ...  # pragma: no cover


@dataclass
class ParserState:
    """Mutable state of one parse session.

    Attributes:
        identifiers: point identifier -> last resolved coordinates, in
            first-insertion order.
    """

    identifiers: dict[str, CoordsNode] = field(default_factory=dict)


class Parser:
    """
    GEODSL Parser Class

    Transforms a token stream into a `TaskNode`, resolving every point it meets
    against the identifiers table.

    Attributes
    ----------
    tokens : TokenIterator
        The token stream being consumed.
    state : ParserState
        The identifiers table of this session.
    jitter : JitterSource
        Source of the integer offsets added to inferred default coordinates.

    Raises
    ------
    GeoSyntaxError
        On construction over an empty stream, and at the first grammar violation.
    """

    def __init__(
        self, tokens: TokenIterator, jitter: JitterSource | None = None
    ) -> None:
        self.tokens: TokenIterator = tokens
        self.state: ParserState = ParserState()
        self.jitter: JitterSource = jitter if jitter is not None else random.Random()

        if not self.tokens.has_next():
            raise syntax_error(INITIAL_EXPECTED, self.snapshot())

        self.object_parsers: dict[ObjectKind, Callable[[], GraphicalObjectNode]] = {
            ObjectKind.POINT: self.parse_point,
            ObjectKind.LINE: self.parse_line,
            ObjectKind.SEGMENT: self.parse_line_segment,
            ObjectKind.PERPENDICULAR: self.parse_perpendicular,
            ObjectKind.TRIANGLE: self.parse_triangle,
        }
        self.base_parsers: dict[ObjectKind, Callable[[], LineNode]] = {
            ObjectKind.LINE: self.parse_line,
            ObjectKind.SEGMENT: self.parse_line_segment,
        }

    @property
    def identifiers_table(self) -> IdentifiersTable:
        """Read-only view of the identifiers table."""
        return MappingProxyType(self.state.identifiers)

    # Token matching

    def snapshot(self) -> Snapshot:
        """Offset and value of the last consumed token."""
        return Snapshot(self.tokens.current_offset(), self.tokens.current_value())

    def peek_snapshot(self) -> Snapshot:
        """Offset and value of the next token, or of the last one at end of input."""
        if not self.tokens.has_next():
            return self.snapshot()
        tok = self.tokens.peek_forward()
        return Snapshot(tok.offset, tok.value)

    def peek_value(self) -> str | None:
        return self.tokens.peek_forward().value if self.tokens.has_next() else None

    def try_next_token(
        self, expected_category: str | None = None, expected_value: str | None = None
    ) -> Token:
        """Consume one token, checking its category and/or value when given."""
        expected = f"{expected_category or ''} <{expected_value or ''}>"

        if not self.tokens.has_next():
            raise syntax_error(expected, self.snapshot())

        tok = self.tokens.next()
        unexpected_category = (
            expected_category is not None and tok.category != expected_category
        )
        unexpected_value = expected_value is not None and tok.value != expected_value

        if unexpected_category or unexpected_value:
            raise syntax_error(expected, Snapshot(tok.offset, tok.value))

        return tok

    # Grammar rules

    def parse_task(self) -> TaskNode:
        """Parse commands until the token stream is exhausted."""
        task = TaskNode()

        while self.tokens.has_next():
            task.commands.append(self.parse_command())

        logger.debug(
            "parsed %d command(s), %d identifier(s)",
            len(task.commands),
            len(self.state.identifiers),
        )
        return task

    def parse_command(self) -> CommandNode:
        operator = self.parse_operator()
        obj = self.parse_object()
        self.try_next_token(SEPARATOR, TERMINATOR)

        logger.debug("command %s %s", operator, obj.kind.value)
        return CommandNode(operator, obj)

    def parse_operator(self) -> str:
        return self.try_next_token(OPERATOR).value

    def parse_object(self) -> GraphicalObjectNode:
        """Dispatch on the peeked keyword to the matching object rule."""
        kind = OBJECT_KEYWORDS.get(self.peek_value() or "")
        if kind is None:
            raise syntax_error(OBJECT_NAME_EXPECTED, self.peek_snapshot())
        return self.object_parsers[kind]()

    def parse_line(self) -> LineNode:
        self.try_next_token(KEYWORD, keywords.line)

        p1 = self.parse_point()
        p2 = self.parse_point()

        return LineNode(p1, p2)

    def parse_line_segment(self) -> LineSegmentNode:
        self.try_next_token(KEYWORD, keywords.segment)

        p1 = self.parse_point()
        p2 = self.parse_point()

        return LineSegmentNode(p1, p2)

    def parse_perpendicular(self) -> PerpendicularNode:
        self.try_next_token(KEYWORD, keywords.perpendicular)

        from_point = self.parse_point()

        kind = BASE_KEYWORDS.get(self.peek_value() or "")
        if kind is None:
            raise syntax_error(BASE_EXPECTED, self.peek_snapshot())

        return PerpendicularNode(self.base_parsers[kind](), from_point)

    def parse_triangle(self) -> TriangleNode:
        self.try_next_token(KEYWORD, keywords.triangle)

        p1 = self.parse_point()
        p2 = self.parse_point()
        p3 = self.parse_point()

        return TriangleNode(p1, p2, p3)

    def parse_point(self) -> PointNode:
        """Parse `[POINT] Identifier [Coords]` and record it in the table."""
        if not self.tokens.has_next():
            raise syntax_error(POINT_EXPECTED, self.snapshot())

        head = self.tokens.peek_forward()
        if head.value == keywords.point:
            self.try_next_token(KEYWORD, keywords.point)
        elif head.category != IDENTIFIER:
            raise syntax_error(POINT_EXPECTED, Snapshot(head.offset, head.value))

        identifier = self.parse_point_id()
        coords = self.resolve_coords(identifier)
        self.state.identifiers[identifier] = coords

        return PointNode(identifier, coords)

    def parse_point_id(self) -> str:
        return self.try_next_token(IDENTIFIER).value

    def resolve_coords(self, identifier: str) -> CoordsNode:
        if self.peek_value() == LPAREN:
            return self.parse_coords()
        if identifier in self.state.identifiers:
            return self.state.identifiers[identifier]
        coords = self.random_average_coords()
        logger.debug(
            "inferred coordinates for %s: (%s, %s)", identifier, coords.x, coords.y
        )
        return coords

    def parse_coords(self) -> CoordsNode:
        self.try_next_token(SEPARATOR, LPAREN)
        x = self.parse_any_number()
        self.try_next_token(SEPARATOR, COMMA)
        y = self.parse_any_number()
        self.try_next_token(SEPARATOR, RPAREN)

        return CoordsNode(x, y)

    def parse_any_number(self) -> Number:
        """Parse a literal that converts to a finite float-representable number."""
        tok = self.try_next_token()

        convert = NUMBER_CONVERTERS.get(tok.category)
        if convert is not None:
            try:
                value = convert(tok.value)
                if math.isfinite(value):
                    return value
            except (ValueError, OverflowError):
                pass

        raise syntax_error(NUMBER_EXPECTED, Snapshot(tok.offset, tok.value))

    def random_average_coords(self) -> CoordsNode:
        """Running weighted average of the table plus jitter.

        Per axis, in insertion order: `acc = (acc + value) / count`. Order
        dependent; not the arithmetic mean.
        """
        average_x: Number = 0
        count_x = 0
        average_y: Number = 0
        count_y = 0

        for coords in self.state.identifiers.values():
            count_x += 1
            average_x = (average_x + coords.x) / count_x
            count_y += 1
            average_y = (average_y + coords.y) / count_y

        return CoordsNode(
            average_x + self.jitter.randint(JITTER_MIN, JITTER_MAX),
            average_y + self.jitter.randint(JITTER_MIN, JITTER_MAX),
        )


def parse_source(
    source: str, jitter: JitterSource | None = None
) -> tuple[TaskNode, IdentifiersTable]:
    """Lex and parse `source`, returning the task and its identifiers table."""
    parser = Parser(TokenIterator(tokenize(source)), jitter=jitter)
    task = parser.parse_task()
    return task, parser.identifiers_table


__all__ = [
    "GeoSyntaxError",
    "IdentifiersTable",
    "JitterSource",
    "Parser",
    "ParserState",
    "parse_source",
]
