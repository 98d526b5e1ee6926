"""
Structured syntax error raised by the GEODSL lexer and parser.

Every failure carries the description of what was expected, the source offset
where the violation happened, and the offending literal value. The rendered
message has a fixed format consumed by tooling that scrapes it:

    <offset>: ...<actual> -> Expected token <<expected>>.
"""

from typing import NamedTuple


class Snapshot(NamedTuple):
    """Position and literal value of the token an error refers to."""

    offset: int
    value: str


class GeoSyntaxError(SyntaxError):
    """Raised at the first violation of the GEODSL grammar.

    Attributes:
        expected (str): Description of the acceptable token(s).
        offset (int): Source offset of the offending token.
        actual (str): Literal value of the offending token.
    """

    def __init__(self, expected: str, offset: int, actual: str) -> None:
        super().__init__(f"{offset}: ...{actual} -> Expected token <{expected}>.")
        self.expected = expected
        self.offset = offset
        self.actual = actual


def syntax_error(expected: str, snapshot: Snapshot) -> GeoSyntaxError:
    """Build a GeoSyntaxError from an explicit offset/value snapshot."""
    return GeoSyntaxError(expected, snapshot.offset, snapshot.value)


__all__ = ["GeoSyntaxError", "Snapshot", "syntax_error"]
