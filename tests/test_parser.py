import random

import pytest
from hypothesis import given
from hypothesis import strategies as st

from conftest import FixedJitter
from geodsl.geodsl_ast import (
    CommandNode,
    CoordsNode,
    LineNode,
    LineSegmentNode,
    PerpendicularNode,
    PointNode,
    TaskNode,
    TriangleNode,
)
from geodsl.geodsl_constants import (
    IDENTIFIER,
    INTEGER_LITERAL,
    KEYWORD,
    OPERATOR,
    SEPARATOR,
)
from geodsl.geodsl_errors import GeoSyntaxError
from geodsl.geodsl_format import format_number
from geodsl.geodsl_lexer import Token, TokenIterator, tokenize
from geodsl.geodsl_parser import (
    BASE_EXPECTED,
    NUMBER_EXPECTED,
    OBJECT_NAME_EXPECTED,
    POINT_EXPECTED,
    Parser,
    parse_source,
)


def make_parser(source: str, jitter: FixedJitter | None = None) -> Parser:
    return Parser(TokenIterator(tokenize(source)), jitter=jitter or FixedJitter())


def parse(source: str, jitter: FixedJitter | None = None) -> TaskNode:
    return make_parser(source, jitter).parse_task()


def pt(name: str, x: float, y: float) -> PointNode:
    return PointNode(name, CoordsNode(x, y))


def parse_error(source: str) -> GeoSyntaxError:
    with pytest.raises(GeoSyntaxError) as exc:
        parse(source)
    return exc.value


# Construction


def test_empty_stream_fails_with_initial() -> None:
    it = TokenIterator([])
    with pytest.raises(GeoSyntaxError) as exc:
        Parser(it)
    assert exc.value.expected == "initial"
    assert exc.value.offset == 0
    assert exc.value.actual == ""
    assert it.position == 0


def test_comment_only_source_fails_with_initial() -> None:
    with pytest.raises(GeoSyntaxError) as exc:
        parse_source("# nothing here\n")
    assert exc.value.expected == "initial"


def test_error_message_format() -> None:
    err = parse_error("DRAW POINT A")
    assert str(err) == "11: ...A -> Expected token <Separator <.>>."


# Grammar


def test_point_with_explicit_coords() -> None:
    parser = make_parser("DRAW POINT A(1, 2).")
    task = parser.parse_task()
    assert task.commands == [CommandNode("DRAW", pt("A", 1, 2))]
    assert parser.identifiers_table["A"] == CoordsNode(1, 2)


def test_point_keyword_is_optional_inside_objects() -> None:
    obj = parse("DRAW LINE POINT A(1, 2) B(3, 4).").commands[0].object
    assert obj == LineNode(pt("A", 1, 2), pt("B", 3, 4))


def test_bare_identifier_is_not_an_object() -> None:
    err = parse_error("DRAW A(1, 2).")
    assert err.expected == OBJECT_NAME_EXPECTED
    assert err.actual == "A"


def test_fractional_coordinates_are_floats() -> None:
    point = parse("DRAW POINT A(0.5, -2.25).").commands[0].object
    assert point == pt("A", 0.5, -2.25)
    assert isinstance(point.coords.x, float)


def test_integer_coordinates_stay_ints() -> None:
    point = parse("DRAW POINT A(3, 4).").commands[0].object
    assert isinstance(point.coords.x, int)


def test_line_and_segment() -> None:
    task = parse("DRAW LINE A(0,0) B(1,1). BUILD SEGMENT C(2,2) D(3,3).")
    assert task.commands == [
        CommandNode("DRAW", LineNode(pt("A", 0, 0), pt("B", 1, 1))),
        CommandNode("BUILD", LineSegmentNode(pt("C", 2, 2), pt("D", 3, 3))),
    ]


def test_triangle() -> None:
    obj = parse("CONSTRUCT TRIANGLE A(0,0) B(4,0) POINT C(0,3).").commands[0].object
    assert obj == TriangleNode(pt("A", 0, 0), pt("B", 4, 0), pt("C", 0, 3))


@pytest.mark.parametrize(
    "base_kw,base_cls", [("LINE", LineNode), ("SEGMENT", LineSegmentNode)]
)
def test_perpendicular(base_kw: str, base_cls: type) -> None:
    source = f"DRAW PERPENDICULAR P(1,5) {base_kw} A(0,0) B(4,0)."
    obj = parse(source).commands[0].object
    base = base_cls(pt("A", 0, 0), pt("B", 4, 0))
    assert obj == PerpendicularNode(base, pt("P", 1, 5))


def test_commands_keep_parse_order() -> None:
    task = parse("DRAW POINT A(1,1). MARK POINT B(2,2). BUILD POINT C(3,3).")
    assert [c.operator for c in task] == ["DRAW", "MARK", "BUILD"]
    assert [c.object.identifier for c in task] == ["A", "B", "C"]


# Point resolution


def test_bare_reference_reuses_stored_coords() -> None:
    task = parse("DRAW POINT B(3, 4). DRAW LINE A(0,0) B.")
    assert task.commands[1].object.point_to == pt("B", 3, 4)


def test_redefinition_overwrites_table() -> None:
    parser = make_parser(
        "DRAW POINT B(3,4). DRAW POINT B(9,9). DRAW SEGMENT A(0,0) B."
    )
    task = parser.parse_task()
    assert task.commands[2].object.point_to == pt("B", 9, 9)
    assert parser.identifiers_table["B"] == CoordsNode(9, 9)


def test_reference_within_same_command() -> None:
    obj = parse("DRAW TRIANGLE A(1,2) B(3,4) A.").commands[0].object
    assert obj.p3 == pt("A", 1, 2)


def test_first_default_uses_jitter_only() -> None:
    jitter = FixedJitter([2, 5])
    parser = make_parser("DRAW POINT A.", jitter)
    parser.parse_task()
    assert parser.identifiers_table["A"] == CoordsNode(2, 5)
    assert jitter.calls == [(1, 5), (1, 5)]


def test_default_is_running_weighted_average() -> None:
    jitter = FixedJitter([1])
    parser = make_parser(
        "DRAW POINT A(3,6). DRAW POINT B(5,6). DRAW POINT C(8,3). DRAW POINT D.", jitter
    )
    task = parser.parse_task()
    # x: 3 -> (3+5)/2=4 -> (4+8)/3=4 ; y: 6 -> 6 -> (6+3)/3=3
    assert task.commands[3].object == pt("D", 5.0, 4.0)
    assert parser.identifiers_table["D"] == CoordsNode(5.0, 4.0)


def test_default_depends_on_insertion_order() -> None:
    a = make_parser(
        "DRAW POINT A(0,0). DRAW POINT B(6,6). DRAW POINT C(3,3). DRAW POINT D."
    )
    b = make_parser(
        "DRAW POINT C(3,3). DRAW POINT B(6,6). DRAW POINT A(0,0). DRAW POINT D."
    )
    a.parse_task()
    b.parse_task()
    assert a.identifiers_table["D"] != b.identifiers_table["D"]


def test_redefinition_keeps_insertion_position() -> None:
    parser = make_parser("DRAW POINT A(0,0). DRAW POINT B(2,2). DRAW POINT A(4,4).")
    parser.parse_task()
    assert list(parser.identifiers_table) == ["A", "B"]


def test_default_coords_are_reused_afterwards() -> None:
    tokens = TokenIterator(tokenize("DRAW POINT A. DRAW LINE A B."))
    parser = Parser(tokens, jitter=random.Random(3))
    task = parser.parse_task()
    first = task.commands[0].object
    assert task.commands[1].object.point_from == first


def test_default_jitter_stays_in_range() -> None:
    parser = Parser(TokenIterator(tokenize("DRAW POINT A.")))
    parser.parse_task()
    coords = parser.identifiers_table["A"]
    assert 1 <= coords.x <= 5
    assert 1 <= coords.y <= 5


def test_identifiers_table_is_read_only() -> None:
    parser = make_parser("DRAW POINT A(1,1).")
    parser.parse_task()
    with pytest.raises(TypeError):
        parser.identifiers_table["A"] = CoordsNode(0, 0)  # type: ignore[index]


def test_every_emitted_point_is_in_table() -> None:
    parser = make_parser("DRAW TRIANGLE A(0,0) B C. DRAW PERPENDICULAR D LINE A B.")
    task = parser.parse_task()
    tri = task.commands[0].object
    perp = task.commands[1].object
    for point in (tri.p1, tri.p2, tri.p3, perp.from_point):
        assert point.identifier in parser.identifiers_table
    assert set(parser.identifiers_table) == {"A", "B", "C", "D"}


# Errors


def test_triangle_with_two_points_fails_on_point_definition() -> None:
    err = parse_error("DRAW TRIANGLE A(0,0) B(1,1).")
    assert err.expected == POINT_EXPECTED
    assert err.actual == "."


def test_point_at_end_of_input() -> None:
    err = parse_error("DRAW LINE A(0,0)")
    assert err.expected == POINT_EXPECTED
    assert err.actual == ")"


def test_perpendicular_with_bad_base() -> None:
    err = parse_error("DRAW PERPENDICULAR P(1,1) TRIANGLE A B C.")
    assert err.expected == BASE_EXPECTED
    assert "LINE" in err.expected and "SEGMENT" in err.expected
    assert err.actual == "TRIANGLE"


def test_unknown_object_does_not_consume() -> None:
    parser = make_parser("DRAW circle A.")
    with pytest.raises(GeoSyntaxError) as exc:
        parser.parse_task()
    assert exc.value.expected == OBJECT_NAME_EXPECTED
    assert "graphical object" in exc.value.expected
    assert exc.value.actual == "circle"
    assert exc.value.offset == 5
    assert parser.tokens.position == 1


def test_missing_object_after_operator() -> None:
    err = parse_error("DRAW")
    assert err.expected == OBJECT_NAME_EXPECTED
    assert err.actual == "DRAW"


def test_command_must_start_with_operator() -> None:
    err = parse_error("POINT A(1,1).")
    assert err.expected == f"{OPERATOR} <>"
    assert err.offset == 0


def test_missing_terminator_between_commands() -> None:
    err = parse_error("DRAW POINT A(1,1) DRAW POINT B(2,2).")
    assert err.expected == f"{SEPARATOR} <.>"
    assert err.actual == "DRAW"


def test_keyword_not_followed_by_identifier() -> None:
    err = parse_error("DRAW POINT (1,1).")
    assert err.expected == f"{IDENTIFIER} <>"
    assert err.actual == "("


def test_non_number_in_coords() -> None:
    err = parse_error("DRAW POINT A(x, 1).")
    assert err.expected == NUMBER_EXPECTED
    assert err.actual == "x"


def test_unclosed_coords() -> None:
    err = parse_error("DRAW POINT A(1, 2")
    assert err.expected == f"{SEPARATOR} <)>"
    assert err.actual == "2"
    assert err.offset == 16


def test_non_ascii_digit_is_a_syntax_error() -> None:
    with pytest.raises(GeoSyntaxError) as exc:
        parse_source("DRAW POINT A(², 1).")
    assert exc.value.expected == "valid character"
    assert exc.value.offset == 13


@pytest.mark.parametrize("literal", ["²", "1²"])
def test_non_ascii_integer_token_fails_on_number(literal: str) -> None:
    tokens = [
        Token(OPERATOR, "DRAW", 0),
        Token(KEYWORD, "POINT", 5),
        Token(IDENTIFIER, "A", 11),
        Token(SEPARATOR, "(", 12),
        Token(INTEGER_LITERAL, literal, 13),
    ]
    with pytest.raises(GeoSyntaxError) as exc:
        Parser(TokenIterator(tokens), jitter=FixedJitter()).parse_task()
    assert exc.value.expected == NUMBER_EXPECTED
    assert exc.value.actual == literal


@pytest.mark.parametrize(
    "literal",
    [
        "9" * 5000,  # over the int string conversion limit
        "1" * 400,  # an int no float can hold
        "1" * 400 + ".0",  # overflows to inf
    ],
)
def test_unrepresentable_numbers_fail_on_number(literal: str) -> None:
    err = parse_error(f"DRAW POINT A({literal}, 1).")
    assert err.expected == NUMBER_EXPECTED
    assert err.offset == 13
    assert err.actual == literal


def test_hand_built_token_stream() -> None:
    tokens = [
        Token(OPERATOR, "MARK", 0),
        Token(KEYWORD, "POINT", 5),
        Token(IDENTIFIER, "Q", 11),
        Token(SEPARATOR, ".", 12),
    ]
    parser = Parser(TokenIterator(tokens), jitter=FixedJitter([3]))
    task = parser.parse_task()
    assert task.commands == [CommandNode("MARK", pt("Q", 3, 3))]


# Round trip

coord = st.one_of(
    st.integers(min_value=-1000, max_value=1000),
    st.floats(min_value=-1000, max_value=1000, allow_nan=False),
)


@given(coord, coord)
def test_explicit_coords_survive_serialization(x: float, y: float) -> None:
    source = f"DRAW POINT A({format_number(x)}, {format_number(y)})."
    point = parse(source).commands[0].object
    assert point.coords.x == x and type(point.coords.x) is type(x)
    assert point.coords.y == y and type(point.coords.y) is type(y)
