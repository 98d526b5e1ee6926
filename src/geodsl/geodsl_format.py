"""
Serializes GEODSL ASTs back into command-language source.

`SourceEmitter` walks a `TaskNode` and writes one command per line, always
spelling points with their resolved coordinates, so re-parsing the output
reproduces the same coordinates without going through default inference.

Numbers are written in plain positional notation: integers as-is, floats with
the shortest digits that read back to the same value.

Example:
    >>> format_task(TaskNode([CommandNode("DRAW", PointNode("A", CoordsNode(1, 2)))]))
    'DRAW POINT A(1, 2).'

Raises:
    TypeError: If the input is not a TaskNode, or holds an unknown object node.
"""

import math
from decimal import Decimal

from geodsl.geodsl_ast import (
    CommandNode,
    CoordsNode,
    LineNode,
    Number,
    ObjectKind,
    PerpendicularNode,
    PointNode,
    TaskNode,
    TriangleNode,
)
from geodsl.geodsl_constants import TERMINATOR, keywords


def format_number(value: Number) -> str:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(f"Expected a number, got {value!r}")
    if isinstance(value, float) and not math.isfinite(value):
        raise ValueError(f"Cannot write non-finite number {value!r}")
    if isinstance(value, int):
        return str(value)
    text = format(Decimal(repr(value)), "f")
    # keep fractional literals fractional so they lex back as floats
    return text if "." in text else f"{text}.0"


class SourceEmitter:
    """Emits GEODSL source from AST nodes.

    Attributes:
        lines (list[str]): Accumulated command lines.
    """

    def __init__(self) -> None:
        self.lines: list[str] = []

    def get_output(self) -> str:
        return "\n".join(self.lines)

    def emit_task(self, task: TaskNode) -> None:
        for command in task.commands:
            self.lines.append(self.emit_command(command))

    def emit_command(self, node: CommandNode) -> str:
        return f"{node.operator} {self.emit_object(node.object)}{TERMINATOR}"

    def emit_object(self, node: object) -> str:
        kind = getattr(node, "kind", None)
        method = getattr(self, f"emit_{kind.value}", None) if kind else None
        if method is None:
            raise TypeError(f"No emitter method for node {node!r}")
        return str(method(node))

    def emit_coords(self, node: CoordsNode) -> str:
        return f"({format_number(node.x)}, {format_number(node.y)})"

    def emit_point(self, node: PointNode, keyword: bool = True) -> str:
        prefix = f"{keywords.point} " if keyword else ""
        return f"{prefix}{node.identifier}{self.emit_coords(node.coords)}"

    def emit_line(self, node: LineNode) -> str:
        word = keywords.segment if node.kind is ObjectKind.SEGMENT else keywords.line
        return (
            f"{word} {self.emit_point(node.point_from, keyword=False)} "
            f"{self.emit_point(node.point_to, keyword=False)}"
        )

    emit_segment = emit_line

    def emit_perpendicular(self, node: PerpendicularNode) -> str:
        return (
            f"{keywords.perpendicular} {self.emit_point(node.from_point, keyword=False)} "
            f"{self.emit_line(node.base)}"
        )

    def emit_triangle(self, node: TriangleNode) -> str:
        points = " ".join(
            self.emit_point(p, keyword=False) for p in (node.p1, node.p2, node.p3)
        )
        return f"{keywords.triangle} {points}"


def format_task(task: TaskNode) -> str:
    """Format a whole task as source text, one command per line."""
    if not isinstance(task, TaskNode):
        raise TypeError("format_task expects a TaskNode instance.")
    emitter = SourceEmitter()
    emitter.emit_task(task)
    return emitter.get_output()


__all__ = ["SourceEmitter", "format_number", "format_task"]
