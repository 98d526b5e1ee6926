"""
Defines the abstract syntax tree (AST) node types for the GEODSL construction language.

Classes:
    ObjectKind:
        Finite enumeration of the graphical-object variants, used as the
        discriminant of the GraphicalObjectNode tagged union.

    CoordsNode, PointNode, LineNode, LineSegmentNode, PerpendicularNode, TriangleNode:
        Immutable records for the graphical objects and their coordinates.

    CommandNode, TaskNode:
        One operator applied to one object, and the ordered list of commands.

    NodeDict:
        TypedDict shape of a serialized node, suitable for JSON output or debugging.

Each graphical-object node carries a class-level `kind` and supports `to_dict()`.
TaskNode is the only node that grows after construction: the parser appends
commands to it in parse order.

Example:
    PointNode("A", CoordsNode(1, 2)).to_dict()
    # {'kind': 'point', 'identifier': 'A', 'coords': {'x': 1, 'y': 2}}
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, Iterator, TypedDict, Union

Number = Union[int, float]


class ObjectKind(str, Enum):
    POINT = "point"
    LINE = "line"
    SEGMENT = "segment"
    PERPENDICULAR = "perpendicular"
    TRIANGLE = "triangle"


class CoordsDict(TypedDict):
    x: Number
    y: Number


class NodeDict(TypedDict, total=False):
    """
    TypedDict representation of a serialized AST node.

    Fields present depend on `kind`:
        point: identifier, coords
        line / segment: point_from, point_to
        perpendicular: base, from_point
        triangle: p1, p2, p3
        command: operator, object
        task: commands
    """

    kind: str
    identifier: str
    coords: CoordsDict
    point_from: "NodeDict"
    point_to: "NodeDict"
    base: "NodeDict"
    from_point: "NodeDict"
    p1: "NodeDict"
    p2: "NodeDict"
    p3: "NodeDict"
    operator: str
    object: "NodeDict"
    commands: list["NodeDict"]


@dataclass(frozen=True)
class CoordsNode:
    x: Number
    y: Number

    def to_dict(self) -> CoordsDict:
        return {"x": self.x, "y": self.y}


@dataclass(frozen=True)
class PointNode:
    identifier: str
    coords: CoordsNode

    kind: ClassVar[ObjectKind] = ObjectKind.POINT

    def to_dict(self) -> NodeDict:
        return {
            "kind": self.kind.value,
            "identifier": self.identifier,
            "coords": self.coords.to_dict(),
        }


@dataclass(frozen=True)
class LineNode:
    point_from: PointNode
    point_to: PointNode

    kind: ClassVar[ObjectKind] = ObjectKind.LINE

    def to_dict(self) -> NodeDict:
        return {
            "kind": self.kind.value,
            "point_from": self.point_from.to_dict(),
            "point_to": self.point_to.to_dict(),
        }


@dataclass(frozen=True)
class LineSegmentNode(LineNode):
    """Bounded counterpart of LineNode; same endpoints, different kind."""

    kind: ClassVar[ObjectKind] = ObjectKind.SEGMENT


@dataclass(frozen=True)
class PerpendicularNode:
    """Perpendicular dropped from `from_point` onto `base`."""

    base: LineNode
    from_point: PointNode

    kind: ClassVar[ObjectKind] = ObjectKind.PERPENDICULAR

    def to_dict(self) -> NodeDict:
        return {
            "kind": self.kind.value,
            "base": self.base.to_dict(),
            "from_point": self.from_point.to_dict(),
        }


@dataclass(frozen=True)
class TriangleNode:
    p1: PointNode
    p2: PointNode
    p3: PointNode

    kind: ClassVar[ObjectKind] = ObjectKind.TRIANGLE

    def to_dict(self) -> NodeDict:
        return {
            "kind": self.kind.value,
            "p1": self.p1.to_dict(),
            "p2": self.p2.to_dict(),
            "p3": self.p3.to_dict(),
        }


GraphicalObjectNode = Union[
    PointNode, LineNode, LineSegmentNode, PerpendicularNode, TriangleNode
]


@dataclass(frozen=True)
class CommandNode:
    operator: str
    object: GraphicalObjectNode

    def to_dict(self) -> NodeDict:
        return {
            "kind": "command",
            "operator": self.operator,
            "object": self.object.to_dict(),
        }


@dataclass
class TaskNode:
    """Ordered sequence of commands, in parse order."""

    commands: list[CommandNode] = field(default_factory=list)

    def to_dict(self) -> NodeDict:
        return {
            "kind": "task",
            "commands": [c.to_dict() for c in self.commands],
        }

    def __len__(self) -> int:
        return len(self.commands)

    def __iter__(self) -> Iterator[CommandNode]:
        return iter(self.commands)
