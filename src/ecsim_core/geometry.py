# src/ecsim_core/geometry.py
import logging
from dataclasses import dataclass
from typing import Iterable, Sequence, Union

from .constants import POSITION_TOLERANCE

logger = logging.getLogger(__name__)


@dataclass(frozen=True, order=True)
class Position:
    """A point on the schematic plane. Equality and hashing are exact."""
    x: float
    y: float

    def __post_init__(self):
        object.__setattr__(self, 'x', float(self.x))
        object.__setattr__(self, 'y', float(self.y))

    @classmethod
    def of(cls, value: Union["Position", Sequence[float]]) -> "Position":
        if isinstance(value, Position):
            return value
        x, y = value
        return cls(x, y)


def point_on_segment(point: Position, start: Position, end: Position, tolerance: float = POSITION_TOLERANCE) -> bool:
    """True if `point` lies on the closed segment start-end (within `tolerance`)."""
    cross = (end.x - start.x) * (point.y - start.y) - (end.y - start.y) * (point.x - start.x)
    length = max(abs(end.x - start.x), abs(end.y - start.y))
    if abs(cross) > tolerance * max(length, 1.0):
        return False
    return (
        min(start.x, end.x) - tolerance <= point.x <= max(start.x, end.x) + tolerance
        and min(start.y, end.y) - tolerance <= point.y <= max(start.y, end.y) + tolerance
    )


def point_on_polyline(point: Position, points: Iterable[Position], tolerance: float = POSITION_TOLERANCE) -> bool:
    vertices = list(points)
    if len(vertices) == 1:
        only = vertices[0]
        return abs(only.x - point.x) <= tolerance and abs(only.y - point.y) <= tolerance
    return any(point_on_segment(point, a, b, tolerance) for a, b in zip(vertices, vertices[1:]))
