# src/ecsim_core/schematic/wire.py
import logging
from typing import Iterable, Sequence, Set, Tuple, Union

from ..constants import POSITION_TOLERANCE
from ..geometry import Position, point_on_polyline

logger = logging.getLogger(__name__)


class Wire:
    """
    A wire drawn as a polyline. Explicit connections to other wires are held as ids
    and kept symmetric by `Schematic.connect_wires`.
    """

    def __init__(self, wire_id: str, points: Iterable[Union[Position, Sequence[float]]]):
        self.wire_id = wire_id
        self.points: Tuple[Position, ...] = tuple(Position.of(point) for point in points)
        if len(self.points) < 2:
            raise ValueError(f"Wire '{wire_id}' needs at least two points, got {len(self.points)}.")
        self.connected_to: Set[str] = set()

    @property
    def endpoints(self) -> Tuple[Position, Position]:
        return self.points[0], self.points[-1]

    def touches(self, position: Position, tolerance: float = POSITION_TOLERANCE) -> bool:
        return point_on_polyline(position, self.points, tolerance)

    def touches_wire(self, other: "Wire", tolerance: float = POSITION_TOLERANCE) -> bool:
        """True if either wire has an endpoint lying on the other's polyline."""
        return (
            any(other.touches(point, tolerance) for point in self.endpoints)
            or any(self.touches(point, tolerance) for point in other.endpoints)
        )

    def __repr__(self) -> str:
        return f"Wire('{self.wire_id}', points={len(self.points)}, connected_to={sorted(self.connected_to)})"
