"""Positions for satellite nodes (half-edges and edge markers).

Half-edges and edges have no coordinates of their own. Their positions are
a pure function of the two endpoint vertices of their edge:

    mid  = (A + B) / 2
    dir  = normalize(A - B)          A = vertex(pair(h)), B = vertex(h)
    perp = dir rotated by -90 degrees
    h    = mid + perp * offset_magnitude

A half-edge and its pair compute `dir` with A and B swapped, so they land
on opposite sides of their edge and the edge reads as a double line. With a
y-up frame, the half-edges of a counter-clockwise face loop sit inside the
face.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Mapping

from hedgeviz.config import VizConfig
from hedgeviz.exceptions import DanglingReferenceError, MissingPositionError
from hedgeviz.mesh.topology import is_canonical
from hedgeviz.viz.coordinates import Point
from hedgeviz.viz.styles import VERTEX

if TYPE_CHECKING:
    from hedgeviz.mesh.model import HalfEdgeMesh
    from hedgeviz.viz.scene import SceneGraph

logger = logging.getLogger(__name__)

_UNIT_X = Point(1.0, 0.0)


@dataclass(frozen=True)
class SatelliteEntry:
    """Everything relayout needs about one half-edge.

    Attributes:
        half_edge: Half-edge id (the satellite node)
        tail: Vertex the pair points to (A)
        head: Vertex this half-edge points to (B)
        edge: Owning edge id
        places_edge: True for the one half-edge per pair that positions
            the edge marker
    """

    half_edge: str
    tail: str
    head: str
    edge: str
    places_edge: bool


def plan_satellites(mesh: HalfEdgeMesh) -> tuple[tuple[SatelliteEntry, ...], tuple[DanglingReferenceError, ...]]:
    """Resolve each half-edge's endpoint vertices once per mesh.

    Half-edges whose pair or vertices are not in the mesh cannot be placed;
    they are left out of the plan and returned as errors so the rest of the
    mesh can still be laid out.
    """
    entries: list[SatelliteEntry] = []
    errors: list[DanglingReferenceError] = []
    for hedge in mesh.half_edges.values():
        pair = mesh.half_edges.get(hedge.pair)
        if pair is None:
            errors.append(DanglingReferenceError(hedge.id, "pair", hedge.pair))
            continue
        missing = next((v for v in (hedge.vertex, pair.vertex) if v not in mesh.vertices), None)
        if missing is not None:
            owner = hedge.id if missing == hedge.vertex else pair.id
            errors.append(DanglingReferenceError(owner, "vertex", missing))
            continue
        entries.append(
            SatelliteEntry(
                half_edge=hedge.id,
                tail=pair.vertex,
                head=hedge.vertex,
                edge=hedge.edge,
                places_edge=is_canonical(hedge.id, hedge.pair) and hedge.edge in mesh.edges,
            )
        )
    return tuple(entries), tuple(errors)


def _fallback_direction(tail: str, head: str) -> Point:
    # Antisymmetric in (tail, head) so coincident endpoints still split the pair
    return _UNIT_X if is_canonical(tail, head) else -_UNIT_X


def satellite_position(
    tail_pos: Point,
    head_pos: Point,
    offset_magnitude: float,
    tail: str = "",
    head: str = "",
) -> tuple[Point, Point]:
    """Return (half-edge position, edge midpoint) for one half-edge.

    Coincident endpoints have no direction; the unit x-axis (negated for
    the non-canonical half of the pair) is used instead, so this never
    raises.
    """
    mid = tail_pos.midpoint(head_pos)
    direction = (tail_pos - head_pos).normalized()
    if direction is None:
        direction = _fallback_direction(tail, head)
    return mid + direction.rotated_cw() * offset_magnitude, mid


def compute_satellite_positions(
    plan: tuple[SatelliteEntry, ...],
    positions: Mapping[str, Point],
    *,
    offset_magnitude: float,
    show_edge_nodes: bool = False,
) -> dict[str, Point]:
    """Compute every satellite position from vertex positions.

    Raises:
        MissingPositionError: a vertex in the plan has no position; nothing
            is computed in that case
    """
    missing = {v for entry in plan for v in (entry.tail, entry.head) if positions.get(v) is None}
    if missing:
        raise MissingPositionError(missing)

    result: dict[str, Point] = {}
    for entry in plan:
        hedge_pos, mid = satellite_position(
            positions[entry.tail], positions[entry.head], offset_magnitude, entry.tail, entry.head
        )
        result[entry.half_edge] = hedge_pos
        if show_edge_nodes and entry.places_edge:
            result[entry.edge] = mid
    return result


class SatelliteLayout:
    """Keeps satellite nodes attached to the current vertex positions.

    Call relayout() whenever vertex positions change (after the force layout
    settles and after every drag). All writes of one call go into a single
    scene batch.
    """

    def __init__(self, mesh: HalfEdgeMesh, scene: SceneGraph, config: VizConfig | None = None) -> None:
        self.mesh = mesh
        self.scene = scene
        self.config = config or VizConfig()
        self.plan, self.errors = plan_satellites(mesh)
        for error in self.errors:
            logger.warning("Half-edge not laid out: %s", error.message.splitlines()[0])

    def vertex_positions(self) -> dict[str, Point | None]:
        """Read the current vertex positions from the scene."""
        return {vertex_id: self.scene.get_position(vertex_id) for vertex_id in self.mesh.vertices}

    def relayout(self, positions: Mapping[str, Point] | None = None) -> dict[str, Point]:
        """Recompute and write all satellite positions.

        Args:
            positions: Vertex positions to use; read from the scene if omitted

        Returns:
            The positions written, keyed by node id

        Raises:
            MissingPositionError: a referenced vertex has no position. The
                scene is left untouched.
        """
        if positions is None:
            positions = self.vertex_positions()
        computed = compute_satellite_positions(
            self.plan,
            positions,
            offset_magnitude=self.config.offset_magnitude,
            show_edge_nodes=self.config.show_edge_nodes,
        )
        with self.scene.batch():
            for node_id, point in computed.items():
                self.scene.set_position(node_id, point)
        logger.debug("Placed %d satellite nodes", len(computed))
        return computed

    def on_vertex_moved(self, node_id: str, point: Point) -> None:
        """Drag handler: relayout from the scene's current positions."""
        self.relayout()

    def attach(self) -> Callable[[], None]:
        """Relayout after every drag of a vertex node; returns the detach function."""
        return self.scene.on_drag(VERTEX, self.on_vertex_moved)
