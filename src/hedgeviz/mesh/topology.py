"""Traversals over the half-edge structure.

Derives the undirected vertex adjacency ("real" mesh edges) by walking each
vertex star, plus the bounded face and neighbour walks used by the debugger.
Every cyclic walk carries a step cap so malformed data cannot hang the
viewer; running out of steps is reported, never treated as success.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Callable

from hedgeviz.exceptions import (
    DanglingReferenceError,
    MeshStructureError,
    UnterminatedVertexStarError,
)

if TYPE_CHECKING:
    from hedgeviz.mesh.model import HalfEdge, HalfEdgeMesh

logger = logging.getLogger(__name__)

DEFAULT_VERTEX_STAR_BOUND = 20


def is_canonical(a: str, b: str) -> bool:
    """True if `a` is the representative of the symmetric pair (a, b).

    Identifiers are ordered as strings; exactly one of (a, b) and (b, a)
    is canonical when a != b, and neither when a == b.
    """
    return str(a) < str(b)


class StarWalkStatus(Enum):
    """Outcome of a bounded cyclic walk.

    Values:
        COMPLETED: The walk returned to its start half-edge.
        BOUND_EXCEEDED: The step cap ran out first.
    """

    COMPLETED = "completed"
    BOUND_EXCEEDED = "bound_exceeded"


@dataclass(frozen=True)
class StarWalk:
    """Half-edges visited by one bounded walk, in visiting order."""

    start: str
    half_edges: tuple[str, ...]
    status: StarWalkStatus

    @property
    def completed(self) -> bool:
        return self.status is StarWalkStatus.COMPLETED


@dataclass(frozen=True)
class VertexAdjacencyEdge:
    """One real mesh edge between two vertices.

    `a` and `b` are stored in canonical order (a < b), so two instances
    describing the same unordered pair compare equal.
    """

    a: str
    b: str
    edge: str

    @classmethod
    def between(cls, u: str, v: str, edge: str) -> VertexAdjacencyEdge:
        a, b = (u, v) if is_canonical(u, v) else (v, u)
        return cls(a, b, edge)

    @property
    def key(self) -> tuple[str, str]:
        return (self.a, self.b)


@dataclass(frozen=True)
class Adjacency:
    """Result of derive_adjacency.

    Attributes:
        edges: One VertexAdjacencyEdge per unordered vertex pair
        errors: Structural errors found while walking vertex stars
        walks: Star walk per vertex that has an incident half-edge and
            could be walked without hitting a dangling reference
    """

    edges: frozenset[VertexAdjacencyEdge]
    errors: tuple[MeshStructureError, ...] = ()
    walks: dict[str, StarWalk] = field(default_factory=dict)

    def neighbors(self, vertex_id: str) -> set[str]:
        return {e.b if e.a == vertex_id else e.a for e in self.edges if vertex_id in e.key}


def _half_edge(mesh: HalfEdgeMesh, owner: str, relation: str, hedge_id: str) -> HalfEdge:
    try:
        return mesh.half_edges[hedge_id]
    except KeyError:
        raise DanglingReferenceError(owner, relation, hedge_id) from None


def _bounded_walk(
    mesh: HalfEdgeMesh,
    owner: str,
    start: str,
    step: Callable[[str], str],
    bound: int,
) -> StarWalk:
    """Apply `step` from `start` until it returns to `start` or `bound` steps pass.

    At most `bound` half-edges are reported, matching a loop that visits
    one half-edge per step.
    """
    _half_edge(mesh, owner, "hedge", start)
    visited = [start]
    current = start
    for _ in range(bound):
        current = step(current)
        if current == start:
            return StarWalk(start, tuple(visited), StarWalkStatus.COMPLETED)
        visited.append(current)
    return StarWalk(start, tuple(visited[:bound]), StarWalkStatus.BOUND_EXCEEDED)


def walk_vertex_star(
    mesh: HalfEdgeMesh,
    vertex_id: str,
    bound: int = DEFAULT_VERTEX_STAR_BOUND,
) -> StarWalk | None:
    """Walk the outgoing half-edges of a vertex via next(pair(h)).

    Returns None for an isolated vertex (no incident half-edge).

    Raises:
        KeyError: vertex_id is not a vertex of the mesh
        DanglingReferenceError: a pair/next link points outside the mesh
    """
    vertex = mesh.vertices[vertex_id]
    if vertex.hedge is None:
        return None

    def step(current: str) -> str:
        pair = _half_edge(mesh, current, "pair", mesh.half_edges[current].pair)
        return _half_edge(mesh, pair.id, "next", pair.next).id

    return _bounded_walk(mesh, vertex_id, vertex.hedge, step, bound)


def face_loop(
    mesh: HalfEdgeMesh,
    face_id: str,
    bound: int = DEFAULT_VERTEX_STAR_BOUND,
) -> StarWalk:
    """Walk the boundary loop of a face via next(h)."""
    face = mesh.faces[face_id]

    def step(current: str) -> str:
        return _half_edge(mesh, current, "next", mesh.half_edges[current].next).id

    return _bounded_walk(mesh, face_id, face.hedge, step, bound)


def face_vertices(mesh: HalfEdgeMesh, face_id: str, bound: int = DEFAULT_VERTEX_STAR_BOUND) -> list[str]:
    """Vertices around a face, in loop order."""
    return [mesh.half_edges[h].vertex for h in face_loop(mesh, face_id, bound).half_edges]


def vertex_neighbors(mesh: HalfEdgeMesh, vertex_id: str, bound: int = DEFAULT_VERTEX_STAR_BOUND) -> list[str]:
    """Vertices reached by the outgoing half-edges of a vertex, in star order."""
    walk = walk_vertex_star(mesh, vertex_id, bound)
    if walk is None:
        return []
    return [mesh.half_edges[h].vertex for h in walk.half_edges]


def derive_adjacency(
    mesh: HalfEdgeMesh,
    *,
    vertex_star_bound: int = DEFAULT_VERTEX_STAR_BOUND,
    strict: bool = False,
) -> Adjacency:
    """Derive the undirected vertex adjacency implied by the half-edges.

    For each vertex v with an incident half-edge, walks the star of v and
    emits (v, vertex(h), edge(h)) for every outgoing h where v sorts before
    the target. Each adjacency is therefore found from exactly one endpoint.
    Isolated vertices contribute nothing.

    Args:
        mesh: The mesh to walk
        vertex_star_bound: Step cap per vertex star
        strict: Raise the first structural error instead of collecting it

    Returns:
        Adjacency with the edge set and any structural errors. In non-strict
        mode a broken vertex never stops the remaining vertices from being
        walked.
    """
    found: dict[tuple[str, str], VertexAdjacencyEdge] = {}
    errors: list[MeshStructureError] = []
    walks: dict[str, StarWalk] = {}

    for vertex_id in mesh.vertices:
        try:
            walk = walk_vertex_star(mesh, vertex_id, vertex_star_bound)
            if walk is None:
                continue
            walks[vertex_id] = walk
            for hedge_id in walk.half_edges:
                hedge = mesh.half_edges[hedge_id]
                if hedge.vertex not in mesh.vertices:
                    raise DanglingReferenceError(hedge_id, "vertex", hedge.vertex)
                if not is_canonical(vertex_id, hedge.vertex):
                    continue
                candidate = VertexAdjacencyEdge(vertex_id, hedge.vertex, hedge.edge)
                if candidate.key in found:
                    logger.debug("Skipping repeated adjacency %s-%s via '%s'", vertex_id, hedge.vertex, hedge_id)
                    continue
                found[candidate.key] = candidate
            if not walk.completed:
                raise UnterminatedVertexStarError(vertex_id, vertex_star_bound, walk.half_edges)
        except MeshStructureError as e:
            if strict:
                raise
            logger.warning("Vertex '%s': %s", vertex_id, e.message.splitlines()[0])
            errors.append(e)

    logger.debug("Derived %d adjacency edges from %d vertices", len(found), len(mesh.vertices))
    return Adjacency(edges=frozenset(found.values()), errors=tuple(errors), walks=walks)
