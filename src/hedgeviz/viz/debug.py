"""Debug utilities for half-edge meshes.

Answers "what does this element point to?" without opening the viewer.

Usage:
    from hedgeviz.viz.debug import MeshDebugger

    debugger = MeshDebugger(mesh)

    # Vertex star and neighbours
    info = debugger.trace_vertex("v0")
    print(info.star, info.neighbors, info.status)

    # Every relation of a half-edge, with missing targets flagged
    info = debugger.trace_half_edge("h3")

    # All structural errors the viewer would report
    report = debugger.find_issues()
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Optional

from hedgeviz.config import VizConfig
from hedgeviz.exceptions import MeshStructureError, UnterminatedVertexStarError
from hedgeviz.mesh.topology import derive_adjacency, walk_vertex_star
from hedgeviz.viz.view import MeshView

if TYPE_CHECKING:
    from hedgeviz.mesh.model import HalfEdgeMesh


@dataclass
class VertexTrace:
    """Trace information for a single vertex."""

    status: str  # "COMPLETED", "BOUND_EXCEEDED", "ISOLATED", "DANGLING" or "NOT_FOUND"
    vertex_id: str
    hedge: Optional[str] = None
    star: list[str] = field(default_factory=list)
    neighbors: list[str] = field(default_factory=list)
    error: Optional[str] = None
    partial_matches: list[str] = field(default_factory=list)


@dataclass
class HalfEdgeTrace:
    """Trace information for a single half-edge."""

    status: str  # "FOUND" or "NOT_FOUND"
    half_edge_id: str
    relations: dict[str, dict[str, Any]] = field(default_factory=dict)
    partial_matches: list[str] = field(default_factory=list)

    @property
    def dangling(self) -> list[str]:
        """Names of relations whose target does not exist."""
        return [name for name, info in self.relations.items() if not info["found"]]


@dataclass
class IssueReport:
    """Structural issues grouped by kind."""

    dangling_references: list[str] = field(default_factory=list)
    unterminated_stars: list[str] = field(default_factory=list)
    isolated_vertices: list[str] = field(default_factory=list)
    errors: list[MeshStructureError] = field(default_factory=list)

    @property
    def has_issues(self) -> bool:
        """True if any structural error was found. Isolated vertices are not errors."""
        return bool(self.errors)


def _partial_matches(query: str, candidates) -> list[str]:
    return [c for c in candidates if query in c][:5]


class MeshDebugger:
    """Debug helper for a HalfEdgeMesh."""

    def __init__(self, mesh: HalfEdgeMesh, config: VizConfig | None = None):
        self.mesh = mesh
        self.config = config or VizConfig()

    def trace_vertex(self, vertex_id: str) -> VertexTrace:
        """Walk the star of a vertex and list its neighbours."""
        mesh = self.mesh
        if vertex_id not in mesh.vertices:
            return VertexTrace(
                status="NOT_FOUND",
                vertex_id=vertex_id,
                partial_matches=_partial_matches(vertex_id, mesh.vertices),
            )

        vertex = mesh.vertices[vertex_id]
        try:
            walk = walk_vertex_star(mesh, vertex_id, self.config.vertex_star_bound)
        except MeshStructureError as e:
            return VertexTrace(status="DANGLING", vertex_id=vertex_id, hedge=vertex.hedge, error=e.message)

        if walk is None:
            return VertexTrace(status="ISOLATED", vertex_id=vertex_id)

        return VertexTrace(
            status=walk.status.name,
            vertex_id=vertex_id,
            hedge=vertex.hedge,
            star=list(walk.half_edges),
            neighbors=[mesh.half_edges[h].vertex for h in walk.half_edges],
        )

    def trace_half_edge(self, half_edge_id: str) -> HalfEdgeTrace:
        """List every relation of a half-edge and whether its target exists."""
        mesh = self.mesh
        if half_edge_id not in mesh.half_edges:
            return HalfEdgeTrace(
                status="NOT_FOUND",
                half_edge_id=half_edge_id,
                partial_matches=_partial_matches(half_edge_id, mesh.half_edges),
            )

        hedge = mesh.half_edges[half_edge_id]
        targets = {
            "pair": (hedge.pair, mesh.half_edges),
            "next": (hedge.next, mesh.half_edges),
            "prev": (hedge.prev, mesh.half_edges),
            "vertex": (hedge.vertex, mesh.vertices),
            "edge": (hedge.edge, mesh.edges),
        }
        if hedge.face is not None:
            targets["face"] = (hedge.face, mesh.faces)

        relations = {name: {"to": target, "found": target in mapping} for name, (target, mapping) in targets.items()}
        return HalfEdgeTrace(status="FOUND", half_edge_id=half_edge_id, relations=relations)

    def trace(self, entity_id: str) -> VertexTrace | HalfEdgeTrace:
        """Trace a vertex or half-edge by id."""
        if self.mesh.kind_of(entity_id) == "half-edge":
            return self.trace_half_edge(entity_id)
        return self.trace_vertex(entity_id)

    def find_issues(self) -> IssueReport:
        """Collect the structural errors the viewer reports for this mesh."""
        view = MeshView(config=self.config)
        view.load(self.mesh)

        report = IssueReport(errors=view.errors)
        report.isolated_vertices = sorted(v.id for v in self.mesh.vertices.values() if v.hedge is None)
        for error in report.errors:
            line = error.message.splitlines()[0]
            if isinstance(error, UnterminatedVertexStarError):
                report.unterminated_stars.append(line)
            else:
                report.dangling_references.append(line)
        return report

    def adjacency_table(self) -> list[tuple[str, str, str]]:
        """(vertex, vertex, edge) rows of the derived adjacency, sorted."""
        adjacency = derive_adjacency(self.mesh, vertex_star_bound=self.config.vertex_star_bound)
        return sorted((e.a, e.b, e.edge) for e in adjacency.edges)
