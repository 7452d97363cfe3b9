"""Half-edge mesh model and topology traversals."""

from hedgeviz.mesh.model import (
    Edge,
    Face,
    HalfEdge,
    HalfEdgeMesh,
    Vertex,
    load_mesh,
    parse_mesh_text,
)
from hedgeviz.mesh.topology import (
    Adjacency,
    StarWalk,
    StarWalkStatus,
    VertexAdjacencyEdge,
    derive_adjacency,
    face_loop,
    face_vertices,
    is_canonical,
    vertex_neighbors,
    walk_vertex_star,
)

__all__ = [
    "Adjacency",
    "Edge",
    "Face",
    "HalfEdge",
    "HalfEdgeMesh",
    "StarWalk",
    "StarWalkStatus",
    "Vertex",
    "VertexAdjacencyEdge",
    "derive_adjacency",
    "face_loop",
    "face_vertices",
    "is_canonical",
    "load_mesh",
    "parse_mesh_text",
    "vertex_neighbors",
    "walk_vertex_star",
]
