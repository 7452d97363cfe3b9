"""hedgeviz - interactive connectivity viewer for half-edge meshes."""

from hedgeviz.config import ForceLayoutConfig, VizConfig, load_config
from hedgeviz.exceptions import (
    ConfigError,
    DanglingReferenceError,
    MeshLoadError,
    MeshStructureError,
    MissingPositionError,
    UnterminatedVertexStarError,
)
from hedgeviz.mesh import (
    Adjacency,
    HalfEdgeMesh,
    StarWalk,
    StarWalkStatus,
    VertexAdjacencyEdge,
    derive_adjacency,
    is_canonical,
    load_mesh,
    walk_vertex_star,
)
from hedgeviz.viz import (
    MeshDebugger,
    MeshView,
    NetworkXScene,
    Point,
    SatelliteLayout,
    build_graph,
    visualize,
)

__version__ = "0.1.0"

__all__ = [
    # Mesh
    "HalfEdgeMesh",
    "load_mesh",
    "Adjacency",
    "StarWalk",
    "StarWalkStatus",
    "VertexAdjacencyEdge",
    "derive_adjacency",
    "is_canonical",
    "walk_vertex_star",
    # Viewer
    "MeshView",
    "NetworkXScene",
    "Point",
    "SatelliteLayout",
    "build_graph",
    "visualize",
    "MeshDebugger",
    # Configuration
    "ForceLayoutConfig",
    "VizConfig",
    "load_config",
    # Errors
    "ConfigError",
    "DanglingReferenceError",
    "MeshLoadError",
    "MeshStructureError",
    "MissingPositionError",
    "UnterminatedVertexStarError",
]
