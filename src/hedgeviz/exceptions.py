"""Exceptions for hedgeviz mesh loading, traversal and layout."""

from __future__ import annotations

from collections.abc import Iterable


class MeshLoadError(Exception):
    """Mesh input could not be turned into a HalfEdgeMesh.

    Raised for malformed input documents: wrong top-level shape, records
    missing required keys, or one identifier shared by two entity kinds.
    """

    pass


class ConfigError(Exception):
    """Raised when visualization configuration is invalid."""

    pass


class MeshStructureError(Exception):
    """Base class for structural-integrity errors found in a mesh.

    Attributes:
        ids: Identifiers of the offending mesh entities
        message: Human-readable error message
    """

    def __init__(self, message: str, ids: Iterable[str] = ()) -> None:
        self.ids = tuple(ids)
        self.message = message
        super().__init__(message)


class DanglingReferenceError(MeshStructureError):
    """A vertex, half-edge or face points to an identifier absent from the mesh.

    Attributes:
        owner: Identifier of the entity holding the reference
        relation: Name of the reference ("pair", "next", "hedge", ...)
        missing: The identifier that could not be resolved
    """

    def __init__(self, owner: str, relation: str, missing: str) -> None:
        self.owner = owner
        self.relation = relation
        self.missing = missing
        super().__init__(
            f"Dangling reference: '{owner}'.{relation} -> '{missing}'\n\n"
            f"  -> '{missing}' does not exist in the mesh\n\n"
            f"How to fix:\n"
            f"  Check the exporter that produced the mesh data",
            ids=(owner, missing),
        )


class UnterminatedVertexStarError(MeshStructureError):
    """The bounded vertex-star walk ran out of steps before returning to its start.

    Attributes:
        vertex_id: Vertex whose star was being walked
        bound: The iteration cap that was exhausted
        visited: Half-edges visited before the walk was cut off
    """

    def __init__(self, vertex_id: str, bound: int, visited: Iterable[str] = ()) -> None:
        self.vertex_id = vertex_id
        self.bound = bound
        self.visited = tuple(visited)
        super().__init__(
            f"Vertex star of '{vertex_id}' did not close within {bound} steps\n\n"
            f"  -> pair/next links around '{vertex_id}' do not form a cycle "
            f"through its incident half-edge\n\n"
            f"How to fix:\n"
            f"  Inspect the visited half-edges, or raise vertex_star_bound "
            f"for high-valence vertices",
            ids=(vertex_id, *self.visited),
        )


class MissingPositionError(MeshStructureError):
    """A vertex referenced by a half-edge has no position in the scene.

    Attributes:
        node_ids: Vertex identifiers without a position
    """

    def __init__(self, node_ids: Iterable[str]) -> None:
        self.node_ids = tuple(sorted(set(node_ids)))
        missing_str = ", ".join(f"'{n}'" for n in self.node_ids)
        super().__init__(
            f"No scene position for vertices: {missing_str}\n\n"
            f"  -> satellite layout was aborted, nothing was written\n\n"
            f"How to fix:\n"
            f"  Rebuild the scene from the current mesh before relayout",
            ids=self.node_ids,
        )
