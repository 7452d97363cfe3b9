"""Read-only half-edge mesh model.

The mesh is what an exporter hands to the viewer: four mappings from
identifier to record. Nothing here checks topological invariants; records
are only checked for shape, so the viewer can still display broken
connectivity.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping

from hedgeviz.exceptions import MeshLoadError

_HALF_EDGE_KEYS = ("pair", "next", "prev", "vertex", "edge")

# `data = {...};` as loaded by the browser viewer via a <script> tag
_JS_ASSIGNMENT_RE = re.compile(r"^\s*(?:(?:var|let|const)\s+)?[A-Za-z_$][\w$]*\s*=\s*(.*?);?\s*$", re.DOTALL)


@dataclass(frozen=True)
class Vertex:
    """Mesh vertex; hedge is one outgoing half-edge, None for isolated vertices."""

    id: str
    hedge: str | None = None


@dataclass(frozen=True)
class HalfEdge:
    """Directed half of an edge.

    Attributes:
        id: Half-edge identifier
        pair: Opposite half-edge of the same edge
        next: Next half-edge around the face loop
        prev: Previous half-edge around the face loop
        vertex: Vertex this half-edge points to
        edge: Undirected edge owning this half-edge
        face: Face on this half-edge's side, if any
    """

    id: str
    pair: str
    next: str
    prev: str
    vertex: str
    edge: str
    face: str | None = None


@dataclass(frozen=True)
class Edge:
    id: str
    hedge: str | None = None


@dataclass(frozen=True)
class Face:
    id: str
    hedge: str


def _optional_id(value: Any) -> str | None:
    if value is None or value == "":
        return None
    return str(value)


class HalfEdgeMesh:
    """Four identifier -> record mappings making up one half-edge mesh.

    Identifiers share a single namespace: the rendered scene uses them as
    node ids, so a vertex and a half-edge may not have the same identifier.

    Example:
        >>> mesh = HalfEdgeMesh.from_dict({
        ...     "vertices": {"a": {"hedge": "h0"}, "b": {"hedge": "h1"}},
        ...     "half_edges": {
        ...         "h0": {"pair": "h1", "next": "h1", "prev": "h1", "vertex": "b", "edge": "e0"},
        ...         "h1": {"pair": "h0", "next": "h0", "prev": "h0", "vertex": "a", "edge": "e0"},
        ...     },
        ...     "edges": {"e0": {}},
        ...     "faces": {},
        ... })
        >>> mesh.summary()
        {'vertices': 2, 'half_edges': 2, 'edges': 1, 'faces': 0}
    """

    def __init__(
        self,
        vertices: Mapping[str, Vertex],
        half_edges: Mapping[str, HalfEdge],
        edges: Mapping[str, Edge],
        faces: Mapping[str, Face],
    ) -> None:
        self._vertices = MappingProxyType(dict(vertices))
        self._half_edges = MappingProxyType(dict(half_edges))
        self._edges = MappingProxyType(dict(edges))
        self._faces = MappingProxyType(dict(faces))
        self._check_namespace()

    @property
    def vertices(self) -> Mapping[str, Vertex]:
        return self._vertices

    @property
    def half_edges(self) -> Mapping[str, HalfEdge]:
        return self._half_edges

    @property
    def edges(self) -> Mapping[str, Edge]:
        return self._edges

    @property
    def faces(self) -> Mapping[str, Face]:
        return self._faces

    def summary(self) -> dict[str, int]:
        """Entity counts per kind."""
        return {
            "vertices": len(self._vertices),
            "half_edges": len(self._half_edges),
            "edges": len(self._edges),
            "faces": len(self._faces),
        }

    def kind_of(self, entity_id: str) -> str | None:
        """Return "vertex", "half-edge", "edge" or "face" for an identifier."""
        if entity_id in self._vertices:
            return "vertex"
        if entity_id in self._half_edges:
            return "half-edge"
        if entity_id in self._edges:
            return "edge"
        if entity_id in self._faces:
            return "face"
        return None

    def _check_namespace(self) -> None:
        seen: dict[str, str] = {}
        for kind, mapping in (
            ("vertex", self._vertices),
            ("half-edge", self._half_edges),
            ("edge", self._edges),
            ("face", self._faces),
        ):
            for entity_id in mapping:
                if entity_id in seen:
                    raise MeshLoadError(
                        f"Identifier '{entity_id}' is used by a {seen[entity_id]} and a {kind}\n\n"
                        f"  -> scene nodes are keyed by identifier, so they must be unique "
                        f"across vertices, half-edges, edges and faces\n\n"
                        f"How to fix:\n"
                        f"  Prefix identifiers by kind when exporting (e.g. 'v1', 'h1')"
                    )
                seen[entity_id] = kind

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> HalfEdgeMesh:
        """Build a mesh from the exporter's JSON shape.

        Expected shape::

            vertices:   {id: {hedge?: halfEdgeId}}
            half_edges: {id: {pair, next, prev, vertex, edge, face?}}
            edges:      {id: {hedge?}}
            faces:      {id: {hedge}}
        """
        if not isinstance(data, Mapping):
            raise MeshLoadError(f"Mesh data must be a mapping, got {type(data).__name__}")

        vertices = {
            str(vid): Vertex(id=str(vid), hedge=_optional_id(_record(rec, "vertex", vid).get("hedge")))
            for vid, rec in _section(data, "vertices").items()
        }

        half_edges = {}
        for hid, rec in _section(data, "half_edges").items():
            rec = _record(rec, "half-edge", hid)
            missing = [k for k in _HALF_EDGE_KEYS if _optional_id(rec.get(k)) is None]
            if missing:
                raise MeshLoadError(
                    f"Half-edge '{hid}' is missing required keys: {', '.join(missing)}"
                )
            half_edges[str(hid)] = HalfEdge(
                id=str(hid),
                **{k: str(rec[k]) for k in _HALF_EDGE_KEYS},
                face=_optional_id(rec.get("face")),
            )

        edges = {
            str(eid): Edge(id=str(eid), hedge=_optional_id(_record(rec, "edge", eid).get("hedge")))
            for eid, rec in _section(data, "edges").items()
        }

        faces = {}
        for fid, rec in _section(data, "faces").items():
            hedge = _optional_id(_record(rec, "face", fid).get("hedge"))
            if hedge is None:
                raise MeshLoadError(f"Face '{fid}' is missing required key: hedge")
            faces[str(fid)] = Face(id=str(fid), hedge=hedge)

        return cls(vertices, half_edges, edges, faces)


def _section(data: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    section = data.get(name, {})
    if section is None:
        return {}
    if not isinstance(section, Mapping):
        raise MeshLoadError(f"'{name}' must map identifiers to records, got {type(section).__name__}")
    return section


def _record(rec: Any, kind: str, entity_id: Any) -> Mapping[str, Any]:
    # Edge records are often exported as null or an empty list
    if rec is None or rec == []:
        return {}
    if not isinstance(rec, Mapping):
        raise MeshLoadError(f"Record for {kind} '{entity_id}' must be an object, got {type(rec).__name__}")
    return rec


def parse_mesh_text(text: str) -> HalfEdgeMesh:
    """Parse JSON, or a `data = {...};` script as used by the browser viewer."""
    stripped = text.strip()
    if not stripped.startswith("{"):
        match = _JS_ASSIGNMENT_RE.match(stripped)
        if match is None:
            raise MeshLoadError("Mesh file is neither JSON nor a `name = {...};` script")
        stripped = match.group(1)
    try:
        data = json.loads(stripped)
    except json.JSONDecodeError as e:
        raise MeshLoadError(f"Mesh file is not valid JSON: {e}") from e
    return HalfEdgeMesh.from_dict(data)


def load_mesh(path: str | Path) -> HalfEdgeMesh:
    """Load a mesh from a .json (or .js data) file."""
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise MeshLoadError(f"Could not read mesh file '{path}': {e}") from e
    return parse_mesh_text(text)
