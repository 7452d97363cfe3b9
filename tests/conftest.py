"""Shared mesh fixtures.

The triangle fixture is a single triangle with both sides as faces:

    v2 (1, 2)
     /\\
    /  \\         f0: h0 -> h1 -> h2 (counter-clockwise)
   /____\\        f1: h3 -> h5 -> h4 (the back side)
 v0      v1
 (0, 0)  (2, 0)
"""

import copy

import pytest

from hedgeviz.mesh.model import HalfEdgeMesh
from hedgeviz.viz.coordinates import Point

TRIANGLE = {
    "vertices": {
        "v0": {"hedge": "h0"},
        "v1": {"hedge": "h1"},
        "v2": {"hedge": "h2"},
    },
    "half_edges": {
        "h0": {"pair": "h3", "next": "h1", "prev": "h2", "vertex": "v1", "edge": "e0", "face": "f0"},
        "h1": {"pair": "h4", "next": "h2", "prev": "h0", "vertex": "v2", "edge": "e1", "face": "f0"},
        "h2": {"pair": "h5", "next": "h0", "prev": "h1", "vertex": "v0", "edge": "e2", "face": "f0"},
        "h3": {"pair": "h0", "next": "h5", "prev": "h4", "vertex": "v0", "edge": "e0", "face": "f1"},
        "h4": {"pair": "h1", "next": "h3", "prev": "h5", "vertex": "v1", "edge": "e1", "face": "f1"},
        "h5": {"pair": "h2", "next": "h4", "prev": "h3", "vertex": "v2", "edge": "e2", "face": "f1"},
    },
    "edges": {"e0": {"hedge": "h0"}, "e1": {"hedge": "h1"}, "e2": {"hedge": "h2"}},
    "faces": {"f0": {"hedge": "h0"}, "f1": {"hedge": "h3"}},
}

TRIANGLE_POSITIONS = {
    "v0": Point(0.0, 0.0),
    "v1": Point(2.0, 0.0),
    "v2": Point(1.0, 2.0),
}


@pytest.fixture
def triangle_data():
    """A fresh, mutable copy of the triangle mesh dict."""
    return copy.deepcopy(TRIANGLE)


@pytest.fixture
def triangle(triangle_data):
    return HalfEdgeMesh.from_dict(triangle_data)


@pytest.fixture
def triangle_positions():
    return dict(TRIANGLE_POSITIONS)


@pytest.fixture
def broken_pair_mesh(triangle_data):
    """Triangle whose h0.pair points at a half-edge that does not exist."""
    triangle_data["half_edges"]["h0"]["pair"] = "h99"
    return HalfEdgeMesh.from_dict(triangle_data)


@pytest.fixture
def open_star_mesh(triangle_data):
    """Triangle with h3.next rewired so the star of v0 never returns to h0."""
    triangle_data["half_edges"]["h3"]["next"] = "h4"
    return HalfEdgeMesh.from_dict(triangle_data)


def _ring(n):
    """Closed polygon of n vertices: face "front" runs a0 -> a1 -> ..., "back" the other way."""
    vertices, half_edges, edges = {}, {}, {}
    for i in range(n):
        j, k = (i + 1) % n, (i - 1) % n
        vertices[f"v{i}"] = {"hedge": f"a{i}"}
        half_edges[f"a{i}"] = {
            "pair": f"b{i}", "next": f"a{j}", "prev": f"a{k}", "vertex": f"v{j}", "edge": f"e{i}", "face": "front",
        }
        half_edges[f"b{i}"] = {
            "pair": f"a{i}", "next": f"b{k}", "prev": f"b{j}", "vertex": f"v{i}", "edge": f"e{i}", "face": "back",
        }
        edges[f"e{i}"] = {"hedge": f"a{i}"}
    return {
        "vertices": vertices,
        "half_edges": half_edges,
        "edges": edges,
        "faces": {"front": {"hedge": "a0"}, "back": {"hedge": "b0"}},
    }


@pytest.fixture
def ring_data():
    """Factory for closed ring meshes of a given size."""
    return _ring
