"""Tests for vertex-star walks and adjacency derivation."""

import pytest

from hedgeviz.exceptions import DanglingReferenceError, UnterminatedVertexStarError
from hedgeviz.mesh.model import HalfEdgeMesh
from hedgeviz.mesh.topology import (
    StarWalkStatus,
    VertexAdjacencyEdge,
    derive_adjacency,
    face_loop,
    face_vertices,
    is_canonical,
    vertex_neighbors,
    walk_vertex_star,
)


class TestCanonicalOrder:
    def test_exactly_one_direction(self):
        assert is_canonical("a", "b")
        assert not is_canonical("b", "a")

    def test_equal_ids(self):
        assert not is_canonical("a", "a")

    def test_string_order(self):
        # "10" < "9" as strings
        assert is_canonical("10", "9")

    def test_adjacency_edge_between_orders_endpoints(self):
        assert VertexAdjacencyEdge.between("v2", "v0", "e2") == VertexAdjacencyEdge("v0", "v2", "e2")


class TestMeshInvariants:
    """The fixture is well formed; these guard the walks below."""

    def test_pair_is_involution(self, triangle):
        for h in triangle.half_edges.values():
            assert triangle.half_edges[h.pair].pair == h.id

    def test_next_prev_inverse(self, triangle):
        for h in triangle.half_edges.values():
            assert triangle.half_edges[h.next].prev == h.id
            assert triangle.half_edges[h.prev].next == h.id

    def test_pair_shares_edge(self, triangle):
        for h in triangle.half_edges.values():
            assert triangle.half_edges[h.pair].edge == h.edge


class TestWalkVertexStar:
    def test_completed_star(self, triangle):
        walk = walk_vertex_star(triangle, "v0")
        assert walk.status is StarWalkStatus.COMPLETED
        assert walk.completed
        assert walk.half_edges == ("h0", "h5")

    def test_star_starts_at_vertex_hedge(self, triangle):
        assert walk_vertex_star(triangle, "v1").half_edges == ("h1", "h3")
        assert walk_vertex_star(triangle, "v2").half_edges == ("h2", "h4")

    def test_degree_equal_to_bound_completes(self, triangle):
        walk = walk_vertex_star(triangle, "v0", bound=2)
        assert walk.status is StarWalkStatus.COMPLETED

    def test_bound_below_degree(self, triangle):
        walk = walk_vertex_star(triangle, "v0", bound=1)
        assert walk.status is StarWalkStatus.BOUND_EXCEEDED
        assert walk.half_edges == ("h0",)

    def test_open_star_stops_at_bound(self, open_star_mesh):
        walk = walk_vertex_star(open_star_mesh, "v0", bound=20)
        assert walk.status is StarWalkStatus.BOUND_EXCEEDED
        assert len(walk.half_edges) == 20
        assert walk.half_edges[:4] == ("h0", "h4", "h2", "h4")

    def test_isolated_vertex(self):
        mesh = HalfEdgeMesh.from_dict({"vertices": {"v0": {}}})
        assert walk_vertex_star(mesh, "v0") is None

    def test_unknown_vertex(self, triangle):
        with pytest.raises(KeyError):
            walk_vertex_star(triangle, "v9")

    def test_dangling_pair(self, broken_pair_mesh):
        with pytest.raises(DanglingReferenceError) as exc_info:
            walk_vertex_star(broken_pair_mesh, "v0")
        error = exc_info.value
        assert (error.owner, error.relation, error.missing) == ("h0", "pair", "h99")

    def test_dangling_start(self, triangle_data):
        triangle_data["vertices"]["v0"]["hedge"] = "h42"
        mesh = HalfEdgeMesh.from_dict(triangle_data)
        with pytest.raises(DanglingReferenceError, match="h42"):
            walk_vertex_star(mesh, "v0")

    def test_neighbors_in_star_order(self, triangle):
        assert vertex_neighbors(triangle, "v0") == ["v1", "v2"]


class TestFaceLoop:
    def test_front_face(self, triangle):
        assert face_loop(triangle, "f0").half_edges == ("h0", "h1", "h2")
        assert face_vertices(triangle, "f0") == ["v1", "v2", "v0"]

    def test_back_face(self, triangle):
        assert face_vertices(triangle, "f1") == ["v0", "v2", "v1"]

    def test_dangling_next(self, triangle_data):
        triangle_data["half_edges"]["h1"]["next"] = "hX"
        mesh = HalfEdgeMesh.from_dict(triangle_data)
        with pytest.raises(DanglingReferenceError, match="hX"):
            face_loop(mesh, "f0")


class TestDeriveAdjacency:
    def test_triangle_edges(self, triangle):
        adjacency = derive_adjacency(triangle)
        assert adjacency.edges == frozenset(
            {
                VertexAdjacencyEdge("v0", "v1", "e0"),
                VertexAdjacencyEdge("v0", "v2", "e2"),
                VertexAdjacencyEdge("v1", "v2", "e1"),
            }
        )
        assert adjacency.errors == ()

    def test_each_pair_once(self, triangle):
        keys = [e.key for e in derive_adjacency(triangle).edges]
        assert len(keys) == len(set(keys)) == 3

    def test_endpoints_canonical(self, triangle):
        assert all(is_canonical(e.a, e.b) for e in derive_adjacency(triangle).edges)

    def test_neighbors(self, triangle):
        assert derive_adjacency(triangle).neighbors("v1") == {"v0", "v2"}

    def test_walks_recorded(self, triangle):
        walks = derive_adjacency(triangle).walks
        assert set(walks) == {"v0", "v1", "v2"}

    def test_isolated_vertex_contributes_nothing(self, triangle_data):
        triangle_data["vertices"]["v3"] = {}
        adjacency = derive_adjacency(HalfEdgeMesh.from_dict(triangle_data))
        assert len(adjacency.edges) == 3
        assert adjacency.neighbors("v3") == set()
        assert adjacency.errors == ()

    def test_empty_mesh(self):
        adjacency = derive_adjacency(HalfEdgeMesh.from_dict({}))
        assert adjacency.edges == frozenset()

    def test_dangling_collected(self, broken_pair_mesh):
        adjacency = derive_adjacency(broken_pair_mesh)
        assert len(adjacency.errors) == 1
        assert isinstance(adjacency.errors[0], DanglingReferenceError)
        # Other vertices are still walked
        assert VertexAdjacencyEdge("v1", "v2", "e1") in adjacency.edges

    def test_dangling_strict(self, broken_pair_mesh):
        with pytest.raises(DanglingReferenceError):
            derive_adjacency(broken_pair_mesh, strict=True)

    def test_unterminated_star_reported(self, open_star_mesh, caplog):
        with caplog.at_level("WARNING", logger="hedgeviz.mesh.topology"):
            adjacency = derive_adjacency(open_star_mesh, vertex_star_bound=20)

        assert len(adjacency.errors) == 1
        error = adjacency.errors[0]
        assert isinstance(error, UnterminatedVertexStarError)
        assert error.vertex_id == "v0"
        assert error.bound == 20
        assert len(error.visited) == 20
        assert "v0" in caplog.text

    def test_truncated_walk_keeps_found_edges(self, open_star_mesh):
        adjacency = derive_adjacency(open_star_mesh)
        assert VertexAdjacencyEdge("v0", "v1", "e0") in adjacency.edges

    def test_unterminated_strict(self, open_star_mesh):
        with pytest.raises(UnterminatedVertexStarError):
            derive_adjacency(open_star_mesh, strict=True)

    def test_dangling_target_vertex(self, triangle_data):
        triangle_data["half_edges"]["h5"]["vertex"] = "v7"
        adjacency = derive_adjacency(HalfEdgeMesh.from_dict(triangle_data))
        assert any(
            isinstance(e, DanglingReferenceError) and e.missing == "v7" for e in adjacency.errors
        )
