"""Tests for the networkx-backed scene graph."""

import math

import pytest

from hedgeviz.config import ForceLayoutConfig
from hedgeviz.viz.coordinates import Point
from hedgeviz.viz.scene import NetworkXScene, SceneUpdate
from hedgeviz.viz.styles import HALF_EDGE, VERTEX, VERTEX_EDGE


@pytest.fixture
def scene():
    s = NetworkXScene()
    s.add_node("a", [VERTEX])
    s.add_node("b", [VERTEX])
    s.add_node("h", [HALF_EDGE])
    return s


@pytest.fixture
def updates(scene):
    received = []
    scene.subscribe(received.append)
    return received


class TestStructure:
    def test_duplicate_node(self, scene):
        with pytest.raises(ValueError, match="already has a node"):
            scene.add_node("a", [VERTEX])

    def test_link_unknown_endpoint(self, scene):
        with pytest.raises(KeyError):
            scene.add_edge(None, [VERTEX_EDGE], "a", "zz")

    def test_auto_link_ids(self, scene):
        first = scene.add_edge(None, [VERTEX_EDGE], "a", "b", directed=False)
        second = scene.add_edge(None, [VERTEX_EDGE], "b", "a", directed=False)
        assert first != second
        assert {link["id"] for link in scene.links(VERTEX_EDGE)} == {first, second}

    def test_duplicate_link_id(self, scene):
        scene.add_edge("l1", [VERTEX_EDGE], "a", "b")
        with pytest.raises(ValueError, match="already has a link"):
            scene.add_edge("l1", [VERTEX_EDGE], "a", "b")

    def test_nodes_by_tag(self, scene):
        assert sorted(scene.nodes(VERTEX)) == ["a", "b"]
        assert scene.nodes(HALF_EDGE) == ["h"]

    def test_remove_node_drops_links(self, scene):
        link_id = scene.add_edge(None, [VERTEX_EDGE], "a", "b")
        scene.remove_node("a")
        assert not scene.has_node("a")
        assert scene.links() == []
        # The link id is free again
        scene.add_node("a", [VERTEX])
        scene.add_edge(link_id, [VERTEX_EDGE], "a", "b")

    def test_remove_edge(self, scene):
        link_id = scene.add_edge(None, [VERTEX_EDGE], "a", "b")
        scene.remove_edge(link_id)
        assert scene.links() == []

    def test_clear(self, scene):
        scene.add_edge(None, [VERTEX_EDGE], "a", "b")
        scene.clear()
        assert scene.nodes() == []
        assert scene.links() == []


class TestPositions:
    def test_unplaced_node(self, scene):
        assert scene.get_position("a") is None

    def test_unknown_node(self, scene):
        assert scene.get_position("nope") is None
        with pytest.raises(KeyError):
            scene.set_position("nope", Point(0, 0))

    def test_accepts_sequences(self, scene):
        scene.set_position("a", (1, 2))
        scene.set_position("b", {"x": 3, "y": 4})
        assert scene.get_position("a") == Point(1.0, 2.0)
        assert scene.get_position("b") == Point(3.0, 4.0)

    def test_positions_by_tag(self, scene):
        scene.set_position("a", Point(1, 1))
        scene.set_position("h", Point(2, 2))
        assert scene.positions(VERTEX) == {"a": Point(1, 1)}


class TestBatch:
    def test_unbatched_write_publishes_immediately(self, scene, updates):
        scene.set_position("a", Point(1, 1))
        assert updates == [SceneUpdate(moved=frozenset({"a"}))]

    def test_batch_publishes_once(self, scene, updates):
        with scene.batch():
            scene.set_position("a", Point(1, 1))
            scene.set_position("b", Point(2, 2))
            scene.set_position("h", Point(3, 3))
            assert updates == []
        assert updates == [SceneUpdate(moved=frozenset({"a", "b", "h"}))]

    def test_nested_batches(self, scene, updates):
        with scene.batch():
            with scene.batch():
                scene.set_position("a", Point(1, 1))
            assert updates == []
            scene.set_position("b", Point(2, 2))
        assert len(updates) == 1
        assert updates[0].moved == {"a", "b"}

    def test_published_on_exception(self, scene, updates):
        with pytest.raises(RuntimeError):
            with scene.batch():
                scene.set_position("a", Point(1, 1))
                raise RuntimeError("boom")
        assert not scene.in_batch
        assert updates == [SceneUpdate(moved=frozenset({"a"}))]

    def test_structure_changes(self, scene, updates):
        with scene.batch():
            scene.add_node("c", [VERTEX])
            scene.set_position("c", Point(0, 0))
        assert updates == [SceneUpdate(moved=frozenset({"c"}), structure_changed=True)]

    def test_run_batch(self, scene, updates):
        result = scene.run_batch(lambda: scene.set_position("a", Point(5, 5)) or "done")
        assert result == "done"
        assert len(updates) == 1

    def test_unsubscribe(self, scene):
        received = []
        unsubscribe = scene.subscribe(received.append)
        unsubscribe()
        scene.set_position("a", Point(1, 1))
        assert received == []

    def test_failing_observer_does_not_block_others(self, scene, caplog):
        def broken(update):
            raise ValueError("observer bug")

        received = []
        scene.subscribe(broken)
        scene.subscribe(received.append)
        scene.set_position("a", Point(1, 1))
        assert len(received) == 1
        assert "observer" in caplog.text.lower()

    def test_failing_observer_strict(self):
        scene = NetworkXScene(strict=True)
        scene.add_node("a", [VERTEX])

        def broken(update):
            raise ValueError("observer bug")

        scene.subscribe(broken)
        with pytest.raises(ValueError, match="observer bug"):
            scene.set_position("a", Point(1, 1))


class TestDrag:
    def test_handler_filtered_by_tag(self, scene):
        calls = []
        scene.on_drag(VERTEX, lambda node_id, point: calls.append((node_id, point)))
        scene.drag("a", Point(5, 6))
        scene.drag("h", Point(7, 8))
        assert calls == [("a", Point(5.0, 6.0))]
        assert scene.get_position("h") == Point(7.0, 8.0)

    def test_untagged_handler_sees_every_drag(self, scene):
        calls = []
        scene.on_drag(None, lambda node_id, point: calls.append(node_id))
        scene.drag("a", Point(0, 0))
        scene.drag("h", Point(0, 0))
        assert calls == ["a", "h"]

    def test_detach(self, scene):
        calls = []
        detach = scene.on_drag(VERTEX, lambda node_id, point: calls.append(node_id))
        detach()
        scene.drag("a", Point(0, 0))
        assert calls == []

    def test_failing_handler_logged(self, scene, caplog):
        def broken(node_id, point):
            raise RuntimeError("handler bug")

        calls = []
        scene.on_drag(VERTEX, broken)
        scene.on_drag(VERTEX, lambda node_id, point: calls.append(node_id))
        scene.drag("a", Point(0, 0))
        assert calls == ["a"]
        assert "Drag handler" in caplog.text


class TestForceLayout:
    @pytest.fixture
    def square(self):
        scene = NetworkXScene()
        for name in ("a", "b", "c", "d"):
            scene.add_node(name, [VERTEX])
        scene.add_node("h", [HALF_EDGE])
        for u, v in (("a", "b"), ("b", "c"), ("c", "d"), ("d", "a")):
            scene.add_edge(None, [VERTEX_EDGE], u, v, directed=False)
        return scene

    def test_places_only_primary_nodes(self, square):
        square.run_force_layout(ForceLayoutConfig())
        assert set(square.positions()) == {"a", "b", "c", "d"}
        assert square.get_position("h") is None

    def test_mean_link_length(self, square):
        square.run_force_layout(ForceLayoutConfig(ideal_edge_length=120.0))
        lengths = [
            (square.get_position(link["source"]) - square.get_position(link["target"])).length
            for link in square.links(VERTEX_EDGE)
        ]
        assert sum(lengths) / len(lengths) == pytest.approx(120.0)

    def test_single_batch_then_on_done(self, square):
        events = []
        square.subscribe(lambda update: events.append(("update", len(update.moved))))
        square.run_force_layout(ForceLayoutConfig(), on_done=lambda: events.append(("done", 0)))
        assert events == [("update", 4), ("done", 0)]

    def test_seeded_layout_is_repeatable(self, square):
        square.run_force_layout(ForceLayoutConfig(seed=7))
        first = square.positions()
        square.run_force_layout(ForceLayoutConfig(seed=7))
        second = square.positions()
        for node_id, point in first.items():
            assert math.isclose(point.x, second[node_id].x, abs_tol=1e-9)
            assert math.isclose(point.y, second[node_id].y, abs_tol=1e-9)

    def test_empty_scene_still_calls_on_done(self):
        done = []
        NetworkXScene().run_force_layout(ForceLayoutConfig(), on_done=lambda: done.append(True))
        assert done == [True]
