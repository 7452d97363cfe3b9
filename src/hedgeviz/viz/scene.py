"""Scene graph the mesh is rendered into.

The scene is the rendering collaborator: it owns nodes, links and node
positions, runs the force-directed layout of primary nodes, and tells
listeners when a node was dragged. `SceneGraph` is the interface the
builder and the satellite layout program against; `NetworkXScene` is the
bundled implementation backed by a networkx MultiDiGraph.

Usage:
    scene = NetworkXScene()
    scene.subscribe(lambda update: print(update.moved))

    with scene.batch():
        scene.set_position("h0", Point(1, 2))
        scene.set_position("h1", Point(3, 4))
    # observer is called once, with both nodes
"""

from __future__ import annotations

import itertools
import logging
import math
from abc import ABC, abstractmethod
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Callable

import networkx as nx

from hedgeviz.config import ForceLayoutConfig
from hedgeviz.viz.coordinates import Point
from hedgeviz.viz.styles import VERTEX, VERTEX_EDGE

logger = logging.getLogger(__name__)

DragHandler = Callable[[str, Point], None]


@dataclass(frozen=True)
class SceneUpdate:
    """Changes published to observers when a batch closes.

    Attributes:
        moved: Nodes whose position was written
        structure_changed: True if nodes or links were added or removed
    """

    moved: frozenset[str]
    structure_changed: bool = False


class SceneGraph(ABC):
    """Operations the mesh viewer needs from a rendering backend."""

    @abstractmethod
    def clear(self) -> None:
        """Remove all nodes and links."""

    @abstractmethod
    def add_node(self, node_id: str, tags: Iterable[str], *, label: str | None = None) -> None:
        """Add a node tagged with its category."""

    @abstractmethod
    def add_edge(
        self,
        edge_id: str | None,
        tags: Iterable[str],
        source: str,
        target: str,
        *,
        directed: bool = True,
        label: str | None = None,
    ) -> str:
        """Add a link between two existing nodes and return its id."""

    @abstractmethod
    def get_position(self, node_id: str) -> Point | None:
        """Current position, or None for an unknown or unplaced node."""

    @abstractmethod
    def set_position(self, node_id: str, point: Point) -> None:
        """Move a node."""

    @abstractmethod
    def batch(self) -> Any:
        """Context manager grouping writes into one visual update."""

    def run_batch(self, fn: Callable[[], Any]) -> Any:
        """Run fn inside a batch and return its result."""
        with self.batch():
            return fn()

    @abstractmethod
    def on_drag(self, tag: str | None, handler: DragHandler) -> Callable[[], None]:
        """Call handler(node_id, point) after a node with `tag` is dragged.

        Returns a function that removes the handler.
        """

    @abstractmethod
    def run_force_layout(self, config: ForceLayoutConfig, on_done: Callable[[], None] | None = None) -> None:
        """Position primary nodes with a force-directed layout, then call on_done."""


class NetworkXScene(SceneGraph):
    """In-memory scene graph on top of networkx.

    Nodes carry `tags`, `label` and `position` attributes; links are keyed
    by their id and carry `tags`, `directed` and `label`.

    Observer and drag-handler failures are logged and swallowed so one
    broken listener cannot stop the others. With ``strict=True`` they
    propagate instead.
    """

    def __init__(self, *, strict: bool = False) -> None:
        self._graph = nx.MultiDiGraph()
        self._edge_index: dict[str, tuple[str, str]] = {}
        self._strict = strict
        self._batch_depth = 0
        self._pending_moves: set[str] = set()
        self._pending_structure = False
        self._observers: list[Callable[[SceneUpdate], None]] = []
        self._drag_handlers: list[tuple[str | None, DragHandler]] = []
        self._link_ids = itertools.count()

    @property
    def graph(self) -> nx.MultiDiGraph:
        """Underlying NetworkX graph."""
        return self._graph

    @property
    def in_batch(self) -> bool:
        return self._batch_depth > 0

    # ------------------------------------------------------------------
    # Structure
    # ------------------------------------------------------------------

    def clear(self) -> None:
        self._graph.clear()
        self._edge_index.clear()
        self._link_ids = itertools.count()
        self._pending_moves.clear()
        self._mark_structure()

    def add_node(self, node_id: str, tags: Iterable[str], *, label: str | None = None) -> None:
        if node_id in self._graph:
            raise ValueError(f"Scene already has a node '{node_id}'")
        self._graph.add_node(node_id, tags=frozenset(tags), label=label, position=None)
        self._mark_structure()

    def remove_node(self, node_id: str) -> None:
        for _, _, key in list(self._graph.in_edges(node_id, keys=True)) + list(self._graph.out_edges(node_id, keys=True)):
            self._edge_index.pop(key, None)
        self._graph.remove_node(node_id)
        self._pending_moves.discard(node_id)
        self._mark_structure()

    def add_edge(
        self,
        edge_id: str | None,
        tags: Iterable[str],
        source: str,
        target: str,
        *,
        directed: bool = True,
        label: str | None = None,
    ) -> str:
        for endpoint in (source, target):
            if endpoint not in self._graph:
                raise KeyError(f"Cannot link to unknown scene node '{endpoint}'")
        if edge_id is None:
            edge_id = f"link-{next(self._link_ids)}"
        if edge_id in self._edge_index:
            raise ValueError(f"Scene already has a link '{edge_id}'")
        self._graph.add_edge(source, target, key=edge_id, tags=frozenset(tags), directed=directed, label=label)
        self._edge_index[edge_id] = (source, target)
        self._mark_structure()
        return edge_id

    def remove_edge(self, edge_id: str) -> None:
        source, target = self._edge_index.pop(edge_id)
        self._graph.remove_edge(source, target, key=edge_id)
        self._mark_structure()

    def has_node(self, node_id: str) -> bool:
        return node_id in self._graph

    def tags(self, node_id: str) -> frozenset[str]:
        return self._graph.nodes[node_id]["tags"]

    def nodes(self, tag: str | None = None) -> list[str]:
        """Node ids, optionally only those carrying `tag`."""
        return [n for n, attrs in self._graph.nodes(data=True) if tag is None or tag in attrs["tags"]]

    def links(self, tag: str | None = None) -> list[dict[str, Any]]:
        """Links as dicts with id, source, target, tags, directed and label."""
        return [
            {"id": key, "source": u, "target": v, **attrs}
            for u, v, key, attrs in self._graph.edges(keys=True, data=True)
            if tag is None or tag in attrs["tags"]
        ]

    # ------------------------------------------------------------------
    # Positions
    # ------------------------------------------------------------------

    def get_position(self, node_id: str) -> Point | None:
        if node_id not in self._graph:
            return None
        return self._graph.nodes[node_id]["position"]

    def set_position(self, node_id: str, point: Point) -> None:
        if node_id not in self._graph:
            raise KeyError(f"Cannot position unknown scene node '{node_id}'")
        self._graph.nodes[node_id]["position"] = Point.from_any(point)
        self._pending_moves.add(node_id)
        if not self.in_batch:
            self._flush()

    def positions(self, tag: str | None = None) -> dict[str, Point]:
        """Positions of placed nodes, optionally only those carrying `tag`."""
        return {
            n: attrs["position"]
            for n, attrs in self._graph.nodes(data=True)
            if attrs["position"] is not None and (tag is None or tag in attrs["tags"])
        }

    # ------------------------------------------------------------------
    # Batching and observers
    # ------------------------------------------------------------------

    @contextmanager
    def batch(self) -> Iterator[NetworkXScene]:
        """Group writes; observers see one update when the outermost batch exits.

        The update is published on every exit path, including exceptions,
        so observers are never left without the writes that did happen.
        """
        self._batch_depth += 1
        try:
            yield self
        finally:
            self._batch_depth -= 1
            if self._batch_depth == 0:
                self._flush()

    def subscribe(self, observer: Callable[[SceneUpdate], None]) -> Callable[[], None]:
        """Register an observer called with each published SceneUpdate."""
        self._observers.append(observer)
        return lambda: self._observers.remove(observer)

    def _mark_structure(self) -> None:
        self._pending_structure = True
        if not self.in_batch:
            self._flush()

    def _flush(self) -> None:
        if not self._pending_moves and not self._pending_structure:
            return
        update = SceneUpdate(moved=frozenset(self._pending_moves), structure_changed=self._pending_structure)
        self._pending_moves = set()
        self._pending_structure = False
        for observer in list(self._observers):
            try:
                observer(update)
            except Exception:
                if self._strict:
                    raise
                logger.warning("Scene observer %s failed", observer, exc_info=True)

    # ------------------------------------------------------------------
    # Interaction
    # ------------------------------------------------------------------

    def on_drag(self, tag: str | None, handler: DragHandler) -> Callable[[], None]:
        entry = (tag, handler)
        self._drag_handlers.append(entry)
        return lambda: self._drag_handlers.remove(entry)

    def drag(self, node_id: str, point: Point) -> None:
        """Move a node as a user drag would, then notify drag handlers."""
        point = Point.from_any(point)
        self.set_position(node_id, point)
        node_tags = self.tags(node_id)
        for tag, handler in list(self._drag_handlers):
            if tag is not None and tag not in node_tags:
                continue
            try:
                handler(node_id, point)
            except Exception:
                if self._strict:
                    raise
                logger.warning("Drag handler %s failed for '%s'", handler, node_id, exc_info=True)

    def run_force_layout(
        self,
        config: ForceLayoutConfig,
        on_done: Callable[[], None] | None = None,
        *,
        node_tag: str = VERTEX,
        link_tag: str = VERTEX_EDGE,
    ) -> None:
        """Spring-layout the `node_tag` nodes using only `link_tag` links.

        Positions are rescaled so the mean link length equals
        config.ideal_edge_length, written in one batch, and on_done is
        called after the batch has been published.
        """
        layout_graph = nx.Graph()
        layout_graph.add_nodes_from(self.nodes(node_tag))
        for link in self.links(link_tag):
            if link["source"] in layout_graph and link["target"] in layout_graph:
                layout_graph.add_edge(link["source"], link["target"])

        if layout_graph.number_of_nodes() > 0:
            raw = nx.spring_layout(layout_graph, iterations=config.iterations, seed=config.seed)
            factor = _scale_factor(layout_graph, raw, config.ideal_edge_length)
            with self.batch():
                for node_id, coords in raw.items():
                    self.set_position(node_id, Point(float(coords[0]) * factor, float(coords[1]) * factor))
            logger.debug("Force layout placed %d nodes", layout_graph.number_of_nodes())

        if on_done is not None:
            on_done()


def _scale_factor(layout_graph: nx.Graph, raw: dict[str, Any], ideal_edge_length: float) -> float:
    lengths = [
        math.hypot(raw[u][0] - raw[v][0], raw[u][1] - raw[v][1])
        for u, v in layout_graph.edges()
        if u != v
    ]
    mean = sum(lengths) / len(lengths) if lengths else 0.0
    if mean <= 0.0:
        return ideal_edge_length
    return ideal_edge_length / mean
