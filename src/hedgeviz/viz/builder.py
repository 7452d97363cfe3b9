"""Map a half-edge mesh onto scene nodes and links.

One node per vertex, half-edge and face (and per edge when edge markers are
enabled), and one link per mesh relation worth seeing. No positions are
computed here; the scene's force layout and the satellite layout do that
afterwards.

Building is split in two: plan_graph resolves every link against the mesh
without touching a scene, and apply_graph writes a plan into a scene. A
caller can therefore inspect the plan's errors before replacing what is
currently shown.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from hedgeviz.config import VizConfig
from hedgeviz.exceptions import DanglingReferenceError
from hedgeviz.mesh.topology import is_canonical
from hedgeviz.viz import styles

if TYPE_CHECKING:
    from hedgeviz.mesh.model import HalfEdgeMesh
    from hedgeviz.mesh.topology import Adjacency
    from hedgeviz.viz.scene import SceneGraph

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LinkSpec:
    """One scene link to create."""

    tag: str
    source: str
    target: str
    directed: bool = True
    label: str | None = None


@dataclass
class GraphPlan:
    """Scene structure for one mesh, resolved but not yet written.

    Attributes:
        nodes: (category, node ids) per node category, in insertion order
        links: Links whose endpoints are all planned nodes
        errors: Links left out because their target is not in the mesh
    """

    nodes: list[tuple[str, tuple[str, ...]]] = field(default_factory=list)
    links: list[LinkSpec] = field(default_factory=list)
    errors: list[DanglingReferenceError] = field(default_factory=list)


@dataclass
class BuildReport:
    """What build_graph put into the scene.

    Attributes:
        nodes: Node count per category
        links: Link count per category
        errors: Links skipped because their target is not in the mesh
    """

    nodes: dict[str, int] = field(default_factory=dict)
    links: dict[str, int] = field(default_factory=dict)
    errors: list[DanglingReferenceError] = field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)


class _Linker:
    """Collects links, recording dangling targets instead of failing the build."""

    def __init__(self, plan: GraphPlan, node_ids: set[str]) -> None:
        self.plan = plan
        self.node_ids = node_ids

    def link(
        self,
        tag: str,
        source: str,
        relation: str,
        target: str | None,
        *,
        directed: bool = True,
        label: str | None = None,
    ) -> None:
        if target is None:
            return
        if target not in self.node_ids:
            error = DanglingReferenceError(source, relation, target)
            logger.warning("Skipping %s link: %s", tag, error.message.splitlines()[0])
            self.plan.errors.append(error)
            return
        self.plan.links.append(LinkSpec(tag, source, target, directed, label))


def plan_graph(
    mesh: HalfEdgeMesh,
    adjacency: Adjacency,
    config: VizConfig | None = None,
) -> GraphPlan:
    """Resolve the nodes and links that represent `mesh`.

    Args:
        mesh: Mesh to render
        adjacency: Vertex adjacency from derive_adjacency(mesh)
        config: Edge-marker and prev-link switches (defaults: VizConfig())

    Returns:
        GraphPlan; dangling link targets are in plan.errors
    """
    config = config or VizConfig()
    plan = GraphPlan()

    node_groups = [
        (styles.VERTEX, mesh.vertices),
        (styles.HALF_EDGE, mesh.half_edges),
        (styles.FACE, mesh.faces),
    ]
    if config.show_edge_nodes:
        node_groups.append((styles.EDGE, mesh.edges))

    node_ids: set[str] = set()
    for tag, mapping in node_groups:
        plan.nodes.append((tag, tuple(mapping)))
        node_ids.update(mapping)

    linker = _Linker(plan, node_ids)

    for adj in sorted(adjacency.edges, key=lambda e: e.key):
        linker.link(styles.VERTEX_EDGE, adj.a, "adjacent", adj.b, directed=False, label=adj.edge)

    for hedge in mesh.half_edges.values():
        if is_canonical(hedge.id, hedge.pair) or hedge.pair not in mesh.half_edges:
            linker.link(styles.PAIR_LINK, hedge.id, "pair", hedge.pair, directed=False)
        linker.link(styles.NEXT_LINK, hedge.id, "next", hedge.next)
        if config.show_prev_links:
            linker.link(styles.PREV_LINK, hedge.id, "prev", hedge.prev)
        linker.link(styles.VERTEX_LINK, hedge.id, "vertex", hedge.vertex)
        if config.show_edge_nodes:
            linker.link(styles.EDGE_LINK, hedge.id, "edge", hedge.edge)

    for vertex in mesh.vertices.values():
        linker.link(styles.INCIDENCE_LINK, vertex.id, "hedge", vertex.hedge)

    for face in mesh.faces.values():
        linker.link(styles.INCIDENCE_LINK, face.id, "hedge", face.hedge)

    return plan


def apply_graph(plan: GraphPlan, scene: SceneGraph) -> BuildReport:
    """Replace the scene contents with `plan`, inside one batch.

    The scene is cleared first, so building a freshly loaded mesh never
    merges with the previous one.
    """
    report = BuildReport(errors=list(plan.errors))

    with scene.batch():
        scene.clear()
        for tag, node_ids in plan.nodes:
            for node_id in node_ids:
                scene.add_node(node_id, (tag,))
            report.nodes[tag] = len(node_ids)
        for link in plan.links:
            scene.add_edge(None, (link.tag,), link.source, link.target, directed=link.directed, label=link.label)
            report.links[link.tag] = report.links.get(link.tag, 0) + 1

    logger.debug("Built scene: nodes=%s links=%s", report.nodes, report.links)
    return report


def build_graph(
    mesh: HalfEdgeMesh,
    adjacency: Adjacency,
    scene: SceneGraph,
    config: VizConfig | None = None,
) -> BuildReport:
    """Replace the scene contents with the node/link structure of `mesh`.

    Args:
        mesh: Mesh to render
        adjacency: Vertex adjacency from derive_adjacency(mesh)
        scene: Scene to write into
        config: Edge-marker and prev-link switches (defaults: VizConfig())

    Returns:
        BuildReport with per-category counts and skipped dangling links
    """
    return apply_graph(plan_graph(mesh, adjacency, config), scene)
