"""Wire mesh, scene and satellite layout together.

Data flows one way: mesh -> adjacency -> scene structure. Positions flow
back from the scene: the force layout or a drag moves vertices, and the
satellite layout follows.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable

from hedgeviz.config import VizConfig
from hedgeviz.mesh.topology import derive_adjacency
from hedgeviz.viz.builder import apply_graph, plan_graph
from hedgeviz.viz.satellite import SatelliteLayout
from hedgeviz.viz.scene import NetworkXScene

if TYPE_CHECKING:
    from hedgeviz.exceptions import MeshStructureError
    from hedgeviz.mesh.model import HalfEdgeMesh
    from hedgeviz.mesh.topology import Adjacency
    from hedgeviz.viz.builder import BuildReport
    from hedgeviz.viz.scene import SceneGraph

logger = logging.getLogger(__name__)


class MeshView:
    """A mesh rendered into a scene, with satellites kept in place.

    Example:
        >>> view = MeshView()
        >>> view.show(mesh)            # build, force layout, satellite layout
        >>> view.scene.drag("v0", Point(10, 10))  # half-edges follow
    """

    def __init__(
        self,
        scene: SceneGraph | None = None,
        config: VizConfig | None = None,
        *,
        strict: bool = False,
    ) -> None:
        """Create a view.

        Args:
            scene: Scene to render into (default: a new NetworkXScene)
            config: Viewer settings (default: VizConfig())
            strict: Raise the first structural error found while loading
                instead of collecting it
        """
        self.scene = scene if scene is not None else NetworkXScene(strict=strict)
        self.config = config or VizConfig()
        self.strict = strict
        self.mesh: HalfEdgeMesh | None = None
        self.adjacency: Adjacency | None = None
        self.build_report: BuildReport | None = None
        self.satellites: SatelliteLayout | None = None
        self._detach: Callable[[], None] | None = None

    def load(self, mesh: HalfEdgeMesh) -> None:
        """Replace whatever is shown with `mesh` (structure only, no layout).

        Everything is derived and checked before the scene is touched. In
        strict mode a structural error raises here and the previously loaded
        mesh stays shown, still attached to drags.
        """
        adjacency = derive_adjacency(
            mesh,
            vertex_star_bound=self.config.vertex_star_bound,
            strict=self.strict,
        )
        plan = plan_graph(mesh, adjacency, self.config)
        satellites = SatelliteLayout(mesh, self.scene, self.config)
        if self.strict:
            pending = [*plan.errors, *satellites.errors]
            if pending:
                raise pending[0]

        if self._detach is not None:
            self._detach()
            self._detach = None
        report = apply_graph(plan, self.scene)

        self.mesh = mesh
        self.adjacency = adjacency
        self.build_report = report
        self.satellites = satellites
        self._detach = satellites.attach()

        if self.errors:
            logger.warning("Loaded mesh with %d structural issues", len(self.errors))

    def layout(self) -> None:
        """Run the force layout on vertices, then place satellites."""
        if self.satellites is None:
            raise RuntimeError("No mesh loaded. Call load(mesh) first.")
        self.scene.run_force_layout(self.config.layout, on_done=self.satellites.relayout)

    def show(self, mesh: HalfEdgeMesh) -> MeshView:
        """Load `mesh` and lay it out."""
        self.load(mesh)
        self.layout()
        return self

    @property
    def errors(self) -> list[MeshStructureError]:
        """Structural errors from adjacency derivation, building and satellite planning.

        The same broken reference is often seen by more than one stage; it
        is listed once.
        """
        sources: list[MeshStructureError] = []
        if self.adjacency is not None:
            sources.extend(self.adjacency.errors)
        if self.build_report is not None:
            sources.extend(self.build_report.errors)
        if self.satellites is not None:
            sources.extend(self.satellites.errors)

        errors: list[MeshStructureError] = []
        seen: set[tuple[str, tuple[str, ...]]] = set()
        for error in sources:
            key = (type(error).__name__, error.ids)
            if key not in seen:
                seen.add(key)
                errors.append(error)
        return errors
