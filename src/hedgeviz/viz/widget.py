"""Jupyter widget and file export for mesh visualization."""

from __future__ import annotations

import html as html_module
from typing import TYPE_CHECKING

from hedgeviz.viz.html_generator import build_graph_data, generate_widget_html
from hedgeviz.viz.scene import NetworkXScene
from hedgeviz.viz.view import MeshView

if TYPE_CHECKING:
    from hedgeviz.config import VizConfig
    from hedgeviz.mesh.model import HalfEdgeMesh


class MeshWidget:
    """Widget for viewing a mesh scene in Jupyter/VSCode notebooks.

    The document is embedded through an iframe srcdoc with explicit
    dimensions, so it does not scroll inside the output cell.
    """

    def __init__(self, html_content: str, width: int, height: int):
        self.html_content = html_content
        self.width = width
        self.height = height

    def _repr_html_(self) -> str:
        """Return HTML representation for Jupyter display."""
        escaped_html = html_module.escape(self.html_content, quote=True)
        return (
            f'<iframe srcdoc="{escaped_html}" '
            f'width="{self.width}" height="{self.height}" frameborder="0" '
            f'style="border: none; width: {self.width}px; max-width: 100%; '
            f'height: {self.height}px; display: block; margin: 0 auto; border-radius: 8px;" '
            f'sandbox="allow-scripts allow-same-origin">'
            f'</iframe>'
        )


def render_html(view: MeshView, title: str = "Half-edge mesh") -> str:
    """Render a laid-out MeshView to a standalone HTML document."""
    if not isinstance(view.scene, NetworkXScene):
        raise TypeError(f"HTML export needs a NetworkXScene, got {type(view.scene).__name__}")
    if view.satellites is None:
        raise RuntimeError("No mesh loaded. Call view.show(mesh) first.")
    graph_data = build_graph_data(view.scene, view.satellites.plan, view.config)
    return generate_widget_html(graph_data, title=title)


def visualize(
    mesh: HalfEdgeMesh,
    *,
    config: VizConfig | None = None,
    filepath: str | None = None,
    width: int = 900,
    height: int = 600,
    title: str = "Half-edge mesh",
) -> MeshWidget | None:
    """Lay out a mesh and show it as an interactive graph.

    Args:
        mesh: Mesh to visualize
        config: Viewer settings (default: VizConfig())
        filepath: Path to save an HTML file instead of returning a widget
        width: Widget width in pixels
        height: Widget height in pixels
        title: Document title

    Returns:
        MeshWidget if filepath is None, otherwise None (saves to file)

    Example:
        >>> mesh = load_mesh("mesh.json")
        >>> visualize(mesh)                          # display in notebook
        >>> visualize(mesh, filepath="mesh.html")    # save to HTML file
    """
    view = MeshView(config=config).show(mesh)
    html_content = render_html(view, title=title)

    if filepath is not None:
        if not filepath.endswith(".html"):
            filepath = filepath + ".html"
        with open(filepath, "w", encoding="utf-8") as f:
            f.write(html_content)
        return None

    return MeshWidget(html_content, width, height)
