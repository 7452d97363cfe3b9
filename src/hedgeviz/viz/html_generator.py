import html
import json
from dataclasses import asdict
from importlib.resources import files
from typing import Any, Dict, Optional

from hedgeviz.config import VizConfig
from hedgeviz.viz.satellite import SatelliteEntry
from hedgeviz.viz.scene import NetworkXScene
from hedgeviz.viz.styles import cytoscape_stylesheet

CYTOSCAPE_URL = "https://unpkg.com/cytoscape@3.30.2/dist/cytoscape.min.js"


def _category(tags: frozenset) -> str:
    # Scene nodes and links built by build_graph carry exactly one tag
    return next(iter(sorted(tags)), "")


def _screen(point) -> Dict[str, float]:
    return {"x": float(point.x), "y": -float(point.y)}


def to_cytoscape(scene: NetworkXScene) -> list:
    """Export scene nodes and links as Cytoscape.js elements.

    Node positions are converted from the scene's y-up frame to screen
    coordinates; unplaced nodes get no position.
    """
    elements = []
    for node_id, attrs in scene.graph.nodes(data=True):
        element: Dict[str, Any] = {
            "group": "nodes",
            "data": {"id": node_id, "class": _category(attrs["tags"])},
        }
        if attrs.get("label"):
            element["data"]["label"] = attrs["label"]
        if attrs["position"] is not None:
            element["position"] = _screen(attrs["position"])
        elements.append(element)

    for link in scene.links():
        data = {
            "id": link["id"],
            "class": _category(link["tags"]),
            "source": link["source"],
            "target": link["target"],
        }
        if link.get("label"):
            data["label"] = link["label"]
        elements.append({"group": "edges", "data": data})
    return elements


def build_graph_data(
    scene: NetworkXScene,
    plan: tuple[SatelliteEntry, ...],
    config: Optional[VizConfig] = None,
) -> Dict[str, Any]:
    """Everything the browser viewer needs: elements, style and satellite plan."""
    config = config or VizConfig()
    return {
        "elements": to_cytoscape(scene),
        "style": cytoscape_stylesheet(),
        "satellite": {
            "plan": [asdict(entry) for entry in plan],
            "offset": config.offset_magnitude,
            "showEdgeNodes": config.show_edge_nodes,
        },
    }


def generate_widget_html(graph_data: Dict[str, Any], title: str = "Half-edge mesh") -> str:
    """Generate a standalone HTML document for Cytoscape.js rendering.

    The viewer script is bundled within the package (hedgeviz.viz.assets);
    Cytoscape.js itself is loaded from a CDN.
    """

    def _read_asset(name: str) -> Optional[str]:
        """Read an asset file from the bundled package resources."""
        try:
            return (files("hedgeviz.viz.assets") / name).read_text(encoding="utf-8")
        except (FileNotFoundError, ModuleNotFoundError):
            return None

    viewer_js = _read_asset("viewer.js")
    if viewer_js is None:
        raise RuntimeError(
            "Missing bundled visualization asset: viewer.js. "
            "The hedgeviz package may be incorrectly installed. "
            "Try reinstalling with: pip install --force-reinstall hedgeviz"
        )

    # "</" would end the <script> element early
    graph_json = json.dumps(graph_data).replace("</", "<\\/")

    return f"""<!DOCTYPE html>
<html>
<head>
    <meta charset="UTF-8">
    <title>{html.escape(title)}</title>
    <script src="{CYTOSCAPE_URL}"></script>
    <style>
        body {{ margin: 0; overflow: hidden; font-family: system-ui, -apple-system, sans-serif; }}
        #graph {{ height: 100vh; width: 100vw; }}
    </style>
</head>
<body>
  <div id="graph"></div>
  <script>window.HEDGEVIZ_DATA = {graph_json};</script>
  <script>{viewer_js}</script>
</body>
</html>"""
