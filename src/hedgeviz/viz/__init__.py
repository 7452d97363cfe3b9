"""Visualization module for hedgeviz.

Usage:
    from hedgeviz.viz import visualize
    visualize(mesh)                        # Returns a Jupyter widget
    visualize(mesh, filepath="mesh.html")  # Standalone HTML file

Programmatic:
    view = MeshView().show(mesh)
    view.scene.positions("half-edge")

Debug:
    from hedgeviz.viz import MeshDebugger

    debugger = MeshDebugger(mesh)
    debugger.trace_vertex("v0")
    debugger.find_issues()
"""

from hedgeviz.viz.builder import BuildReport, GraphPlan, apply_graph, build_graph, plan_graph
from hedgeviz.viz.coordinates import Point
from hedgeviz.viz.debug import HalfEdgeTrace, IssueReport, MeshDebugger, VertexTrace
from hedgeviz.viz.satellite import (
    SatelliteEntry,
    SatelliteLayout,
    compute_satellite_positions,
    plan_satellites,
)
from hedgeviz.viz.scene import NetworkXScene, SceneGraph, SceneUpdate
from hedgeviz.viz.view import MeshView
from hedgeviz.viz.widget import MeshWidget, render_html, visualize

__all__ = [
    "BuildReport",
    "GraphPlan",
    "HalfEdgeTrace",
    "IssueReport",
    "MeshDebugger",
    "MeshView",
    "MeshWidget",
    "NetworkXScene",
    "Point",
    "SatelliteEntry",
    "SatelliteLayout",
    "SceneGraph",
    "SceneUpdate",
    "VertexTrace",
    "apply_graph",
    "build_graph",
    "compute_satellite_positions",
    "plan_graph",
    "plan_satellites",
    "render_html",
    "visualize",
]
