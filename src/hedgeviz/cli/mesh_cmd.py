"""Mesh CLI commands: render, inspect, trace."""

from __future__ import annotations

import logging
from dataclasses import asdict
from typing import Annotated

import typer

from hedgeviz.cli._format import format_status, print_json, print_lines, print_table
from hedgeviz.config import VizConfig, load_config
from hedgeviz.exceptions import ConfigError, MeshLoadError
from hedgeviz.mesh.model import HalfEdgeMesh, load_mesh
from hedgeviz.viz.debug import HalfEdgeTrace, MeshDebugger
from hedgeviz.viz.view import MeshView
from hedgeviz.viz.widget import render_html

MeshArgument = Annotated[str, typer.Argument(help="Mesh file (.json, or a `data = {...};` .js file)")]
JsonFlag = Annotated[bool, typer.Option("--json", help="Output as JSON")]
OutputOption = Annotated[str | None, typer.Option("--output", help="Write JSON to file")]
VerboseFlag = Annotated[bool, typer.Option("--verbose", "-v", help="Log structural issues and layout steps")]


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.ERROR,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _load(path: str) -> HalfEdgeMesh:
    try:
        return load_mesh(path)
    except MeshLoadError as e:
        print(f"Error: {e}")
        raise typer.Exit(1) from e


def _resolve_config(**overrides) -> VizConfig:
    """Layering: [tool.hedgeviz] is the base, command-line flags override."""
    try:
        return load_config().with_overrides(**overrides)
    except ConfigError as e:
        print(f"Error: {e}")
        raise typer.Exit(1) from e


def mesh_render(
    mesh_path: MeshArgument,
    output: Annotated[str | None, typer.Option("--output", "-o", help="HTML file (default: <mesh>.html)")] = None,
    show_edge_nodes: Annotated[
        bool | None, typer.Option("--show-edge-nodes/--no-show-edge-nodes", help="Add edge marker nodes")
    ] = None,
    show_prev_links: Annotated[
        bool | None, typer.Option("--show-prev-links/--no-show-prev-links", help="Draw half-edge -> prev links")
    ] = None,
    offset: Annotated[float | None, typer.Option("--offset", help="Half-edge distance from its edge")] = None,
    bound: Annotated[int | None, typer.Option("--bound", help="Vertex-star step cap")] = None,
    verbose: VerboseFlag = False,
):
    """Write the interactive HTML view of a mesh."""
    _setup_logging(verbose)
    mesh = _load(mesh_path)
    config = _resolve_config(
        show_edge_nodes=show_edge_nodes,
        show_prev_links=show_prev_links,
        offset_magnitude=offset,
        vertex_star_bound=bound,
    )

    view = MeshView(config=config).show(mesh)
    html_content = render_html(view, title=mesh_path)

    target = output or mesh_path.rsplit(".", 1)[0] + ".html"
    with open(target, "w", encoding="utf-8") as f:
        f.write(html_content)

    counts = mesh.summary()
    print(
        f"Wrote {target} | {counts['vertices']} vertices | {counts['half_edges']} half-edges | "
        f"{counts['faces']} faces"
    )
    if view.errors:
        print(f"  {len(view.errors)} structural issues (see: hedgeviz inspect {mesh_path})")


def mesh_inspect(
    mesh_path: MeshArgument,
    as_json: JsonFlag = False,
    output: OutputOption = None,
    bound: Annotated[int | None, typer.Option("--bound", help="Vertex-star step cap")] = None,
    verbose: VerboseFlag = False,
):
    """Show counts, derived adjacency and structural issues."""
    _setup_logging(verbose)
    mesh = _load(mesh_path)
    config = _resolve_config(vertex_star_bound=bound)
    debugger = MeshDebugger(mesh, config)
    adjacency = debugger.adjacency_table()
    issues = debugger.find_issues()

    if as_json:
        data = {
            "counts": mesh.summary(),
            "adjacency": [{"a": a, "b": b, "edge": edge} for a, b, edge in adjacency],
            "dangling_references": issues.dangling_references,
            "unterminated_stars": issues.unterminated_stars,
            "isolated_vertices": issues.isolated_vertices,
        }
        print_json("inspect", data, output)
        return

    counts = mesh.summary()
    print(
        f"\nMesh: {mesh_path} | {counts['vertices']} vertices | {counts['half_edges']} half-edges | "
        f"{counts['edges']} edges | {counts['faces']} faces\n"
    )
    print_lines(print_table(["Vertex", "Vertex", "Edge"], [list(row) for row in adjacency]))

    if not issues.has_issues:
        print("\n  No structural issues.")
    for line in issues.dangling_references:
        print(f"\n  DANGLING  {line}")
    for line in issues.unterminated_stars:
        print(f"\n  UNCLOSED  {line}")
    if issues.isolated_vertices:
        print(f"\n  Isolated vertices: {', '.join(issues.isolated_vertices)}")

    if issues.has_issues:
        raise typer.Exit(2)


def mesh_trace(
    mesh_path: MeshArgument,
    entity_id: Annotated[str, typer.Argument(help="Vertex or half-edge id")],
    as_json: JsonFlag = False,
    output: OutputOption = None,
):
    """Show the relations of one vertex or half-edge."""
    mesh = _load(mesh_path)
    trace = MeshDebugger(mesh, _resolve_config()).trace(entity_id)

    if as_json:
        print_json("trace", asdict(trace), output)
        return

    if trace.status == "NOT_FOUND":
        print(f"Error: '{entity_id}' is not a vertex or half-edge of {mesh_path}")
        if trace.partial_matches:
            print(f"  Did you mean: {', '.join(trace.partial_matches)}")
        raise typer.Exit(1)

    if isinstance(trace, HalfEdgeTrace):
        print(f"\nHalf-edge: {entity_id}\n")
        rows = [[name, info["to"], "ok" if info["found"] else "MISSING"] for name, info in trace.relations.items()]
        print_lines(print_table(["Relation", "Target", "Status"], rows))
        return

    print(f"\nVertex: {entity_id} | star: {format_status(trace.status)}\n")
    if trace.error:
        print(f"  {trace.error}")
        return
    rows = [[hedge, target] for hedge, target in zip(trace.star, trace.neighbors)]
    print_lines(print_table(["Half-edge", "Points to"], rows))


def register_commands(app: typer.Typer) -> None:
    """Register render, inspect and trace on the top-level app."""
    app.command("render")(mesh_render)
    app.command("inspect")(mesh_inspect)
    app.command("trace")(mesh_trace)
