"""hedgeviz CLI: render and inspect half-edge meshes.

Entry point for the `hedgeviz` command. Requires ``pip install hedgeviz[cli]``.

Commands:
    render      Write the interactive HTML view of a mesh
    inspect     Show counts, derived adjacency and structural issues
    trace       Show the relations of one vertex or half-edge
"""

from __future__ import annotations


def _require_typer():
    """Check that typer is available."""
    try:
        import typer  # noqa: F401
    except ImportError:
        import sys

        print("Error: typer is required for the CLI. Install with: pip install hedgeviz[cli]", file=sys.stderr)
        raise SystemExit(1) from None


def create_app():
    """Create the Typer app with all commands."""
    _require_typer()

    import typer

    from hedgeviz.cli.mesh_cmd import register_commands

    app = typer.Typer(
        name="hedgeviz",
        help="Half-edge mesh connectivity viewer.",
        no_args_is_help=True,
    )
    register_commands(app)

    return app


def main():
    """CLI entry point."""
    app = create_app()
    app()
