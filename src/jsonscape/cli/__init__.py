"""jsonscape CLI: lay out JSON documents and inspect the resulting graph.

Entry point for the `jsonscape` command. Requires ``pip install jsonscape[cli]``.

Commands:
    layout      Normalize, lay out and route a JSON document
    inspect     Show the entity tree and any structural issues
"""

from __future__ import annotations


def _require_typer():
    """Check that typer is available."""
    try:
        import typer  # noqa: F401
    except ImportError:
        import sys

        print("Error: typer is required for the CLI. Install with: pip install jsonscape[cli]", file=sys.stderr)
        raise SystemExit(1) from None


def create_app():
    """Create the Typer app with all commands."""
    _require_typer()

    import typer

    from jsonscape.cli.layout_cmd import register_commands

    app = typer.Typer(
        name="jsonscape",
        help="Turn JSON documents into positioned node-link diagrams.",
        no_args_is_help=True,
    )
    register_commands(app)

    return app


def main():
    """CLI entry point."""
    app = create_app()
    app()
