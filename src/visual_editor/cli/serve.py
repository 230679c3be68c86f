from typing import Annotated

import typer
from rich.console import Console

serve_app = typer.Typer(help="Start servers.")
console = Console()


@serve_app.command("api")
def api(
    host: str = "127.0.0.1",
    port: int = 8000,
    root: Annotated[str | None, typer.Option(help="Project root; defaults to $VISUAL_EDITOR_ROOT or cwd.")] = None,
) -> None:
    """Start the FastAPI server."""
    import uvicorn

    from visual_editor.api.app import create_app

    app = create_app(root_dir=root)
    console.print(f"[green]Starting API server on {host}:{port}[/green]")
    uvicorn.run(app, host=host, port=port)


@serve_app.command("mcp")
def mcp(
    transport: str = "stdio",
    root: Annotated[str | None, typer.Option(help="Project root; defaults to $VISUAL_EDITOR_ROOT or cwd.")] = None,
) -> None:
    """Start the MCP server."""
    from visual_editor.config import EngineSettings, get_project_root
    from visual_editor.core.engine import EditorEngine
    from visual_editor.mcp.server import create_mcp_server

    engine = EditorEngine(EngineSettings.from_env())
    server = create_mcp_server(engine, root or get_project_root())
    # stdout belongs to the stdio transport
    Console(stderr=True).print(f"[green]Starting MCP server (transport: {transport})[/green]")
    server.run(transport=transport)  # type: ignore[arg-type]
