import asyncio
from typing import Annotated, NoReturn

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from visual_editor.config import EngineSettings, get_project_root
from visual_editor.core.engine import EditorEngine
from visual_editor.models import AnalysisResult, ElementUpdates, MutationResult

console = Console()

RootOption = Annotated[
    str | None,
    typer.Option("--root", help="Project root the component id is relative to (default: $VISUAL_EDITOR_ROOT or cwd)."),
]
JsonOption = Annotated[bool, typer.Option("--json", help="Print the raw result as JSON.")]


def _get_engine() -> EditorEngine:
    return EditorEngine(EngineSettings.from_env())


def _fail(error: str | None) -> NoReturn:
    console.print(f"[red]Error:[/red] {escape(error or 'unknown error')}")
    raise typer.Exit(code=1)


def _render_analysis(result: AnalysisResult) -> None:
    table = Table(show_header=False, show_lines=False)
    table.add_column("property", style="bold")
    table.add_column("value")
    table.add_row("tag", result.tag or "")
    for label, analysis in (
        ("className", result.class_name),
        ("textContent", result.text_content),
        ("elementType", result.element_type),
    ):
        if analysis is None:
            continue
        fields = analysis.model_dump(mode="json", exclude_none=True)
        table.add_row(label, escape(" ".join(f"{k}={v!r}" for k, v in fields.items())))
    console.print(table)


def _print_json(result: AnalysisResult | MutationResult) -> None:
    console.print_json(result.model_dump_json(by_alias=True, exclude_none=True))


def analyze(
    component_id: Annotated[str, typer.Argument(help="Element id in the form path:line:column.")],
    root: RootOption = None,
    as_json: JsonOption = False,
) -> None:
    """Report whether an element's className, text and deletion are editable."""
    result = asyncio.run(_get_engine().analyze_element(component_id, root or get_project_root()))
    if as_json:
        _print_json(result)
    elif result.success:
        _render_analysis(result)
    if not result.success:
        _fail(result.error)


def update(
    component_id: Annotated[str, typer.Argument(help="Element id in the form path:line:column.")],
    class_name: Annotated[str | None, typer.Option("--class-name", help="New className literal.")] = None,
    text: Annotated[str | None, typer.Option("--text", help="New text content.")] = None,
    root: RootOption = None,
    as_json: JsonOption = False,
) -> None:
    """Rewrite an element's className and/or text content in place."""
    if class_name is None and text is None:
        raise typer.BadParameter("Pass --class-name and/or --text.")
    updates = ElementUpdates(class_name=class_name, text_content=text)
    result = asyncio.run(_get_engine().update_element(component_id, updates, root or get_project_root()))
    if as_json:
        _print_json(result)
    elif result.success:
        if result.changed:
            console.print(f"[green]Updated[/green] {result.file_path}")
        else:
            console.print("Already up to date.")
    if not result.success:
        _fail(result.error)


def delete(
    component_id: Annotated[str, typer.Argument(help="Element id in the form path:line:column.")],
    root: RootOption = None,
    as_json: JsonOption = False,
) -> None:
    """Remove an element from its source file."""
    result = asyncio.run(_get_engine().delete_element(component_id, root or get_project_root()))
    if as_json:
        _print_json(result)
    elif result.success:
        console.print(f"[green]Deleted[/green] element from {result.file_path}")
    if not result.success:
        _fail(result.error)
