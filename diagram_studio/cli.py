"""CLI interface."""
from __future__ import annotations

import asyncio
import logging
import sys
from pathlib import Path

import typer

from diagram_studio.agents.completion_backends import build_backend
from diagram_studio.agents.diagram_assistant import DiagramAssistant
from diagram_studio.renderers.mermaid_renderer import MermaidCliRenderer
from diagram_studio.tools.exporter import export_diagram
from diagram_studio.utils.config import settings
from diagram_studio.utils.errors import ConfigurationError, DiagramSyntaxError, RendererUnavailableError
from diagram_studio.utils.file_utils import read_text_file

app = typer.Typer(add_completion=False)


def setup_logging(log_level: str = "INFO") -> None:
    """Configure application logging."""
    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy").setLevel(logging.WARNING)
    logging.getLogger("uvicorn").setLevel(logging.INFO)


@app.callback()
def main(log_level: str = typer.Option(settings.log_level, "--log-level", help="Logging level.")):
    setup_logging(log_level)


@app.command()
def serve(
    host: str = typer.Option("127.0.0.1", "--host"),
    port: int = typer.Option(8000, "--port"),
):
    """Run the workspace HTTP API."""
    import uvicorn

    uvicorn.run("diagram_studio.server:app", host=host, port=port)


@app.command()
def render(
    file: Path = typer.Argument(..., exists=True, dir_okay=False, help="Mermaid source file."),
    fmt: str = typer.Option("svg", "--format", "-f", help="svg or png."),
    output_dir: str = typer.Option(None, "--output-dir", help="Defaults to settings.output_dir."),
):
    """Render one Mermaid file to SVG or PNG."""
    if fmt not in ("svg", "png"):
        raise typer.BadParameter("--format must be svg or png")
    text = read_text_file(str(file))
    try:
        svg = asyncio.run(MermaidCliRenderer().render(text))
    except (DiagramSyntaxError, RendererUnavailableError) as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=1)
    path = export_diagram(svg, file.stem, fmt, output_dir)  # type: ignore[arg-type]
    typer.echo(str(path))


@app.command()
def explain(
    file: Path = typer.Argument(..., exists=True, dir_okay=False, help="Mermaid source file."),
    deep: bool = typer.Option(False, "--deep", help="Use the deep-reasoning model."),
):
    """Explain one Mermaid file in plain language."""
    try:
        assistant = DiagramAssistant(build_backend())
    except ConfigurationError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=2)
    typer.echo(asyncio.run(assistant.explain(read_text_file(str(file)), deep)))


if __name__ == "__main__":
    app()
