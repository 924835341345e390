"""Mermaid renderer using mermaid-cli, locally or dockerized."""
from __future__ import annotations

import json
import logging
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Protocol

from diagram_studio.renderers.docker_client import docker_command, run_renderer_process
from diagram_studio.utils.config import settings
from diagram_studio.utils.errors import DiagramSyntaxError, RendererUnavailableError
from diagram_studio.utils.file_utils import read_text_file

logger = logging.getLogger(__name__)

_MAX_ERROR_LINES = 12

DEFAULT_THEME: Dict[str, Any] = {
    "theme": "base",
    "securityLevel": "loose",
    "themeVariables": {
        "fontFamily": "Inter, sans-serif",
        "primaryColor": "#e0f2fe",
        "primaryBorderColor": "#0ea5e9",
        "lineColor": "#334155",
        "secondaryColor": "#f0f9ff",
        "tertiaryColor": "#ffffff",
    },
}


class DiagramRenderer(Protocol):
    async def render(self, diagram_text: str) -> str:
        """Return SVG markup or raise DiagramSyntaxError."""
        ...


def clean_error_output(output: str) -> str:
    """Keep the parser message from mermaid-cli output, drop stack frames."""
    lines = []
    for raw in output.splitlines():
        line = raw.rstrip()
        if not line.strip() or line.strip().startswith("at "):
            continue
        lines.append(line)
        if len(lines) >= _MAX_ERROR_LINES:
            break
    return "\n".join(lines) or "Syntax Error"


class MermaidCliRenderer:
    """Render Mermaid text to SVG with a fixed theme configuration."""

    def __init__(
        self,
        *,
        theme: Dict[str, Any] | None = None,
        command: str | None = None,
        docker_image: str | None = None,
    ) -> None:
        self.theme = theme or DEFAULT_THEME
        self.command = command or settings.mermaid_cli_command
        self.docker_image = docker_image if docker_image is not None else settings.mermaid_renderer_image

    def _build_command(self, workdir: Path) -> List[str]:
        args = ["-i", "input.mmd", "-o", "output.svg", "-c", "config.json"]
        if self.docker_image:
            return docker_command(self.docker_image, workdir, args)
        return [self.command] + args

    async def render(self, diagram_text: str) -> str:
        with tempfile.TemporaryDirectory() as tmp_dir:
            workdir = Path(tmp_dir)
            (workdir / "input.mmd").write_text(diagram_text, encoding="utf-8")
            (workdir / "config.json").write_text(json.dumps(self.theme), encoding="utf-8")
            cmd = self._build_command(workdir)
            try:
                code, output = await run_renderer_process(cmd, workdir)
            except FileNotFoundError as exc:
                raise RendererUnavailableError(f"Renderer not found: {cmd[0]}") from exc
            output_path = workdir / "output.svg"
            if code != 0 or not output_path.exists():
                logger.debug("mermaid-cli failed", extra={"exit_code": code})
                raise DiagramSyntaxError(clean_error_output(output))
            return read_text_file(str(output_path))
