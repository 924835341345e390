"""Export the rendered preview as SVG or PNG files."""
from __future__ import annotations

from pathlib import Path
from typing import Literal

import cairosvg

from diagram_studio.utils.config import settings
from diagram_studio.utils.file_utils import ensure_dir, export_filename

ExportFormat = Literal["svg", "png"]


def svg_to_png(svg_text: str) -> bytes:
    """Rasterize SVG markup at its intrinsic width and height."""
    return cairosvg.svg2png(bytestring=svg_text.encode("utf-8"))


def export_bytes(svg_text: str, fmt: ExportFormat) -> bytes:
    if fmt == "svg":
        return svg_text.encode("utf-8")
    if fmt == "png":
        return svg_to_png(svg_text)
    raise ValueError(f"Unsupported export format: {fmt}")


def export_diagram(svg_text: str, document_name: str, fmt: ExportFormat, output_dir: str | None = None) -> Path:
    """Write the preview to ``output_dir`` and return the file path."""
    directory = ensure_dir(output_dir or settings.output_dir)
    path = directory / export_filename(document_name, fmt)
    path.write_bytes(export_bytes(svg_text, fmt))
    return path
