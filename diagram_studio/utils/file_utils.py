"""File utilities."""
from __future__ import annotations

import re
from pathlib import Path

_WHITESPACE_RE = re.compile(r"\s+")


def ensure_dir(path: str) -> Path:
    """Ensure directory exists and return Path."""
    p = Path(path)
    p.mkdir(parents=True, exist_ok=True)
    return p


def export_filename(document_name: str, extension: str) -> str:
    """Build a download filename from a document name.

    Whitespace runs collapse to a single underscore, e.g. ``"Main  Flow"``
    becomes ``"Main_Flow.svg"``.
    """
    stem = _WHITESPACE_RE.sub("_", document_name)
    return f"{stem}.{extension.lstrip('.')}"


def read_text_file(path: str) -> str:
    """Read a UTF-8 text file, falling back to ignoring undecodable bytes."""
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Missing file: {path}")
    try:
        return p.read_text(encoding="utf-8")
    except UnicodeDecodeError:
        return p.read_text(encoding="utf-8", errors="ignore")
