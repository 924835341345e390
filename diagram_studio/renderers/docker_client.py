"""Subprocess helpers for running renderer CLIs locally or inside Docker."""
from __future__ import annotations

import asyncio
from pathlib import Path
from typing import List, Tuple


def docker_command(image: str, workdir: Path, command: List[str]) -> List[str]:
    return [
        "docker",
        "run",
        "--rm",
        "-v",
        f"{workdir}:/data",
        "-w",
        "/data",
        image,
    ] + command


async def run_renderer_process(cmd: List[str], workdir: Path) -> Tuple[int, str]:
    """Run ``cmd`` in ``workdir`` without blocking the loop.

    Returns the exit code and the combined stderr/stdout text. Raises
    FileNotFoundError when the executable does not exist.
    """
    process = await asyncio.create_subprocess_exec(
        *cmd,
        cwd=str(workdir),
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
    )
    stdout, stderr = await process.communicate()
    output = (stderr or b"").decode("utf-8", errors="ignore")
    if not output.strip():
        output = (stdout or b"").decode("utf-8", errors="ignore")
    return process.returncode or 0, output
