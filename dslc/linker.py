"""Linking object files into executables with an external linker."""

from __future__ import annotations

import shlex
import subprocess
import sys
from typing import Iterable

from dslc import logger

__all__ = ["link_with_lld", "link_with_system_linker"]


def _link(
    tool: str,
    label: str,
    object_files: Iterable[str],
    output_file: str,
    libraries: Iterable[str],
) -> bool:
    logger.info(f"LinkerAgent: Linking with {label}")
    command = [
        tool,
        *(str(obj) for obj in object_files),
        *(f"-l{lib}" for lib in libraries),
        "-o",
        str(output_file),
    ]
    logger.info(f"LinkerAgent: Running: {shlex.join(command)}")
    try:
        result = subprocess.run(command, check=False)
    except OSError as exc:
        logger.error(f"LinkerAgent: Cannot run {tool}: {exc}")
        return False
    if result.returncode != 0:
        logger.error("LinkerAgent: Linking failed")
        return False
    logger.info("LinkerAgent: Linking completed successfully")
    return True


def link_with_lld(
    object_files: Iterable[str], output_file: str, libraries: Iterable[str] = ()
) -> bool:
    """Link with ``lld``; return whether it succeeded."""
    return _link("lld", "lld", object_files, output_file, libraries)


def link_with_system_linker(
    object_files: Iterable[str], output_file: str, libraries: Iterable[str] = ()
) -> bool:
    """Link with the platform's C compiler driver; return whether it succeeded."""
    tool = "clang" if sys.platform == "darwin" else "gcc"
    return _link(tool, "system linker", object_files, output_file, libraries)