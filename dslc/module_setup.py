"""Target triple and data layout configuration for modules."""

from __future__ import annotations

import platform

from dslc import logger
from dslc.ir import Module

__all__ = ["default_triple", "default_data_layout", "ModuleSetup"]

_ARCH_ALIASES = {
    "amd64": "x86_64",
    "x64": "x86_64",
    "x86_64": "x86_64",
    "arm64": "aarch64",
    "aarch64": "aarch64",
}

_X86_64_BODY = "p270:32:32-p271:32:32-p272:64:64-i64:64-i128:128-f80:128-n8:16:32:64-S128"
_AARCH64_BODY = "i8:8:32-i16:16:32-i64:64-i128:128-n32:64-S128-Fn32"
_AARCH64_DARWIN_BODY = "i64:64-i128:128-n32:64-S128-Fn32"

_LAYOUT_BODIES = {"x86_64": _X86_64_BODY, "aarch64": _AARCH64_BODY}


def default_triple() -> str:
    """Return the target triple describing the host."""
    machine = platform.machine().lower()
    arch = _ARCH_ALIASES.get(machine, machine or "unknown")
    system = platform.system()
    if system == "Darwin":
        if arch == "aarch64":
            arch = "arm64"
        return f"{arch}-apple-darwin{platform.release()}"
    if system == "Linux":
        vendor = "pc" if arch == "x86_64" else "unknown"
        return f"{arch}-{vendor}-linux-gnu"
    if system == "Windows":
        return f"{arch}-pc-windows-msvc"
    return f"{arch}-unknown-{system.lower() or 'unknown'}"


def _mangling(triple: str) -> str:
    lowered = triple.lower()
    if any(word in lowered for word in ("darwin", "macos", "ios")):
        return "o"
    if "windows" in lowered:
        return "w"
    return "e"


def default_data_layout(triple: str) -> str:
    """Return the data layout for ``triple``, or ``""`` when the target is unknown."""
    arch_name = triple.split("-", 1)[0].lower() if triple else ""
    arch = _ARCH_ALIASES.get(arch_name, arch_name)
    body = _LAYOUT_BODIES.get(arch)
    if body is None:
        logger.warning(f"ModuleSetupAgent: Cannot find target for triple: {triple}")
        return ""
    mangling = _mangling(triple)
    if arch == "aarch64" and mangling == "o":
        body = _AARCH64_DARWIN_BODY
    return f"e-m:{mangling}-{body}"


class ModuleSetup:
    """Applies a target triple and data layout to modules."""

    def __init__(self) -> None:
        self.target_triple = default_triple()
        self.data_layout = default_data_layout(self.target_triple)

    def setup_module(self, module: Module) -> None:
        logger.info("ModuleSetupAgent: Setting up module")
        if self.target_triple:
            module.target_triple = self.target_triple
            logger.info(f"ModuleSetupAgent: Target triple: {self.target_triple}")
        if self.data_layout:
            module.data_layout = self.data_layout
            logger.info("ModuleSetupAgent: Data layout configured")
        else:
            logger.warning("ModuleSetupAgent: Using default data layout")

    def set_target_triple(self, triple: str) -> None:
        """Select ``triple`` and the data layout that belongs to it."""
        self.target_triple = triple
        self.data_layout = default_data_layout(triple)

    def set_data_layout(self, layout: str) -> None:
        self.data_layout = layout