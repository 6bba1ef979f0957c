"""Selection of runtime sanitizers for generated code."""

from __future__ import annotations

from dslc import logger
from dslc.ir import Module

__all__ = ["add_address_sanitizer", "add_undefined_behavior_sanitizer", "add_sanitizers"]

_ASAN_FLAG = "-fsanitize=address"
_UBSAN_FLAG = "-fsanitize=undefined"


def add_address_sanitizer(module: Module) -> str:
    """Request AddressSanitizer for ``module``; return the compiler flag enabling it."""
    logger.info(
        "SanitizerAgent: AddressSanitizer instrumentation "
        f"(note: typically enabled via {_ASAN_FLAG}) for module {module.name}"
    )
    return _ASAN_FLAG


def add_undefined_behavior_sanitizer(module: Module) -> str:
    """Request UBSan for ``module``; return the compiler flag enabling it."""
    logger.info(
        "SanitizerAgent: UBSan instrumentation "
        f"(note: typically enabled via {_UBSAN_FLAG}) for module {module.name}"
    )
    return _UBSAN_FLAG


def add_sanitizers(module: Module, asan: bool = False, ubsan: bool = False) -> list[str]:
    """Request the chosen sanitizers; return their compiler flags in order."""
    flags = []
    if asan:
        flags.append(add_address_sanitizer(module))
    if ubsan:
        flags.append(add_undefined_behavior_sanitizer(module))
    return flags