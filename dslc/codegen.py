"""Writing modules out as textual IR, assembly, bitcode or object files."""

from __future__ import annotations

import dataclasses
import enum
import subprocess
from pathlib import Path
from typing import Iterable, Optional

from dslc import logger
from dslc.ir import Module
from dslc.module_setup import default_triple

__all__ = ["OutputFormat", "CodegenError", "Codegen"]


class OutputFormat(enum.Enum):
    OBJECT = "object"
    ASSEMBLY = "assembly"
    BITCODE = "bitcode"
    LLVM_IR = "ir"


class CodegenError(Exception):
    """Raised when an output file cannot be produced."""


class Codegen:
    """Emits modules for one target; native formats go through an IR compiler."""

    def __init__(
        self,
        triple: Optional[str] = None,
        compiler: str = "clang",
        extra_flags: Iterable[str] = (),
    ) -> None:
        self.target_triple = triple or default_triple()
        self.compiler = compiler
        self.extra_flags = list(extra_flags)

    def _fail(self, message: str) -> CodegenError:
        logger.error(f"CodegenAgent: {message}")
        return CodegenError(message)

    def _ensure_writable(self, path: Path) -> None:
        try:
            with open(path, "wb"):
                pass
        except OSError as exc:
            raise self._fail(f"Cannot open file: {exc.strerror or exc}") from exc

    def _compile(self, module: Module, filename: str, flags: list[str], label: str) -> Path:
        logger.info(f"CodegenAgent: Emitting {label} file: {filename}")
        path = Path(filename)
        self._ensure_writable(path)
        # The compiler supplies the target's own data layout.
        target_module = dataclasses.replace(
            module, data_layout="", target_triple=self.target_triple
        )
        command = [
            self.compiler,
            "-target",
            self.target_triple,
            *flags,
            *self.extra_flags,
            "-Wno-override-module",
            "-x",
            "ir",
            "-",
            "-o",
            str(path),
        ]
        try:
            result = subprocess.run(
                command,
                input=target_module.to_text(),
                capture_output=True,
                text=True,
                check=False,
            )
        except OSError as exc:
            raise self._fail(f"Cannot run {self.compiler}: {exc}") from exc
        if result.returncode != 0:
            detail = (result.stderr or "").strip()
            message = f"TargetMachine cannot emit {label} file"
            raise self._fail(f"{message}: {detail}" if detail else message)
        logger.info(f"CodegenAgent: {label.capitalize()} file emitted successfully")
        return path

    def emit_object_file(self, module: Module, filename: str) -> Path:
        return self._compile(module, filename, ["-c"], "object")

    def emit_assembly_file(self, module: Module, filename: str) -> Path:
        return self._compile(module, filename, ["-S"], "assembly")

    def emit_bitcode_file(self, module: Module, filename: str) -> Path:
        return self._compile(module, filename, ["-c", "-emit-llvm"], "bitcode")

    def emit_ir_file(self, module: Module, filename: str) -> Path:
        """Write the module's text to ``filename``."""
        logger.info(f"CodegenAgent: Emitting IR file: {filename}")
        path = Path(filename)
        try:
            with open(path, "w", encoding="utf-8") as handle:
                handle.write(module.to_text())
        except OSError as exc:
            raise self._fail(f"Cannot open file: {exc.strerror or exc}") from exc
        logger.info("CodegenAgent: IR file emitted successfully")
        return path

    def emit(self, module: Module, filename: str, fmt: OutputFormat) -> Path:
        """Write ``module`` to ``filename`` in format ``fmt``."""
        emitters = {
            OutputFormat.OBJECT: self.emit_object_file,
            OutputFormat.ASSEMBLY: self.emit_assembly_file,
            OutputFormat.BITCODE: self.emit_bitcode_file,
            OutputFormat.LLVM_IR: self.emit_ir_file,
        }
        emitter = emitters.get(fmt) if isinstance(fmt, OutputFormat) else None
        if emitter is None:
            raise self._fail("Unknown output format")
        return emitter(module, filename)