"""Command-line driver running the whole compilation pipeline."""

from __future__ import annotations

import argparse
import math
import operator
import struct
from typing import Callable, Optional, Sequence

from dslc import logger
from dslc.codegen import Codegen, CodegenError
from dslc.diagnostics import Diagnostics, Level
from dslc.ir import Constant, IRFunction, IRType, Module, Value, const_int
from dslc.irgen import IRGenerationError, IRGenerator
from dslc.linker import link_with_lld, link_with_system_linker
from dslc.module_setup import ModuleSetup
from dslc.parser import ParseError, dump_ast, parse_source, read_file, validate_ast
from dslc.sanitizer import add_sanitizers
from dslc.verification import verify

__all__ = ["build_arg_parser", "main"]


def build_arg_parser() -> argparse.ArgumentParser:
    """Return the parser for the compiler's command line."""
    parser = argparse.ArgumentParser(
        prog="dslc", description="DSL Compiler", allow_abbrev=False
    )
    parser.add_argument("input", metavar="<input DSL file>", help="source file to compile")
    parser.add_argument("-o", dest="output", default="", metavar="filename",
                        help="Output filename")
    parser.add_argument("-emit-ir", dest="emit_ir", action="store_true", help="Emit LLVM IR")
    parser.add_argument("-emit-obj", dest="emit_obj", action="store_true",
                        help="Emit object file")
    parser.add_argument("-emit-bc", dest="emit_bc", action="store_true", help="Emit bitcode")
    parser.add_argument("-emit-asm", dest="emit_asm", action="store_true",
                        help="Emit assembly")
    parser.add_argument("-jit", dest="jit", action="store_true", help="Run using JIT")
    parser.add_argument("-dump-ir", dest="dump_ir", action="store_true",
                        help="Dump IR to stdout")
    parser.add_argument("-O0", dest="no_optimize", action="store_true",
                        help="Disable optimizations")
    parser.add_argument("-O", dest="opt_level", type=int, default=2, metavar="level",
                        help="Optimization level (0-3)")
    parser.add_argument("-asan", dest="asan", action="store_true",
                        help="Enable AddressSanitizer")
    parser.add_argument("-ubsan", dest="ubsan", action="store_true",
                        help="Enable UndefinedBehaviorSanitizer")
    parser.add_argument("-v", dest="verbose", action="store_true", help="Verbose output")
    parser.add_argument("-link", dest="link", action="store_true",
                        help="Link object file to executable")
    return parser


# Execution of a module's functions

class _ExecutionError(Exception):
    """Raised when generated code cannot be executed."""


_MAX_FLOAT32 = struct.unpack("<f", struct.pack("<I", 0x7F7FFFFF))[0]


def _round(ir_type: IRType, value: float) -> float:
    if ir_type is not IRType.FLOAT or math.isnan(value) or math.isinf(value):
        return value
    if abs(value) > _MAX_FLOAT32:
        try:
            return struct.unpack("<f", struct.pack("<f", value))[0]
        except OverflowError:
            return math.copysign(math.inf, value)
    return struct.unpack("<f", struct.pack("<f", value))[0]


def _signed(ir_type: IRType, value: int) -> int:
    if ir_type is IRType.I1:
        return -value if value else 0
    return value


def _wrap(ir_type: IRType, value: int) -> int:
    return const_int(ir_type, value).value


def _fdiv(a: float, b: float) -> float:
    if b == 0:
        if a == 0 or math.isnan(a):
            return math.nan
        return math.copysign(math.inf, a) * math.copysign(1.0, b)
    return a / b


def _frem(a: float, b: float) -> float:
    try:
        return math.fmod(a, b)
    except ValueError:
        return math.nan


_FLOAT_OPS: dict[str, Callable[[float, float], float]] = {
    "fadd": operator.add,
    "fsub": operator.sub,
    "fmul": operator.mul,
    "fdiv": _fdiv,
    "frem": _frem,
}
_INT_OPS: dict[str, Callable[[int, int], int]] = {
    "add": operator.add,
    "sub": operator.sub,
    "mul": operator.mul,
    "and": operator.and_,
    "or": operator.or_,
    "xor": operator.xor,
}
_PREDICATES: dict[str, Callable[[float, float], bool]] = {
    "eq": operator.eq, "oeq": operator.eq,
    "ne": operator.ne, "one": operator.ne,
    "slt": operator.lt, "olt": operator.lt,
    "sle": operator.le, "ole": operator.le,
    "sgt": operator.gt, "ogt": operator.gt,
    "sge": operator.ge, "oge": operator.ge,
}


def _divide(opcode: str, a: int, b: int) -> int:
    if b == 0:
        raise _ExecutionError("integer division by zero")
    quotient = abs(a) // abs(b)
    if (a < 0) != (b < 0):
        quotient = -quotient
    return quotient if opcode == "sdiv" else a - b * quotient


def _run_function(func: IRFunction, args: Sequence[float]) -> Optional[float]:
    if not func.blocks:
        raise _ExecutionError(f"function has no body: {func.name}")
    env: dict[Value, float] = dict(zip(func.args, args))

    def value_of(operand: Value) -> float:
        if isinstance(operand, Constant):
            return operand.value
        return env[operand]

    for inst in func.blocks[0].instructions:
        ops = [value_of(op) for op in inst.operands]
        opcode = inst.opcode
        if opcode == "ret":
            return ops[0] if ops else None
        if opcode == "unreachable":
            raise _ExecutionError(f"reached unreachable code in {func.name}")
        if opcode == "call":
            result = _run_function(inst.callee, ops)
        elif opcode in ("icmp", "fcmp"):
            left, right = ops
            if opcode == "icmp":
                op_type = inst.operands[0].type
                left, right = _signed(op_type, left), _signed(op_type, right)
                result = int(_PREDICATES[inst.predicate](left, right))
            elif math.isnan(left) or math.isnan(right):
                result = 0
            else:
                result = int(_PREDICATES[inst.predicate](left, right))
        elif opcode == "fneg":
            result = _round(inst.type, -ops[0])
        elif opcode in _FLOAT_OPS:
            result = _round(inst.type, _FLOAT_OPS[opcode](*ops))
        elif opcode in _INT_OPS:
            result = _wrap(inst.type, _INT_OPS[opcode](*ops))
        elif opcode in ("sdiv", "srem"):
            a, b = (_signed(inst.type, v) for v in ops)
            result = _wrap(inst.type, _divide(opcode, a, b))
        else:
            raise _ExecutionError(f"unsupported instruction: {opcode}")
        env[inst] = result
    raise _ExecutionError(f"function {func.name} ended without returning")


def _run_jit(module: Module) -> None:
    logger.info("JIT Agent: Module loaded successfully")
    entry = module.get_function("main")
    if entry is None:
        logger.error("JITAgent: Function not found: main")
        logger.warning("No main() function found for JIT execution")
        return
    if entry.args:
        logger.error("JITAgent: main() must take no parameters")
        return
    logger.info("Executing main() via JIT...")
    try:
        result = _run_function(entry, [])
    except RecursionError:
        logger.error("JITAgent: Execution failed: recursion too deep")
        return
    except _ExecutionError as exc:
        logger.error(f"JITAgent: Execution failed: {exc}")
        return
    if result is None:
        logger.info("Program finished")
    else:
        logger.info(f"Program returned: {result}")


# Pipeline

def _normalized_level(level: int) -> int:
    return level if 0 <= level <= 3 else 2


def _emit_outputs(args: argparse.Namespace, module: Module, flags: list[str],
                  diagnostics: Diagnostics) -> None:
    logger.info("\n[Agent 9] Codegen Agent")
    codegen = Codegen(extra_flags=flags)
    output_file = args.output or args.input + ".o"
    try:
        if args.emit_ir or ".ll" in output_file:
            codegen.emit_ir_file(module, output_file)
        elif args.emit_asm or ".s" in output_file:
            codegen.emit_assembly_file(module, output_file)
        elif args.emit_bc or ".bc" in output_file:
            codegen.emit_bitcode_file(module, output_file)
        elif args.emit_obj or ".o" in output_file:
            codegen.emit_object_file(module, output_file)
            if args.link:
                _link(output_file)
    except CodegenError as exc:
        diagnostics.add(Level.ERROR, f"Codegen error: {exc}")


def _link(object_file: str) -> None:
    logger.info("\n[Agent 10] Linker Agent")
    exe_file = object_file.replace(".o", "", 1) + ".out"
    if not link_with_lld([object_file], exe_file):
        logger.warning("lld not available, trying system linker")
        link_with_system_linker([object_file], exe_file)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Compile the file named on the command line; return the exit status."""
    args = build_arg_parser().parse_args(argv)
    logger.info("=== LLVM DSL Compiler ===")

    try:
        source = read_file(args.input)
    except OSError as exc:
        logger.error(f"Failed to read input file: {exc}")
        return 1

    diagnostics = Diagnostics()

    logger.info("\n[Agent 1] Parser Agent")
    try:
        program = parse_source(source)
    except ParseError as exc:
        diagnostics.add(Level.ERROR, f"Parse error: {exc}")
        diagnostics.print_diagnostics()
        return 1

    logger.info("\n[Agent 2] AST Agent")
    validate_ast(program)
    if args.verbose:
        dump_ast(program)

    logger.info("\n[Agent 3] IR Generation Agent")
    try:
        module = IRGenerator().generate(program)
    except IRGenerationError as exc:
        diagnostics.add(Level.ERROR, f"IR generation error: {exc}")
        diagnostics.print_diagnostics()
        return 1

    logger.info("\n[Agent 4] Module Setup Agent")
    ModuleSetup().setup_module(module)

    flags: list[str] = []
    logger.info("\n[Agent 5] Optimization Agent")
    if not args.no_optimize:
        level = _normalized_level(args.opt_level)
        logger.info(f"OptimizationAgent: Configuring optimization level {args.opt_level}")
        flags.append(f"-O{level}")

    logger.info("\n[Agent 6] Verification Agent")
    if not verify(module, True):
        diagnostics.add(Level.ERROR, "IR verification failed")
        diagnostics.print_diagnostics()
        return 1

    logger.info("\n[Agent 7] Diagnostics Agent")
    if args.dump_ir or args.verbose:
        diagnostics.dump_ir(module, True)

    logger.info("\n[Agent 8] Sanitizer Agent")
    if args.asan or args.ubsan:
        flags.extend(add_sanitizers(module, args.asan, args.ubsan))

    if args.emit_ir or args.emit_obj or args.emit_bc or args.emit_asm or args.output:
        _emit_outputs(args, module, flags, diagnostics)

    if args.jit:
        logger.info("\n[Agent 11] JIT Agent")
        _run_jit(module)

    diagnostics.print_diagnostics()

    if diagnostics.has_errors():
        logger.error(
            f"Compilation failed with {diagnostics.error_count()} error(s)"
        )
        return 1

    logger.info("\n=== Compilation successful ===")
    return 0