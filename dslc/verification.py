"""Structural and type checks over a module."""

from __future__ import annotations

from dslc import logger
from dslc.ir import FLOAT_OPCODES, IRFunction, Instruction, Module

__all__ = ["verification_errors", "verify"]

_INT_ONLY = frozenset({"add", "sub", "mul", "sdiv", "srem", "and", "or", "xor"})


def _check_instruction(func: IRFunction, inst: Instruction) -> list[str]:
    ops = inst.operands
    op = inst.opcode
    problems = []
    if op in FLOAT_OPCODES and op != "fneg" or op in _INT_ONLY:
        if ops[0].type is not ops[1].type:
            problems.append("Both operands to a binary operator are not of the same type!")
        elif op in FLOAT_OPCODES and not ops[0].type.is_float:
            problems.append(
                "Floating-point arithmetic operators only work with floating-point types!")
        elif op in _INT_ONLY and not ops[0].type.is_integer:
            problems.append("Integer arithmetic operators only work with integral types!")
    elif op == "fneg" and not ops[0].type.is_float:
        problems.append("Unary operators only work with floating-point types!")
    elif op in ("icmp", "fcmp"):
        if ops[0].type is not ops[1].type:
            problems.append("Both operands to a compare instruction are not of the same type!")
        elif op == "icmp" and not ops[0].type.is_integer:
            problems.append("Invalid operand types for ICmp instruction")
        elif op == "fcmp" and not ops[0].type.is_float:
            problems.append("Invalid operand types for FCmp instruction")
    elif op == "call":
        params = inst.callee.args
        if len(params) != len(ops):
            problems.append("Incorrect number of arguments passed to called function!")
        elif any(p.type is not a.type for p, a in zip(params, ops)):
            problems.append("Call parameter type does not match function signature!")
    elif op == "ret":
        actual = ops[0].type if ops else None
        expected = None if func.return_type.is_void else func.return_type
        if actual is not expected:
            problems.append("Function return type does not match operand type of return inst!")
    return problems


def verification_errors(module: Module) -> str:
    """Return every problem found in ``module``, one per line; empty when valid."""
    lines: list[str] = []
    for func in module.functions:
        for block in func.blocks:
            insts = block.instructions
            if block.terminator() is None:
                lines.append(
                    f"Basic Block in function '{func.name}' does not have terminator!")
            if any(inst.is_terminator for inst in insts[:-1]):
                lines.append(
                    f"Terminator found in the middle of a basic block! (function '{func.name}')")
            for inst in insts:
                lines.extend(_check_instruction(func, inst))
    return "".join(f"{line}\n" for line in lines)


def verify(module: Module, print_errors: bool = True) -> bool:
    """Check ``module``; return whether it is valid, logging problems if asked."""
    logger.info("VerificationAgent: Verifying module")
    errors = verification_errors(module)
    if errors:
        if print_errors:
            logger.error("VerificationAgent: Module verification failed:")
            logger.error(errors)
        return False
    logger.info("VerificationAgent: Module verification passed")
    return True