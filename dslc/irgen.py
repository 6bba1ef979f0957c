"""Lowering of the syntax tree into the intermediate representation."""

from __future__ import annotations

from dslc import logger
from dslc.ir import (
    IRBuilder,
    IRFunction,
    Module,
    Value,
    const_float,
    const_int,
    ir_type_for,
)
from dslc.nodes import (
    BinaryExpr,
    BinaryOp,
    CallExpr,
    Expr,
    Function,
    LetStmt,
    LiteralExpr,
    Program,
    ReturnStmt,
    Stmt,
    Type,
    UnaryExpr,
    UnaryOp,
    VariableExpr,
)

__all__ = ["IRGenerationError", "IRGenerator"]


class IRGenerationError(Exception):
    """Raised when an expression or statement cannot be lowered."""


# op -> (float opcode/predicate, integer opcode/predicate, value name)
_ARITH = {
    BinaryOp.ADD: ("fadd", "add", "addtmp"),
    BinaryOp.SUB: ("fsub", "sub", "subtmp"),
    BinaryOp.MUL: ("fmul", "mul", "multmp"),
    BinaryOp.DIV: ("fdiv", "sdiv", "divtmp"),
    BinaryOp.MOD: ("frem", "srem", "modtmp"),
}
_COMPARE = {
    BinaryOp.EQ: ("oeq", "eq", "eqtmp"),
    BinaryOp.NE: ("one", "ne", "netmp"),
    BinaryOp.LT: ("olt", "slt", "lttmp"),
    BinaryOp.LE: ("ole", "sle", "letmp"),
    BinaryOp.GT: ("ogt", "sgt", "gttmp"),
    BinaryOp.GE: ("oge", "sge", "getmp"),
}
_LOGIC = {BinaryOp.AND: ("and", "andtmp"), BinaryOp.OR: ("or", "ortmp")}

_INT_RANGES = {Type.I32: 32, Type.I64: 64}


class IRGenerator:
    """Builds one module from a parsed program."""

    def __init__(self, module_name: str = "DSL_Module") -> None:
        self.module = Module(module_name)
        self._builder = IRBuilder()
        self._named_values: dict[str, Value] = {}
        logger.info("IRGenerationAgent: Initialized")

    def _fail(self, message: str) -> IRGenerationError:
        logger.error(f"IRGenerationAgent: {message}")
        return IRGenerationError(message)

    def _literal(self, expr: LiteralExpr) -> Value:
        kind = expr.type
        if kind in _INT_RANGES:
            try:
                value = int(expr.value)
            except ValueError as exc:
                raise self._fail(f"Invalid integer literal: {expr.value}") from exc
            bits = _INT_RANGES[kind]
            if not -(1 << (bits - 1)) <= value < (1 << (bits - 1)):
                raise self._fail(f"Integer literal out of range: {expr.value}")
            return const_int(ir_type_for(kind), value)
        if kind in (Type.F32, Type.F64):
            try:
                value = float(expr.value)
            except ValueError as exc:
                raise self._fail(f"Invalid float literal: {expr.value}") from exc
            return const_float(ir_type_for(kind), value)
        if kind is Type.BOOL:
            return const_int(ir_type_for(kind), int(expr.value in ("1", "true")))
        raise self._fail("Unsupported literal type")

    def _variable(self, expr: VariableExpr) -> Value:
        try:
            return self._named_values[expr.name]
        except KeyError:
            raise self._fail(f"Unknown variable: {expr.name}") from None

    def _call(self, expr: CallExpr) -> Value:
        callee = self.module.get_function(expr.callee)
        if callee is None:
            raise self._fail(f"Unknown function: {expr.callee}")
        if len(callee.args) != len(expr.args):
            raise self._fail(f"Argument count mismatch for: {expr.callee}")
        args = [self._expr(arg) for arg in expr.args]
        return self._builder.call(callee, args)

    def _binary(self, expr: BinaryExpr) -> Value:
        left = self._expr(expr.left)
        right = self._expr(expr.right)
        is_float = left.type.is_float
        if expr.op in _ARITH:
            f_op, i_op, name = _ARITH[expr.op]
            return self._builder.binary(f_op if is_float else i_op, left, right, name)
        if expr.op in _COMPARE:
            f_pred, i_pred, name = _COMPARE[expr.op]
            return self._builder.compare(f_pred if is_float else i_pred, left, right, name)
        if expr.op in _LOGIC:
            opcode, name = _LOGIC[expr.op]
            return self._builder.binary(opcode, left, right, name)
        raise self._fail("Unsupported binary operator")

    def _unary(self, expr: UnaryExpr) -> Value:
        operand = self._expr(expr.operand)
        if expr.op is UnaryOp.NEG:
            return self._builder.neg(operand, "negtmp")
        if expr.op is UnaryOp.NOT:
            return self._builder.not_(operand, "nottmp")
        raise self._fail("Unsupported unary operator")

    def _expr(self, expr: Expr) -> Value:
        if isinstance(expr, LiteralExpr):
            return self._literal(expr)
        if isinstance(expr, VariableExpr):
            return self._variable(expr)
        if isinstance(expr, BinaryExpr):
            return self._binary(expr)
        if isinstance(expr, UnaryExpr):
            return self._unary(expr)
        if isinstance(expr, CallExpr):
            return self._call(expr)
        raise self._fail("Unsupported expression type")

    def _stmt(self, stmt: Stmt) -> None:
        if isinstance(stmt, ReturnStmt):
            if stmt.expr is None:
                self._builder.ret_void()
            else:
                self._builder.ret(self._expr(stmt.expr))
        elif isinstance(stmt, LetStmt):
            self._named_values[stmt.name] = self._expr(stmt.value)
        else:
            raise self._fail("Unsupported statement type")

    def _function(self, func: Function) -> IRFunction:
        existing = self.module.get_function(func.name)
        if existing is not None:
            logger.warning(f"IRGenerationAgent: Function already exists: {func.name}")
            return existing

        ir_func = self.module.add_function(
            func.name,
            ir_type_for(func.return_type),
            [(name, ir_type_for(kind)) for name, kind in func.params],
        )
        self._builder.position_at_end(ir_func.append_block("entry"))
        self._named_values = {arg.name: arg for arg in ir_func.args}

        for stmt in func.body:
            self._stmt(stmt)

        block = self._builder.block
        if not ir_func.return_type.is_void and block.terminator() is None:
            logger.error("IRGenerationAgent: Function missing return statement")
            self._builder.unreachable()
        return ir_func

    def generate(self, program: Program) -> Module:
        """Lower every function of ``program`` into :attr:`module` and return it."""
        logger.info("IRGenerationAgent: Generating LLVM IR")
        for func in program.functions:
            self._function(func)
        logger.info("IRGenerationAgent: IR generation completed")
        return self.module