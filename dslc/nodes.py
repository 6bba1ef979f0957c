"""Syntax tree of the language: types, expressions, statements, functions."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import ClassVar, Optional

__all__ = [
    "ASTNodeType",
    "BinaryOp",
    "UnaryOp",
    "Type",
    "Expr",
    "BinaryExpr",
    "UnaryExpr",
    "LiteralExpr",
    "VariableExpr",
    "CallExpr",
    "Stmt",
    "ReturnStmt",
    "LetStmt",
    "Function",
    "Program",
]


class ASTNodeType(enum.Enum):
    PROGRAM = enum.auto()
    FUNCTION = enum.auto()
    VARIABLE = enum.auto()
    BINARY_EXPR = enum.auto()
    UNARY_EXPR = enum.auto()
    LITERAL = enum.auto()
    RETURN = enum.auto()
    LET = enum.auto()
    CALL = enum.auto()


class BinaryOp(enum.Enum):
    ADD = enum.auto()
    SUB = enum.auto()
    MUL = enum.auto()
    DIV = enum.auto()
    MOD = enum.auto()
    EQ = enum.auto()
    NE = enum.auto()
    LT = enum.auto()
    LE = enum.auto()
    GT = enum.auto()
    GE = enum.auto()
    AND = enum.auto()
    OR = enum.auto()


class UnaryOp(enum.Enum):
    NEG = enum.auto()
    NOT = enum.auto()


class Type(enum.Enum):
    """A value type of the language, keyed by its source spelling."""

    I32 = "i32"
    I64 = "i64"
    F32 = "f32"
    F64 = "f64"
    BOOL = "bool"
    VOID = "void"

    @classmethod
    def from_string(cls, name: str) -> "Type":
        """Return the type spelled ``name``; unknown names give ``VOID``."""
        try:
            return cls(name)
        except ValueError:
            return cls.VOID


@dataclass
class Expr:
    """Base of all expressions."""

    node_type: ClassVar[ASTNodeType]
    line: int = field(default=0, kw_only=True)
    column: int = field(default=0, kw_only=True)


@dataclass
class BinaryExpr(Expr):
    node_type: ClassVar[ASTNodeType] = ASTNodeType.BINARY_EXPR
    left: Expr
    op: BinaryOp
    right: Expr


@dataclass
class UnaryExpr(Expr):
    node_type: ClassVar[ASTNodeType] = ASTNodeType.UNARY_EXPR
    op: UnaryOp
    operand: Expr


@dataclass
class LiteralExpr(Expr):
    node_type: ClassVar[ASTNodeType] = ASTNodeType.LITERAL
    value: str
    type: Type


@dataclass
class VariableExpr(Expr):
    node_type: ClassVar[ASTNodeType] = ASTNodeType.VARIABLE
    name: str


@dataclass
class CallExpr(Expr):
    node_type: ClassVar[ASTNodeType] = ASTNodeType.CALL
    callee: str
    args: list[Expr] = field(default_factory=list)


@dataclass
class Stmt:
    """Base of all statements."""

    node_type: ClassVar[ASTNodeType]
    line: int = field(default=0, kw_only=True)
    column: int = field(default=0, kw_only=True)


@dataclass
class ReturnStmt(Stmt):
    node_type: ClassVar[ASTNodeType] = ASTNodeType.RETURN
    expr: Optional[Expr] = None


@dataclass
class LetStmt(Stmt):
    node_type: ClassVar[ASTNodeType] = ASTNodeType.LET
    name: str
    type: Type
    value: Expr


@dataclass
class Function:
    """A function definition: name, signature and body."""

    node_type: ClassVar[ASTNodeType] = ASTNodeType.FUNCTION
    name: str
    return_type: Type
    params: list[tuple[str, Type]] = field(default_factory=list)
    body: list[Stmt] = field(default_factory=list)


@dataclass
class Program:
    """A whole source file: its functions in declaration order."""

    node_type: ClassVar[ASTNodeType] = ASTNodeType.PROGRAM
    functions: list[Function] = field(default_factory=list)

    def add_function(self, func: Function) -> None:
        self.functions.append(func)