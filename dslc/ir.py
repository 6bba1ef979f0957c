"""A small in-memory SSA intermediate representation with a textual form."""

from __future__ import annotations

import enum
import struct
from dataclasses import dataclass, field
from typing import Optional, Sequence

from dslc.nodes import Type

__all__ = [
    "IRType",
    "ir_type_for",
    "Value",
    "Constant",
    "const_int",
    "const_float",
    "Argument",
    "Instruction",
    "BasicBlock",
    "IRFunction",
    "Module",
    "IRBuilder",
]


class IRType(enum.Enum):
    """A first-class type of the representation, keyed by its spelling."""

    I1 = "i1"
    I32 = "i32"
    I64 = "i64"
    FLOAT = "float"
    DOUBLE = "double"
    VOID = "void"

    @property
    def is_float(self) -> bool:
        return self in (IRType.FLOAT, IRType.DOUBLE)

    @property
    def is_integer(self) -> bool:
        return self in (IRType.I1, IRType.I32, IRType.I64)

    @property
    def is_void(self) -> bool:
        return self is IRType.VOID

    @property
    def bits(self) -> int:
        return {IRType.I1: 1, IRType.I32: 32, IRType.I64: 64,
                IRType.FLOAT: 32, IRType.DOUBLE: 64, IRType.VOID: 0}[self]

    def __str__(self) -> str:
        return self.value


_TYPE_MAP = {
    Type.I32: IRType.I32,
    Type.I64: IRType.I64,
    Type.F32: IRType.FLOAT,
    Type.F64: IRType.DOUBLE,
    Type.BOOL: IRType.I1,
    Type.VOID: IRType.VOID,
}


def ir_type_for(kind: Type) -> IRType:
    """Return the representation type of a language type."""
    return _TYPE_MAP.get(kind, IRType.VOID)


@dataclass(eq=False)
class Value:
    """Anything that can be used as an operand."""

    type: IRType
    name: str = ""

    def ref(self) -> str:
        return f"%{self.name}"

    def typed_ref(self) -> str:
        return f"{self.type} {self.ref()}"


@dataclass(eq=False)
class Constant(Value):
    value: float | int = 0

    def ref(self) -> str:
        if self.type is IRType.I1:
            return "true" if self.value else "false"
        if self.type.is_integer:
            return str(int(self.value))
        return _format_float(float(self.value))


def _format_float(value: float) -> str:
    text = f"{value:e}"
    if float(text) == value:
        return text
    (bits,) = struct.unpack("<Q", struct.pack("<d", value))
    return f"0x{bits:016X}"


def const_int(ir_type: IRType, value: int) -> Constant:
    """An integer constant of ``ir_type``, wrapped to its width (signed)."""
    if not ir_type.is_integer:
        raise ValueError(f"not an integer type: {ir_type}")
    if ir_type is IRType.I1:
        return Constant(ir_type, value=int(value) & 1)
    width = ir_type.bits
    wrapped = int(value) & ((1 << width) - 1)
    if wrapped >= 1 << (width - 1):
        wrapped -= 1 << width
    return Constant(ir_type, value=wrapped)


def const_float(ir_type: IRType, value: float) -> Constant:
    """A floating constant of ``ir_type``; ``float`` values round to single precision."""
    if not ir_type.is_float:
        raise ValueError(f"not a floating-point type: {ir_type}")
    value = float(value)
    if ir_type is IRType.FLOAT:
        (value,) = struct.unpack("<f", struct.pack("<f", value))
    return Constant(ir_type, value=value)


@dataclass(eq=False)
class Argument(Value):
    pass


TERMINATORS = frozenset({"ret", "unreachable"})
BINARY_OPCODES = frozenset({
    "add", "sub", "mul", "sdiv", "srem",
    "fadd", "fsub", "fmul", "fdiv", "frem",
    "and", "or", "xor",
})
FLOAT_OPCODES = frozenset({"fadd", "fsub", "fmul", "fdiv", "frem", "fneg"})
ICMP_PREDICATES = frozenset({"eq", "ne", "slt", "sle", "sgt", "sge"})
FCMP_PREDICATES = frozenset({"oeq", "one", "olt", "ole", "ogt", "oge"})


@dataclass(eq=False)
class Instruction(Value):
    """One instruction; it is also the value it produces."""

    opcode: str = ""
    operands: list[Value] = field(default_factory=list)
    predicate: str = ""
    callee: Optional["IRFunction"] = None

    @property
    def is_terminator(self) -> bool:
        return self.opcode in TERMINATORS

    def to_text(self) -> str:
        ops = self.operands
        if self.opcode == "ret":
            return f"ret {ops[0].typed_ref()}" if ops else "ret void"
        if self.opcode == "unreachable":
            return "unreachable"
        if self.opcode == "call":
            args = ", ".join(a.typed_ref() for a in ops)
            body = f"call {self.type} @{self.callee.name}({args})"
        elif self.opcode in ("icmp", "fcmp"):
            body = (f"{self.opcode} {self.predicate} {ops[0].type} "
                    f"{ops[0].ref()}, {ops[1].ref()}")
        elif self.opcode == "fneg":
            body = f"fneg {ops[0].typed_ref()}"
        else:
            body = f"{self.opcode} {ops[0].type} {ops[0].ref()}, {ops[1].ref()}"
        return body if self.type.is_void else f"%{self.name} = {body}"


@dataclass(eq=False)
class BasicBlock:
    name: str
    parent: Optional["IRFunction"] = None
    instructions: list[Instruction] = field(default_factory=list)

    def terminator(self) -> Optional[Instruction]:
        """The block's final instruction if it ends control flow, else ``None``."""
        if self.instructions and self.instructions[-1].is_terminator:
            return self.instructions[-1]
        return None


@dataclass(eq=False)
class IRFunction:
    name: str
    return_type: IRType
    args: list[Argument] = field(default_factory=list)
    blocks: list[BasicBlock] = field(default_factory=list)
    _names: set[str] = field(default_factory=set, repr=False)
    _slot: int = field(default=0, repr=False)

    def unique_name(self, base: str) -> str:
        """Reserve a local name derived from ``base``; empty gives a numbered slot."""
        if not base:
            name = str(self._slot)
            self._slot += 1
            return name
        name, counter = base, 0
        while name in self._names:
            counter += 1
            name = f"{base}{counter}"
        self._names.add(name)
        return name

    def append_block(self, name: str) -> BasicBlock:
        block = BasicBlock(self.unique_name(name), parent=self)
        self.blocks.append(block)
        return block

    def to_text(self) -> str:
        params = ", ".join(a.typed_ref() for a in self.args)
        header = f"{self.return_type} @{self.name}({params})"
        if not self.blocks:
            return f"declare {header}\n"
        lines = [f"define {header} {{"]
        for index, block in enumerate(self.blocks):
            if index:
                lines.append("")
            lines.append(f"{block.name}:")
            lines.extend(f"  {inst.to_text()}" for inst in block.instructions)
        lines.append("}")
        return "\n".join(lines) + "\n"


@dataclass(eq=False)
class Module:
    name: str
    functions: list[IRFunction] = field(default_factory=list)
    target_triple: str = ""
    data_layout: str = ""

    def get_function(self, name: str) -> Optional[IRFunction]:
        return next((f for f in self.functions if f.name == name), None)

    def add_function(
        self, name: str, return_type: IRType, params: Sequence[tuple[str, IRType]]
    ) -> IRFunction:
        """Create a function with named parameters; the name must be new."""
        if self.get_function(name) is not None:
            raise ValueError(f"function already exists: {name}")
        func = IRFunction(name, return_type)
        func.args = [Argument(t, func.unique_name(n)) for n, t in params]
        self.functions.append(func)
        return func

    def to_text(self) -> str:
        lines = [f"; ModuleID = '{self.name}'", f'source_filename = "{self.name}"']
        if self.data_layout:
            lines.append(f'target datalayout = "{self.data_layout}"')
        if self.target_triple:
            lines.append(f'target triple = "{self.target_triple}"')
        text = "\n".join(lines) + "\n"
        for func in self.functions:
            text += "\n" + func.to_text()
        return text


class IRBuilder:
    """Appends instructions to the end of a current block."""

    def __init__(self) -> None:
        self.block: Optional[BasicBlock] = None

    def position_at_end(self, block: BasicBlock) -> None:
        self.block = block

    def _insert(self, inst: Instruction, name: str = "") -> Instruction:
        if self.block is None:
            raise RuntimeError("builder has no insertion block")
        if not inst.type.is_void:
            inst.name = self.block.parent.unique_name(name)
        self.block.instructions.append(inst)
        return inst

    def binary(self, opcode: str, left: Value, right: Value, name: str = "") -> Instruction:
        if opcode not in BINARY_OPCODES:
            raise ValueError(f"unknown binary opcode: {opcode}")
        return self._insert(Instruction(left.type, opcode=opcode, operands=[left, right]), name)

    def compare(self, predicate: str, left: Value, right: Value, name: str = "") -> Instruction:
        if predicate in ICMP_PREDICATES:
            opcode = "icmp"
        elif predicate in FCMP_PREDICATES:
            opcode = "fcmp"
        else:
            raise ValueError(f"unknown comparison predicate: {predicate}")
        inst = Instruction(IRType.I1, opcode=opcode, operands=[left, right], predicate=predicate)
        return self._insert(inst, name)

    def neg(self, operand: Value, name: str = "") -> Instruction:
        if operand.type.is_float:
            return self._insert(Instruction(operand.type, opcode="fneg", operands=[operand]), name)
        return self.binary("sub", const_int(operand.type, 0), operand, name)

    def not_(self, operand: Value, name: str = "") -> Instruction:
        if operand.type.is_integer:
            all_ones = const_int(operand.type, -1)
        else:
            all_ones = Constant(operand.type, value=-1)
        return self.binary("xor", operand, all_ones, name)

    def call(self, callee: IRFunction, args: Sequence[Value]) -> Instruction:
        inst = Instruction(callee.return_type, opcode="call", operands=list(args), callee=callee)
        return self._insert(inst)

    def ret(self, value: Value) -> Instruction:
        return self._insert(Instruction(IRType.VOID, opcode="ret", operands=[value]))

    def ret_void(self) -> Instruction:
        return self._insert(Instruction(IRType.VOID, opcode="ret"))

    def unreachable(self) -> Instruction:
        return self._insert(Instruction(IRType.VOID, opcode="unreachable"))