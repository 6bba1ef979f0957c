import pytest

from dslc.ir import (
    IRBuilder,
    IRType,
    Module,
    const_float,
    const_int,
    ir_type_for,
)
from dslc.nodes import Type


def test_ir_type_for_maps_language_types():
    assert ir_type_for(Type.I32) is IRType.I32
    assert ir_type_for(Type.F32) is IRType.FLOAT
    assert ir_type_for(Type.F64) is IRType.DOUBLE
    assert ir_type_for(Type.BOOL) is IRType.I1
    assert ir_type_for(Type.VOID) is IRType.VOID


def test_const_int_wraps_to_width():
    assert const_int(IRType.I32, 2**31).value == -(2**31)
    assert const_int(IRType.I32, -1).value == -1
    assert const_int(IRType.I1, 1).ref() == "true"
    assert const_int(IRType.I1, 0).ref() == "false"


def test_const_int_rejects_float_type():
    with pytest.raises(ValueError):
        const_int(IRType.FLOAT, 1)


def test_const_float_rounds_single_precision():
    c = const_float(IRType.FLOAT, 0.1)
    assert c.value != 0.1
    assert abs(c.value - 0.1) < 1e-7
    assert const_float(IRType.DOUBLE, 1.5).ref() == "1.500000e+00"


def test_module_functions_and_unique_names():
    module = Module("m")
    func = module.add_function("f", IRType.I32, [("a", IRType.I32)])
    assert module.get_function("f") is func
    assert module.get_function("g") is None
    with pytest.raises(ValueError):
        module.add_function("f", IRType.I32, [])
    block = func.append_block("entry")
    builder = IRBuilder()
    builder.position_at_end(block)
    first = builder.binary("add", func.args[0], func.args[0], "addtmp")
    second = builder.binary("add", first, first, "addtmp")
    assert first.name != second.name
    assert block.terminator() is None
    ret = builder.ret(second)
    assert block.terminator() is ret


def test_module_text_contains_definition():
    module = Module("m")
    func = module.add_function("id", IRType.I32, [("x", IRType.I32)])
    builder = IRBuilder()
    builder.position_at_end(func.append_block("entry"))
    builder.ret(func.args[0])
    text = module.to_text()
    assert "define i32 @id(i32 %x) {" in text
    assert "  ret i32 %x" in text
    assert text.startswith("; ModuleID = 'm'")


def test_builder_compare_yields_bool_and_rejects_unknown():
    module = Module("m")
    func = module.add_function("f", IRType.I1, [("a", IRType.I32)])
    builder = IRBuilder()
    builder.position_at_end(func.append_block("entry"))
    cmp = builder.compare("slt", func.args[0], const_int(IRType.I32, 3), "lttmp")
    assert cmp.type is IRType.I1
    assert cmp.opcode == "icmp"
    with pytest.raises(ValueError):
        builder.compare("bogus", func.args[0], func.args[0])


def test_call_without_name_gets_numbered_slot():
    module = Module("m")
    callee = module.add_function("g", IRType.I32, [])
    func = module.add_function("f", IRType.VOID, [])
    builder = IRBuilder()
    builder.position_at_end(func.append_block("entry"))
    call = builder.call(callee, [])
    builder.ret_void()
    assert call.name == "0"
    assert "%0 = call i32 @g()" in module.to_text()