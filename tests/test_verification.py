from dslc.ir import IRBuilder, IRType, Module, const_float, const_int
from dslc.verification import verification_errors, verify


def _function(return_type=IRType.I32, params=(("a", IRType.I32),)):
    module = Module("m")
    func = module.add_function("f", return_type, list(params))
    builder = IRBuilder()
    builder.position_at_end(func.append_block("entry"))
    return module, func, builder


def test_valid_module_has_no_errors():
    module, func, builder = _function()
    builder.ret(func.args[0])
    assert verification_errors(module) == ""
    assert verify(module, False) is True


def test_missing_terminator_reported():
    module, func, builder = _function()
    builder.binary("add", func.args[0], func.args[0], "t")
    assert "does not have terminator" in verification_errors(module)
    assert verify(module, True) is False


def test_return_type_mismatch():
    module, func, builder = _function()
    builder.ret_void()
    assert "return type" in verification_errors(module)


def test_operand_type_mismatch():
    module, func, builder = _function()
    value = builder.binary("add", func.args[0], const_float(IRType.FLOAT, 1.0), "t")
    builder.ret(value)
    assert "same type" in verification_errors(module)


def test_terminator_in_middle():
    module, func, builder = _function()
    builder.ret(func.args[0])
    builder.ret(const_int(IRType.I32, 0))
    assert "middle of a basic block" in verification_errors(module)


def test_declaration_only_is_valid():
    module = Module("m")
    module.add_function("ext", IRType.I32, [])
    assert verify(module, False) is True