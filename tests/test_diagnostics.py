import pytest

from dslc.diagnostics import Diagnostic, Diagnostics, Level
from dslc.ir import IRBuilder, IRType, Module, const_int


def _module():
    module = Module("DSL_Module")
    func = module.add_function("main", IRType.I32, [])
    builder = IRBuilder()
    builder.position_at_end(func.append_block("entry"))
    builder.ret(const_int(IRType.I32, 0))
    return module


def test_error_counting():
    diags = Diagnostics()
    diags.add(Level.INFO, "note")
    diags.add(Level.ERROR, "first")
    diags.add(Level.WARNING, "careful")
    diags.add(Level.ERROR, "second")
    assert diags.has_errors()
    assert diags.error_count() == 2
    assert len(diags) == 4


def test_no_errors_when_only_warnings():
    diags = Diagnostics()
    diags.add(Level.WARNING, "careful")
    assert not diags.has_errors()
    assert diags.error_count() == 0


def test_add_logs_with_level_prefix(capsys):
    diags = Diagnostics()
    diags.add(Level.WARNING, "careful")
    assert capsys.readouterr().out == "[WARN] Diagnostic: careful\n"


def test_add_returns_recorded_entry():
    diags = Diagnostics()
    entry = diags.add(Level.ERROR, "boom", 3, 7)
    assert entry == Diagnostic(Level.ERROR, "boom", 3, 7)
    assert list(diags) == [entry]


@pytest.mark.parametrize(
    "diagnostic, expected",
    [
        (Diagnostic(Level.ERROR, "boom", 3, 7), "[ERROR] line 3:7: boom"),
        (Diagnostic(Level.WARNING, "careful", 2), "[WARN] line 2: careful"),
        (Diagnostic(Level.INFO, "hello"), "[INFO] hello"),
        (Diagnostic(Level.INFO, "hello", 0, 5), "[INFO] hello"),
    ],
)
def test_diagnostic_text(diagnostic, expected):
    assert str(diagnostic) == expected


def test_format_has_header_entries_and_footer():
    diags = Diagnostics()
    diags.add(Level.ERROR, "Parse error: bad", 1, 2)
    lines = diags.format().split("\n")
    assert lines[0] == ""
    assert lines[1] == "=== Diagnostics ==="
    assert lines[2] == "[ERROR] line 1:2: Parse error: bad"
    assert lines[3] == "=================="


def test_print_diagnostics_matches_format(capsys):
    diags = Diagnostics()
    diags.add(Level.INFO, "note")
    capsys.readouterr()
    diags.print_diagnostics()
    assert capsys.readouterr().out == diags.format()


def test_clear_removes_everything():
    diags = Diagnostics()
    diags.add(Level.ERROR, "boom")
    diags.clear()
    assert len(diags) == 0
    assert not diags.has_errors()


def test_dump_ir_to_stdout(capsys):
    module = _module()
    Diagnostics().dump_ir(module)
    out = capsys.readouterr().out
    assert "Dumping IR to stdout" in out
    assert out.endswith(module.to_text())


def test_dump_ir_to_file(tmp_path):
    module = _module()
    target = tmp_path / "out.ll"
    Diagnostics().dump_ir(module, to_stdout=False, filename=str(target))
    assert target.read_text(encoding="utf-8") == module.to_text()


def test_dump_ir_without_module_logs_error(capsys):
    Diagnostics().dump_ir(None)
    assert capsys.readouterr().out.startswith("[ERROR] DiagnosticsAgent: Cannot dump IR")


def test_dump_ir_nowhere_does_nothing(capsys):
    Diagnostics().dump_ir(_module(), to_stdout=False)
    assert capsys.readouterr().out == ""


def test_dump_ir_unwritable_file_logs_error(tmp_path, capsys):
    target = tmp_path / "missing" / "out.ll"
    Diagnostics().dump_ir(_module(), to_stdout=False, filename=str(target))
    assert "DiagnosticsAgent: Cannot open file" in capsys.readouterr().out
    assert not target.exists()