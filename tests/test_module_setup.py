from dslc.ir import Module
from dslc.module_setup import ModuleSetup, default_data_layout, default_triple


def test_default_triple_has_arch_vendor_and_os():
    parts = default_triple().split("-")
    assert len(parts) >= 3
    assert all(parts)


def test_known_linux_layout_uses_elf_mangling():
    layout = default_data_layout("x86_64-pc-linux-gnu")
    assert layout.startswith("e-m:e-")


def test_darwin_layout_uses_macho_mangling():
    layout = default_data_layout("arm64-apple-darwin23.0.0")
    assert layout.startswith("e-m:o-")


def test_architectures_have_distinct_layouts():
    x86 = default_data_layout("x86_64-pc-linux-gnu")
    arm = default_data_layout("aarch64-unknown-linux-gnu")
    assert x86 and arm
    assert x86 != arm


def test_arch_aliases_share_layout():
    assert default_data_layout("amd64-pc-linux-gnu") == default_data_layout(
        "x86_64-pc-linux-gnu"
    )


def test_unknown_target_gives_empty_layout(capsys):
    assert default_data_layout("bogus-unknown-none") == ""
    assert "Cannot find target for triple: bogus-unknown-none" in capsys.readouterr().out


def test_empty_triple_gives_empty_layout():
    assert default_data_layout("") == ""


def test_setup_applies_triple_and_layout():
    setup = ModuleSetup()
    setup.set_target_triple("x86_64-pc-linux-gnu")
    module = Module("m")
    setup.setup_module(module)
    assert module.target_triple == "x86_64-pc-linux-gnu"
    assert module.data_layout == default_data_layout("x86_64-pc-linux-gnu")


def test_set_target_triple_recomputes_layout():
    setup = ModuleSetup()
    setup.set_target_triple("aarch64-unknown-linux-gnu")
    assert setup.data_layout == default_data_layout("aarch64-unknown-linux-gnu")


def test_explicit_layout_is_applied():
    setup = ModuleSetup()
    setup.set_target_triple("x86_64-pc-linux-gnu")
    setup.set_data_layout("e-custom")
    module = Module("m")
    setup.setup_module(module)
    assert module.data_layout == "e-custom"


def test_empty_layout_leaves_module_default(capsys):
    setup = ModuleSetup()
    setup.set_target_triple("x86_64-pc-linux-gnu")
    setup.set_data_layout("")
    module = Module("m")
    setup.setup_module(module)
    assert module.data_layout == ""
    assert "Using default data layout" in capsys.readouterr().out


def test_empty_triple_is_not_applied():
    setup = ModuleSetup()
    setup.set_target_triple("")
    module = Module("m", target_triple="kept")
    setup.setup_module(module)
    assert module.target_triple == "kept"