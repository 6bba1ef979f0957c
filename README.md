# dslc

`dslc` compiles a small, statically typed expression language into
textual LLVM-style IR. It has its own lexer, parser, IR builder and IR
verifier, all in pure Python.

The IR can be written to a `.ll` file. For assembly, bitcode and object
files, `dslc` pipes the IR through `clang`. An object file can then be
linked into an executable with `lld` or the system C compiler.

## The language

A program is a list of functions. Each function declares typed
parameters and a return type. Its body holds `let` bindings and
`return` statements.

```
// add two numbers
fn add(a: i32, b: i32) -> i32 {
    return a + b;
}

fn main() -> i32 {
    let x: i32 = add(2, 3);
    return x * 2;
}
```

- **Types:** `i32`, `i64`, `f32`, `f64`, `bool`, `void`.
- **Operators:**
  - arithmetic: `+ - * / %`
  - comparisons: `== != < <= > >=`
  - unary: `-` (negation) and `!` (bitwise not)
- **Literals:**
  - integers are `i32`
  - numbers with a decimal point are `f32`
  - `true` and `false` are `bool`
- **Comments:** start with `//` and run to the end of the line.

A function can only call functions defined before it.

A bare expression followed by `;` is treated as a `return` of that
expression.

## Installing

```
pip install .
```

To run the test suite, install the test extra:

```
pip install .[test]
```

## Command line

```
dslc program.dsl -emit-ir -o program.ll
```

Options are written with a single dash:

| Option | Effect |
| --- | --- |
| `-o filename` | Output file. When no `-emit-*` flag is given, the format is chosen by whether the name contains `.ll`, `.s`, `.bc` or `.o`. |
| `-emit-ir` | Write textual IR. |
| `-emit-asm` | Write assembly (runs `clang -S`). |
| `-emit-bc` | Write bitcode (runs `clang -c -emit-llvm`). |
| `-emit-obj` | Write an object file (runs `clang -c`). |
| `-link` | After writing an object file, link it. The executable takes the object's name with the first `.o` removed and `.out` appended. Tries `lld` first, then `clang` on macOS or `gcc` elsewhere. |
| `-dump-ir` | Print the IR to standard output. |
| `-O level` | Optimisation level passed to `clang`, 0 to 3. The default is 2; out-of-range values use 2. |
| `-O0` | Pass no optimisation flag. |
| `-asan` | Add `-fsanitize=address` to the `clang` command. |
| `-ubsan` | Add `-fsanitize=undefined` to the `clang` command. |
| `-jit` | Run `main()` with the built-in interpreter and log its return value. |
| `-v` | Verbose output. Prints an AST summary and the IR. |

If an `-emit-*` flag or `-o` is given without a clear format, the
output defaults to an object file named `<input>.o`.

Progress is logged to standard output with `[INFO]`, `[WARN]` and
`[ERROR]` prefixes. A diagnostics summary is printed at the end of
every run.

The command exits with status 0 on success. It exits with status 1 in
any of these cases:

- the input file cannot be read;
- the source does not parse;
- IR generation fails, for example on an unknown variable or function;
- the IR fails verification;
- any error diagnostic is reported, such as a failed `clang` run.

## Library use

```python
from dslc.parser import parse_source, format_ast
from dslc.irgen import IRGenerator
from dslc.verification import verify, verification_errors

program = parse_source("fn main() -> i32 { return 1 + 2; }")
print(format_ast(program, 0))

module = IRGenerator().generate(program)
assert verify(module, True)
print(module.to_text())
```

Errors are raised as exceptions:

- `dslc.parser.ParseError` for parse failures; it carries the line and
  column.
- `dslc.irgen.IRGenerationError` for code that cannot be lowered.
- `dslc.codegen.CodegenError` when an output file cannot be produced.

Other modules:

- `dslc.lexer` tokenises source text.
- `dslc.diagnostics.Diagnostics` collects and reports messages.
- `dslc.module_setup.ModuleSetup` sets the target triple and data
  layout.
- `dslc.linker` links object files.
- `dslc.sanitizer` returns sanitizer flags.

## What it does not do

- **Optimisation.** There are no optimisation passes of its own. The
  optimisation level is only passed on to `clang` when native output
  is produced.
- **Native compilation.** Assembly, bitcode, object output and linking
  all need `clang` (and a linker) on `PATH`.
- **JIT.** `-jit` does not compile to machine code. It interprets the
  IR of `main()` directly.
- **Control flow.** The keywords `if`, `else`, `while` and `for` are
  recognised by the lexer but not accepted by the parser. `&&` and `||`
  are tokenised but have no place in the expression grammar.
- **Mutation.** `let` bindings cannot be reassigned.