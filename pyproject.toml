[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "dslc"
version = "0.1.0"
description = "Compiler for a small typed expression language that emits LLVM-style textual IR and drives clang for native output"
requires-python = ">=3.10"
dependencies = []
keywords = ["compiler", "dsl", "llvm", "ir", "lexer", "parser"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Compilers",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
dslc = "dslc.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["dslc"]

[tool.pytest.ini_options]
addopts = "-ra"
