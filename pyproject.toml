[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "exprjit"
version = "0.1.0"
description = "A small arithmetic expression compiler: lexer, parser, IR, stack VM and x86-64 assembly listing."
requires-python = ">=3.10"
dependencies = []
keywords = ["compiler", "expression", "ir", "virtual-machine", "assembly", "education"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Intended Audience :: Education",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Compilers",
    "Topic :: Education",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
exprjit = "exprjit.compiler:main"

[tool.hatch.build.targets.wheel]
packages = ["exprjit"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
