[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "mifasm"
version = "0.1.0"
description = "Assembler and microprogram compiler that emit Memory Initialization Files (MIF)"
requires-python = ">=3.10"
dependencies = []
keywords = ["assembler", "mif", "microprogram", "fpga", "memory-initialization"]
classifiers = [
    "Development Status :: 4 - Beta",
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
    "Topic :: Software Development :: Assemblers",
    "Topic :: Software Development :: Embedded Systems",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
mifasm = "mifasm.assembler:main"
mifasm-micro = "mifasm.microprogram:main"

[tool.hatch.build.targets.wheel]
packages = ["mifasm"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 88
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
