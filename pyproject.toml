[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "composetools"
version = "0.1.0"
description = "Building blocks for multi-container tooling: progress reporting, log printing, registry stream decoding and end-to-end test helpers."
requires-python = ">=3.10"
dependencies = []
keywords = [
    "containers",
    "compose",
    "progress",
    "terminal",
    "logging",
    "testing",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Libraries :: Python Modules",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["composetools"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
