[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "mmlink"
version = "0.1.0"
description = "Emulated network link queues, an incremental HTTP/1.1 message parser, replay matching and shell option parsing"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "network emulation",
    "link emulation",
    "packet queue",
    "delay",
    "packet loss",
    "http parser",
    "record and replay",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Networking",
    "Topic :: Internet :: WWW/HTTP",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["mmlink"]

[tool.hatch.build.targets.sdist]
include = ["mmlink", "tests", "pyproject.toml"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
