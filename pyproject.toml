[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "mfkit"
version = "0.1.0"
description = "Small utilities: byte buffers and endianness, C-style time helpers, and child process running with redirectable streams."
requires-python = ">=3.10"
dependencies = []
keywords = ["bytes", "endianness", "buffer", "time", "strftime", "subprocess", "command"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Libraries",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["mfkit"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
