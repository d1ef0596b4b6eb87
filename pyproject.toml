[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "atomicbloom"
version = "1.0.0"
description = "Thread-safe Bloom filters backed by a word-level bitset and 128-bit MurmurHash3"
requires-python = ">=3.10"
dependencies = []
keywords = ["bloom filter", "bitset", "murmur3", "probabilistic", "set membership"]
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
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["atomicbloom"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
