[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "zcache"
version = "0.1.0"
description = "Building blocks for zoned flash caches: buffers, bloom filters, workload distributions and an in-memory zoned device"
requires-python = ">=3.10"
dependencies = []
keywords = ["cache", "bloom-filter", "zoned-storage", "zipf", "flash"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Libraries",
    "Topic :: System :: Filesystems",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["zcache"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
