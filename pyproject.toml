[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "posplot"
version = "0.1.0"
description = "Building blocks for proof-of-space plot files: bit slicing, line-point encoding, SHA-256, reversed bit streams, byte histograms, directory locks and an on-disk bucket sort."
requires-python = ">=3.10"
dependencies = []
keywords = [
    "proof-of-space",
    "plotting",
    "bitstream",
    "sha256",
    "histogram",
    "external-sort",
    "encoding",
]
classifiers = [
    "Development Status :: 3 - Alpha",
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
packages = ["posplot"]

[tool.pytest.ini_options]
addopts = "-ra"
