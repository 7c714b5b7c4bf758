[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "geyserstream"
version = "0.1.6"
description = "Wire types, framing, filters and block assembly for streaming validator geyser updates"
requires-python = ">=3.10"
keywords = ["geyser", "streaming", "bincode", "lz4", "blocks", "accounts", "filters"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: System :: Distributed Computing",
]
dependencies = [
    "lz4",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["geyserstream"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
