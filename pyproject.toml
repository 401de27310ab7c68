[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "cfdot"
version = "0.1.0"
description = "Operations for querying and managing a Diego deployment through its BBS and Locket APIs"
requires-python = ">=3.10"
dependencies = []
keywords = ["diego", "bbs", "locket", "lrp", "tasks", "operations"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Systems Administration",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["cfdot"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
