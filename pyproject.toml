[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "ttail"
version = "0.1.0"
description = "Print the tail of a log file by time span rather than by line count"
requires-python = ">=3.11"
dependencies = []
keywords = ["log", "tail", "timestamp", "logging", "cli"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Logging",
    "Topic :: Utilities",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
ttail = "ttail.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["ttail"]

[tool.pytest.ini_options]
addopts = "-ra"
