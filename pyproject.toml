[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "beeorm"
version = "3.0.0"
description = "Entity ORM building blocks: LRU local cache, query loggers, lock wrapper, SQL where builder and timestamp plugin"
requires-python = ">=3.10"
dependencies = []
keywords = ["orm", "cache", "lru", "sql", "query-builder", "lock", "logging"]
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
    "Topic :: Database",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["beeorm"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
