[build-system]
requires = ["setuptools>=61"]
build-backend = "setuptools.build_meta"

[project]
name = "rmdb"
version = "0.1.0"
description = "Storage layer, buffer pool, catalog metadata and transaction records for a small relational database engine"
requires-python = ">=3.10"
dependencies = []
keywords = ["database", "buffer-pool", "storage", "catalog", "transactions"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Education",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: POSIX",
    "Topic :: Database :: Database Engines/Servers",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.setuptools.packages.find]
include = ["rmdb*"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
