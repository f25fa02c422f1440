[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "flix"
version = "0.2.3"
description = "A package manager that installs command-line tools from git repositories or pre-built release binaries"
requires-python = ">=3.11"
keywords = ["package-manager", "git", "releases", "binaries", "installer", "cargo"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Software Distribution",
]
dependencies = [
    "platformdirs",
    "tomli-w",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
flix = "flix.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["flix"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py311"
