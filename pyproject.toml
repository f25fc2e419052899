[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "rudr"
version = "0.1.0"
description = "Open Application Model parameters, variables, traits and application scopes for Kubernetes"
requires-python = ">=3.10"
dependencies = []
keywords = ["kubernetes", "oam", "open-application-model", "traits", "scopes", "autoscaler"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: System Administrators",
    "Intended Audience :: Developers",
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
packages = ["rudr"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
