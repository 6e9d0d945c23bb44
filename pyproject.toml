[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "xv6tools"
version = "0.1.0"
description = "File system image builder, user utilities, shell parser and page-table model for a small teaching Unix"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "operating-system",
    "file-system",
    "mkfs",
    "page-table",
    "shell",
    "allocator",
    "teaching",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Education",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Operating System",
    "Topic :: Education",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
xv6-mkfs = "xv6tools.mkfs:main"
xv6-grep = "xv6tools.grep:main"

[tool.hatch.build.targets.wheel]
packages = ["xv6tools"]

[tool.pytest.ini_options]
addopts = "-ra"
