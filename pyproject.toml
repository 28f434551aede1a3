[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "netfilesend"
version = "0.1.0"
description = "Send files between two peers over TCP, as server or client, with a fixed-size file header."
requires-python = ">=3.10"
dependencies = []
keywords = ["file transfer", "tcp", "socket", "network"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Communications :: File Sharing",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
netfilesend = "netfilesend.session:main"

[tool.hatch.build.targets.wheel]
packages = ["netfilesend"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
