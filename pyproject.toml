[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "somo"
version = "1.0.1"
description = "A human-friendly alternative to netstat for socket and port monitoring on Linux."
requires-python = ">=3.10"
keywords = ["netstat", "socket-monitoring", "port-checker", "procfs", "tcp", "udp"]
classifiers = [
    "Development Status :: 5 - Production/Stable",
    "Environment :: Console",
    "Intended Audience :: System Administrators",
    "Intended Audience :: Developers",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Networking :: Monitoring",
]
dependencies = [
    "rich",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
somo = "somo.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["somo"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
