[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "stunkit"
version = "0.1.0"
description = "Networking building blocks for STUN clients and servers: sockets, polling, address resolution, rate limiting and console helpers"
requires-python = ">=3.10"
keywords = ["stun", "nat", "networking", "udp", "tcp", "polling", "rate-limiting"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Networking",
    "Topic :: Software Development :: Libraries :: Python Modules",
]
dependencies = [
    "psutil",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["stunkit"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
