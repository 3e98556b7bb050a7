[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "dhcpserv"
version = "0.1.0"
description = "A small loopback DHCP server for local testing, with BOOTP/DHCP message helpers"
requires-python = ">=3.10"
dependencies = []
keywords = ["dhcp", "bootp", "udp", "networking", "server"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Networking",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
dhcpserv = "dhcpserv.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["dhcpserv"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
