[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "haproxy-native"
version = "0.1.0"
description = "HAProxy runtime API client and configuration object mapping"
requires-python = ">=3.10"
dependencies = []
keywords = ["haproxy", "runtime-api", "load-balancer", "configuration", "stick-table"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: Proxy Servers",
    "Topic :: System :: Systems Administration",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["haproxy_native"]

[tool.pytest.ini_options]
addopts = "-ra"
