[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "serialline"
version = "0.1.0"
description = "Configure and query serial line settings through termios and modem-control ioctls"
requires-python = ">=3.10"
keywords = ["serial", "uart", "termios", "tty", "baud", "parity", "flow-control"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Terminals :: Serial",
]
dependencies = []

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["serialline"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
