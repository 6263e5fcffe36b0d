[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "posixlab"
version = "0.1.0"
description = "Small, runnable exercises in POSIX systems programming: sockets, I/O multiplexing, processes, IPC, threads and HTTP request handling"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "posix",
    "sockets",
    "epoll",
    "select",
    "poll",
    "ipc",
    "mmap",
    "fifo",
    "shared-memory",
    "threads",
    "http",
    "education",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Education",
    "Intended Audience :: Developers",
    "Operating System :: POSIX",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Education",
    "Topic :: System :: Networking",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
posixlab-calc = "posixlab.calc:main"
posixlab-sort = "posixlab.sorting:main"
posixlab-sum = "posixlab.sumdemo:main"
posixlab-ls = "posixlab.lsl:main"
posixlab-tcp = "posixlab.tcp:main"
posixlab-udp = "posixlab.udp:main"
posixlab-multiplex = "posixlab.multiplex:main"
posixlab-alarm = "posixlab.alarm:main"
posixlab-fifochat = "posixlab.fifochat:main"

[tool.hatch.build.targets.wheel]
packages = ["posixlab"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
