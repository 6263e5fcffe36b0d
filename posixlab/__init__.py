"""Runnable exercises in POSIX systems programming: sockets, multiplexing, IPC, threads and HTTP request parsing."""

__version__ = "0.1.0"