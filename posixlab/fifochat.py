"""Two-party chat over a pair of named pipes."""

from __future__ import annotations

import argparse
import os
import sys
import threading
from collections.abc import Iterable, Sequence
from contextlib import ExitStack
from typing import TextIO

DEFAULT_FIFOS = ("fifo1", "fifo2")
BUFFER_SIZE = 128

PathType = "str | os.PathLike[str]"


def ensure_fifos(paths: Iterable[str | os.PathLike[str]] = DEFAULT_FIFOS) -> list[str]:
    """Create each named pipe that does not exist yet (mode 0664).

    Returns the paths that were created. Raises OSError when one cannot be.
    """
    created: list[str] = []
    for path in paths:
        if not os.access(path, os.F_OK):
            print("管道不存在，创建对应的有名管道")
            os.mkfifo(path, 0o664)
            created.append(os.fspath(path))
    return created


def _open_writer(path: str | os.PathLike[str], sink: TextIO) -> int:
    fd = os.open(path, os.O_WRONLY)
    print(f"打开管道{os.fspath(path)}成功，等待写入...", file=sink)
    return fd


def _open_reader(path: str | os.PathLike[str], sink: TextIO) -> int:
    fd = os.open(path, os.O_RDONLY)
    print(f"打开管道{os.fspath(path)}成功，等待读取...", file=sink)
    return fd


def _write_all(fd: int, data: bytes) -> None:
    view = memoryview(data)
    while view:
        written = os.write(fd, view)
        view = view[written:]


def _send_line(source: TextIO, fd: int) -> bool:
    """Send one line from ``source``; False once the source is exhausted."""
    line = source.readline(BUFFER_SIZE - 1)
    if not line:
        return False
    _write_all(fd, line.encode("utf-8"))
    return True


def _receive(fd: int) -> str | None:
    """Read one chunk; None when the other side closed the pipe."""
    data = os.read(fd, BUFFER_SIZE)
    if not data:
        return None
    return data.decode("utf-8", "replace")


def chat_alternating(
    write_first: bool,
    out_path: str | os.PathLike[str] = DEFAULT_FIFOS[0],
    in_path: str | os.PathLike[str] = DEFAULT_FIFOS[1],
    stdin: TextIO | None = None,
    stdout: TextIO | None = None,
) -> list[str]:
    """Take turns sending a line and receiving a reply.

    The side that writes first opens its outgoing pipe first; the other side
    opens its incoming pipe first, so the two opens pair up. The chat ends
    when the input runs out or the other side closes; the received chunks
    are returned.
    """
    source = sys.stdin if stdin is None else stdin
    sink = sys.stdout if stdout is None else stdout
    received: list[str] = []
    with ExitStack() as stack:
        if write_first:
            out_fd = _open_writer(out_path, sink)
            stack.callback(os.close, out_fd)
            in_fd = _open_reader(in_path, sink)
            stack.callback(os.close, in_fd)
        else:
            in_fd = _open_reader(in_path, sink)
            stack.callback(os.close, in_fd)
            out_fd = _open_writer(out_path, sink)
            stack.callback(os.close, out_fd)
        while True:
            if write_first and not _send_line(source, out_fd):
                break
            text = _receive(in_fd)
            if text is None:
                break
            print(f"buf: {text}", file=sink)
            received.append(text)
            if not write_first and not _send_line(source, out_fd):
                break
    return received


def chat_duplex(
    out_path: str | os.PathLike[str] = DEFAULT_FIFOS[0],
    in_path: str | os.PathLike[str] = DEFAULT_FIFOS[1],
    stdin: TextIO | None = None,
    stdout: TextIO | None = None,
) -> list[str]:
    """Send lines and receive messages at the same time.

    Incoming data is printed as it arrives by a background reader. Returns
    the received chunks once the input is exhausted and the other side has
    closed its end.
    """
    source = sys.stdin if stdin is None else stdin
    sink = sys.stdout if stdout is None else stdout
    received: list[str] = []
    errors: list[OSError] = []

    def reader() -> None:
        try:
            fd = _open_reader(in_path, sink)
            try:
                while (text := _receive(fd)) is not None:
                    print(f"buf: {text}", file=sink)
                    received.append(text)
            finally:
                os.close(fd)
        except OSError as exc:
            errors.append(exc)

    thread = threading.Thread(target=reader, daemon=True)
    thread.start()
    fd = _open_writer(out_path, sink)
    try:
        while _send_line(source, fd):
            pass
    finally:
        os.close(fd)
    thread.join()
    if errors:
        raise errors[0]
    return received


def main(argv: Sequence[str] | None = None) -> int:
    """Chat as side "a" or side "b" over two named pipes."""
    parser = argparse.ArgumentParser(prog="fifochat", description="chat over named pipes")
    parser.add_argument("role", choices=["a", "b"])
    parser.add_argument("--duplex", action="store_true", help="send and receive at once")
    parser.add_argument("--fifo1", default=DEFAULT_FIFOS[0])
    parser.add_argument("--fifo2", default=DEFAULT_FIFOS[1])
    args = parser.parse_args(argv)
    try:
        ensure_fifos([args.fifo1, args.fifo2])
    except OSError as exc:
        print(f"mkfifo: {exc.strerror}", file=sys.stderr)
        return 1
    if args.role == "a":
        out_path, in_path = args.fifo1, args.fifo2
    else:
        out_path, in_path = args.fifo2, args.fifo1
    try:
        if args.duplex:
            chat_duplex(out_path, in_path)
        else:
            chat_alternating(args.role == "a", out_path, in_path)
    except OSError as exc:
        print(f"fifochat: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())