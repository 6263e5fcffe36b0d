"""Inter-process communication through mapped files, pipes and shared memory."""

from __future__ import annotations

import codecs
import mmap
import os
import subprocess
import sys
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from multiprocessing import shared_memory

MAP_SIZE = 4096
SHARED_SIZE = 4096
PIPE_CHUNK = 1024
CHILD_MESSAGE = "hello,i am child"


def _cstr(data: bytes | bytearray | memoryview) -> bytes:
    return bytes(data).split(b"\0", 1)[0]


def _put_cstr(mapped: mmap.mmap, data: bytes) -> None:
    if len(data) + 1 > len(mapped):
        raise ValueError("text does not fit in the mapped region")
    mapped[: len(data) + 1] = data + b"\0"


def _write_all(fd: int, data: bytes) -> None:
    view = memoryview(data)
    while view:
        written = os.write(fd, view)
        view = view[written:]


def _wait(pid: int) -> None:
    _, status = os.waitpid(pid, 0)
    code = os.waitstatus_to_exitcode(status)
    if code != 0:
        raise ChildProcessError(f"child exited with status {code}")


@contextmanager
def _map_file(path: str | os.PathLike[str]) -> Iterator[mmap.mmap]:
    with open(path, "r+b") as handle:
        size = os.fstat(handle.fileno()).st_size
        if size == 0:
            raise ValueError(f"cannot map empty file {os.fspath(path)!r}")
        with mmap.mmap(handle.fileno(), size) as mapped:
            yield mapped


def copy_file(src: str | os.PathLike[str], dst: str | os.PathLike[str]) -> int:
    """Copy ``src`` to ``dst`` through memory maps; return the size copied."""
    with open(src, "rb") as source:
        size = os.fstat(source.fileno()).st_size
        fd = os.open(dst, os.O_RDWR | os.O_CREAT, 0o664)
        with open(fd, "r+b") as target:
            target.truncate(size)
            if size == 0:
                return 0
            with mmap.mmap(source.fileno(), size, access=mmap.ACCESS_READ) as src_map, mmap.mmap(
                target.fileno(), size
            ) as dst_map:
                dst_map[:] = src_map[:]
    return size


def write_mapped(path: str | os.PathLike[str], text: str) -> int:
    """Store NUL-terminated text at the start of a mapped file; return its length."""
    data = text.encode("utf-8")
    with _map_file(path) as mapped:
        _put_cstr(mapped, data)
    return len(data)


def read_mapped(path: str | os.PathLike[str]) -> str:
    """Return the NUL-terminated text at the start of a mapped file."""
    with _map_file(path) as mapped:
        text = _cstr(mapped[:]).decode("utf-8", "replace")
    print(f"read data: {text}", end="")
    return text


def share_anonymous(message: str) -> str:
    """Pass a message to a child through an anonymous shared mapping.

    The parent writes the message, the child reads and prints it and
    reports what it read back; that text is returned.
    """
    data = message.encode("utf-8")
    if len(data) + 1 > MAP_SIZE:
        raise ValueError("message does not fit in the shared mapping")
    with mmap.mmap(-1, MAP_SIZE) as shared:
        go_r, go_w = os.pipe()
        res_r, res_w = os.pipe()
        sys.stdout.flush()
        pid = os.fork()
        if pid == 0:
            status = 0
            try:
                os.close(go_w)
                os.close(res_r)
                os.read(go_r, 1)
                text = _cstr(shared[:])
                sys.stdout.write(text.decode("utf-8", "replace") + "\n")
                sys.stdout.flush()
                _write_all(res_w, text)
            except BaseException:
                status = 1
            finally:
                os._exit(status)
        os.close(go_r)
        os.close(res_w)
        try:
            _put_cstr(shared, data)
            os.write(go_w, b"\0")
        finally:
            os.close(go_w)
            with open(res_r, "rb") as result:
                received = result.read()
            _wait(pid)
    return received.decode("utf-8", "replace")


def share_file_with_child(path: str | os.PathLike[str], message: str) -> str:
    """Have a child write a message into a mapped file; return what the parent reads."""
    data = message.encode("utf-8")
    with _map_file(path) as mapped:
        if len(data) + 1 > len(mapped):
            raise ValueError("message does not fit in the mapped file")
        sys.stdout.flush()
        pid = os.fork()
        if pid == 0:
            status = 0
            try:
                _put_cstr(mapped, data)
            except BaseException:
                status = 1
            finally:
                os._exit(status)
        _wait(pid)
        text = _cstr(mapped[:]).decode("utf-8", "replace")
    print(f"read data： {text}", end="")
    return text


def pipe_from_command(args: Sequence[str] = ("ps", "aux")) -> str:
    """Run a command, echo its standard output as it arrives and return it."""
    decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
    parts: list[str] = []
    with subprocess.Popen(list(args), stdout=subprocess.PIPE) as proc:
        assert proc.stdout is not None
        while chunk := proc.stdout.read1(PIPE_CHUNK - 1):
            text = decoder.decode(chunk)
            sys.stdout.write(text)
            parts.append(text)
    tail = decoder.decode(b"", final=True)
    if tail:
        sys.stdout.write(tail)
        parts.append(tail)
    return "".join(parts)


def child_to_parent(message: str = CHILD_MESSAGE, count: int = 1) -> str:
    """Have a child write ``message`` ``count`` times into a pipe; return all the parent read."""
    if count < 0:
        raise ValueError("count must not be negative")
    data = message.encode("utf-8")
    read_fd, write_fd = os.pipe()
    sys.stdout.flush()
    pid = os.fork()
    if pid == 0:
        status = 0
        try:
            os.close(read_fd)
            print(f"i am child process, pid : {os.getpid()}", flush=True)
            for _ in range(count):
                _write_all(write_fd, data)
        except BaseException:
            status = 1
        finally:
            os._exit(status)
    os.close(write_fd)
    print(f"i am parent process, pid : {os.getpid()}")
    received = bytearray()
    with open(read_fd, "rb", buffering=0) as reader:
        while chunk := reader.read(PIPE_CHUNK):
            received += chunk
            print(f"parent recv : {chunk.decode('utf-8', 'replace')}, pid : {os.getpid()}")
    _wait(pid)
    return received.decode("utf-8", "replace")


def write_shared(name: str, text: str) -> int:
    """Store NUL-terminated text in the named shared-memory segment.

    The segment (4096 bytes) is created when it does not exist and is left
    in place for a reader. Returns the length of the text in bytes.
    """
    data = text.encode("utf-8") + b"\0"
    if len(data) > SHARED_SIZE:
        raise ValueError("text does not fit in the shared segment")
    try:
        segment = shared_memory.SharedMemory(name=name, create=True, size=SHARED_SIZE)
    except FileExistsError:
        segment = shared_memory.SharedMemory(name=name)
    try:
        if len(data) > segment.size:
            raise ValueError("text does not fit in the shared segment")
        segment.buf[: len(data)] = data
        print(f"shared memory is: {segment.name}")
    finally:
        segment.close()
    return len(data) - 1


def read_shared(name: str) -> str:
    """Return the text in the named shared-memory segment, then remove the segment."""
    segment = shared_memory.SharedMemory(name=name)
    try:
        text = _cstr(segment.buf).decode("utf-8", "replace")
    finally:
        segment.close()
        segment.unlink()
    print(text)
    return text