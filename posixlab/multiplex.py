"""Echo servers built on select, poll and epoll, and the clients that talk to them."""

from __future__ import annotations

import argparse
import itertools
import select
import socket
import sys
import threading
import time
from collections.abc import Iterable, Sequence
from enum import Enum

PORT = 9998
BUFFER_SIZE = 1024
EDGE_CHUNK = 5
REPLY = b"back from server".ljust(20, b"\0")
CLIENT_MESSAGE = b"client message"


def _cstr(data: bytes) -> str:
    return data.split(b"\0", 1)[0].decode("utf-8", "replace")


def _counter(count: int | None) -> Iterable[int]:
    return itertools.count() if count is None else range(count)


class Backend(Enum):
    """Readiness mechanism used by :class:`EchoServer`."""

    SELECT = "select"
    POLL = "poll"
    EPOLL = "epoll"
    EPOLL_ET = "epoll-et"

    @property
    def edge_triggered(self) -> bool:
        """True when client sockets are watched edge-triggered."""
        return self is Backend.EPOLL_ET


class _SelectPoller:
    def __init__(self) -> None:
        self._fds: set[int] = set()

    def register(self, fd: int, edge: bool = False) -> None:
        self._fds.add(fd)

    def unregister(self, fd: int) -> None:
        self._fds.discard(fd)

    def wait(self) -> list[int]:
        ready, _, _ = select.select(sorted(self._fds), [], [])
        return ready

    def close(self) -> None:
        self._fds.clear()


class _PollPoller:
    def __init__(self) -> None:
        self._poll = select.poll()
        self._fds: set[int] = set()

    def register(self, fd: int, edge: bool = False) -> None:
        self._poll.register(fd, select.POLLIN)
        self._fds.add(fd)

    def unregister(self, fd: int) -> None:
        self._poll.unregister(fd)
        self._fds.discard(fd)

    def wait(self) -> list[int]:
        return [fd for fd, _ in self._poll.poll()]

    def close(self) -> None:
        for fd in list(self._fds):
            self.unregister(fd)


class _EpollPoller:
    def __init__(self) -> None:
        self._epoll = select.epoll()

    def register(self, fd: int, edge: bool = False) -> None:
        mask = select.EPOLLIN | (select.EPOLLET if edge else 0)
        self._epoll.register(fd, mask)

    def unregister(self, fd: int) -> None:
        self._epoll.unregister(fd)

    def wait(self) -> list[int]:
        return [fd for fd, _ in self._epoll.poll()]

    def close(self) -> None:
        self._epoll.close()


def _make_poller(backend: Backend) -> _SelectPoller | _PollPoller | _EpollPoller:
    if backend is Backend.SELECT:
        return _SelectPoller()
    if backend is Backend.POLL:
        if not hasattr(select, "poll"):
            raise ValueError("poll is not available on this platform")
        return _PollPoller()
    if not hasattr(select, "epoll"):
        raise ValueError("epoll is not available on this platform")
    return _EpollPoller()


class EchoServer:
    """Answer every message from many clients on one thread.

    Level-triggered backends reply with a fixed 20-byte message; the
    edge-triggered backend echoes the data back in zero-padded 5-byte chunks.
    """

    def __init__(
        self,
        host: str = "0.0.0.0",
        port: int = PORT,
        backend: Backend | str = Backend.SELECT,
    ) -> None:
        self.backend = Backend(backend)
        self._poller = _make_poller(self.backend)
        self._listener = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        try:
            self._listener.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            self._listener.bind((host, port))
            self._listener.listen(128)
        except OSError:
            self._listener.close()
            self._poller.close()
            raise
        self.host, self.port = self._listener.getsockname()[:2]
        self._wake_r, self._wake_w = socket.socketpair()
        self._wake_r.setblocking(False)
        self._stopping = threading.Event()
        self._close_lock = threading.Lock()
        self._closed = False
        self._clients: dict[int, socket.socket] = {}
        self._listener_fd = self._listener.fileno()
        self._wake_fd = self._wake_r.fileno()
        self._poller.register(self._listener_fd)
        self._poller.register(self._wake_fd)

    def serve_forever(self) -> None:
        """Handle clients until :meth:`shutdown` is called."""
        try:
            while not self._stopping.is_set():
                ready = self._poller.wait()
                if self.backend in (Backend.EPOLL, Backend.EPOLL_ET):
                    print(f"{len(ready)} fds has changed..")
                for fd in ready:
                    if fd == self._listener_fd:
                        self._accept()
                    elif fd == self._wake_fd:
                        self._drain_wake()
                    elif fd in self._clients:
                        self._serve_client(fd)
        finally:
            self._close()

    def shutdown(self) -> None:
        """Ask :meth:`serve_forever` to stop."""
        self._stopping.set()
        try:
            self._wake_w.send(b"\0")
        except OSError:
            pass

    def __enter__(self) -> EchoServer:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.shutdown()
        self._close()

    def _drain_wake(self) -> None:
        while True:
            try:
                if not self._wake_r.recv(4096):
                    return
            except (BlockingIOError, InterruptedError):
                return

    def _accept(self) -> None:
        try:
            conn, address = self._listener.accept()
        except OSError:
            return
        if self.backend.edge_triggered:
            conn.setblocking(False)
        else:
            print(f"ip:{address[0]}, port:{address[1]}")
        self._clients[conn.fileno()] = conn
        self._poller.register(conn.fileno(), self.backend.edge_triggered)

    def _serve_client(self, fd: int) -> None:
        sock = self._clients[fd]
        if self.backend.edge_triggered:
            still_open = self._echo_edge(sock)
        else:
            still_open = self._echo_level(sock)
        if not still_open:
            print("client closed..")
            self._drop(fd)

    @staticmethod
    def _echo_level(sock: socket.socket) -> bool:
        try:
            data = sock.recv(BUFFER_SIZE)
        except ConnectionError:
            return False
        if not data:
            return False
        print(f"read data: {_cstr(data)}")
        try:
            sock.sendall(REPLY)
        except ConnectionError:
            return False
        return True

    @staticmethod
    def _echo_edge(sock: socket.socket) -> bool:
        while True:
            try:
                chunk = sock.recv(EDGE_CHUNK)
            except (BlockingIOError, InterruptedError):
                return True
            except ConnectionError:
                return False
            if not chunk:
                return False
            padded = chunk.ljust(EDGE_CHUNK, b"\0")
            print(f"recv data {_cstr(padded)}")
            try:
                sock.sendall(padded)
            except ConnectionError:
                return False

    def _drop(self, fd: int) -> None:
        sock = self._clients.pop(fd)
        self._poller.unregister(fd)
        sock.close()

    def _close(self) -> None:
        with self._close_lock:
            if self._closed:
                return
            self._closed = True
        for fd in list(self._clients):
            self._drop(fd)
        self._poller.close()
        self._listener.close()
        self._wake_r.close()
        self._wake_w.close()


def reply_client(host: str = "127.0.0.1", port: int = PORT, count: int | None = None) -> list[str]:
    """Send a fixed message once a second and return the replies."""
    replies: list[str] = []
    with socket.create_connection((host, port)) as sock:
        for i in _counter(count):
            if i:
                time.sleep(1)
            sock.sendall(CLIENT_MESSAGE)
            data = sock.recv(BUFFER_SIZE)
            if not data:
                print("client closed...")
                break
            text = _cstr(data)
            print(f"recv server data : {text}")
            replies.append(text)
    return replies


def stdin_client(
    host: str = "127.0.0.1", port: int = PORT, lines: Iterable[str] | None = None
) -> list[str]:
    """Send each line (standard input by default) and return the replies."""
    source = sys.stdin if lines is None else lines
    replies: list[str] = []
    with socket.create_connection((host, port)) as sock:
        for index, line in enumerate(source):
            payload = line.encode()
            if not payload:
                continue
            if index:
                time.sleep(1)
            sock.sendall(payload)
            data = sock.recv(BUFFER_SIZE)
            if not data:
                print("client closed...")
                break
            text = _cstr(data)
            print(f"recv server data : {text}")
            replies.append(text)
    return replies


def main(argv: Sequence[str] | None = None) -> int:
    """Run a multiplexing echo server or one of its clients."""
    parser = argparse.ArgumentParser(prog="multiplex", description="multiplexing echo server")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("server", help="run the echo server")
    p.add_argument("--backend", choices=[b.value for b in Backend], default=Backend.SELECT.value)
    p.add_argument("--host", default="0.0.0.0")
    p.add_argument("--port", type=int, default=PORT)

    p = sub.add_parser("client", help="send a fixed message every second")
    p.add_argument("--host", default="127.0.0.1")
    p.add_argument("--port", type=int, default=PORT)
    p.add_argument("--count", type=int)

    p = sub.add_parser("stdin-client", help="send lines read from standard input")
    p.add_argument("--host", default="127.0.0.1")
    p.add_argument("--port", type=int, default=PORT)

    args = parser.parse_args(argv)
    try:
        if args.command == "server":
            server = EchoServer(args.host, args.port, args.backend)
            try:
                server.serve_forever()
            except KeyboardInterrupt:
                server.shutdown()
        elif args.command == "client":
            reply_client(args.host, args.port, args.count)
        else:
            stdin_client(args.host, args.port)
    except ValueError as exc:
        print(f"{args.command}: {exc}", file=sys.stderr)
        return 1
    except OSError as exc:
        print(f"{args.command}: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())