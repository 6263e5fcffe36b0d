"""TCP echo servers (single, forking, threaded) and matching clients."""

from __future__ import annotations

import argparse
import itertools
import os
import signal
import socket
import sys
import threading
import time
from collections.abc import Iterable, Sequence

BUFFER_SIZE = 1024
CLIENT_BUFFER_SIZE = 256


def _cstr(data: bytes) -> str:
    return data.split(b"\0", 1)[0].decode("utf-8", "replace")


def _listener(host: str, port: int, backlog: int) -> socket.socket:
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    try:
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        sock.bind((host, port))
        sock.listen(backlog)
    except OSError:
        sock.close()
        raise
    return sock


def _counter(count: int | None) -> Iterable[int]:
    return itertools.count() if count is None else range(count)


def serve_once(host: str = "192.168.206.130", port: int = 9999) -> bytes:
    """Accept one client, echo its first message back and return that message."""
    with _listener(host, port, 8) as listener:
        conn, address = listener.accept()
        with conn:
            print(f"client IP is : {address[0]}, port is :{address[1]}")
            data = conn.recv(BUFFER_SIZE)
            if data:
                print(f"receive data is :{_cstr(data)}")
            else:
                print("client closed..")
            reply = data.split(b"\0", 1)[0]
            if reply:
                conn.sendall(reply)
            return reply


def send_once(host: str = "192.168.206.130", port: int = 9999, message: str | bytes = b"") -> bytes:
    """Send one message and return the reply, empty when the server closed."""
    payload = message.encode() if isinstance(message, str) else message
    with socket.create_connection((host, port)) as sock:
        sock.sendall(payload)
        data = sock.recv(BUFFER_SIZE)
    if data:
        print(f"receive server data is :{_cstr(data)}")
    else:
        print("server closed..")
    return data


def handle_client(conn: socket.socket, address: tuple) -> int:
    """Echo NUL-terminated messages until the client closes; return their count."""
    print(f"client ip is: {address[0]}, port is {address[1]}")
    count = 0
    with conn:
        while True:
            data = conn.recv(BUFFER_SIZE)
            if not data:
                print("client closed..")
                break
            text = data.split(b"\0", 1)[0]
            print(f"receive {text.decode('utf-8', 'replace')}")
            conn.sendall(text + b"\0")
            count += 1
    return count


def _reap_children(signum: int = 0, frame: object = None) -> None:
    while True:
        try:
            pid, _ = os.waitpid(-1, os.WNOHANG)
        except ChildProcessError:
            return
        if pid == 0:
            return
        print(f"pid {pid} recyled")


def serve_forking(host: str = "0.0.0.0", port: int = 8888) -> None:
    """Serve each client in a child process; finished children are reaped."""
    handler_installed = threading.current_thread() is threading.main_thread()
    if handler_installed:
        signal.signal(signal.SIGCHLD, _reap_children)
    with _listener(host, port, 128) as listener:
        while True:
            conn, address = listener.accept()
            pid = os.fork()
            if pid == 0:
                listener.close()
                status = 0
                try:
                    handle_client(conn, address)
                except OSError as exc:
                    print(f"read: {exc.strerror}", file=sys.stderr)
                    status = 255
                finally:
                    os._exit(status)
            conn.close()
            if not handler_installed:
                _reap_children()


def serve_threaded(host: str = "0.0.0.0", port: int = 8888, max_clients: int = 128) -> None:
    """Serve each client in its own thread, at most ``max_clients`` at a time."""
    if max_clients <= 0:
        raise ValueError("max_clients must be positive")
    slots = threading.BoundedSemaphore(max_clients)

    def work(conn: socket.socket, address: tuple) -> None:
        try:
            handle_client(conn, address)
        finally:
            slots.release()

    with _listener(host, port, 128) as listener:
        while True:
            conn, address = listener.accept()
            slots.acquire()
            threading.Thread(target=work, args=(conn, address), daemon=True).start()


def client_loop(host: str = "127.0.0.1", port: int = 8888, count: int | None = None) -> list[str]:
    """Send numbered messages once a second and return the replies."""
    replies: list[str] = []
    with socket.create_connection((host, port)) as sock:
        for i in _counter(count):
            if i:
                time.sleep(1)
            sock.sendall(f"data : {i}\n".encode() + b"\0")
            data = sock.recv(CLIENT_BUFFER_SIZE)
            if not data:
                print("server closed..")
                break
            text = _cstr(data)
            print(f"receive server data is :{text}")
            replies.append(text)
    return replies


def main(argv: Sequence[str] | None = None) -> int:
    """Run one of the TCP servers or clients."""
    parser = argparse.ArgumentParser(prog="tcp", description="TCP echo servers and clients")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("server", help="echo one message from one client")
    p.add_argument("--host", default="192.168.206.130")
    p.add_argument("--port", type=int, default=9999)

    p = sub.add_parser("client", help="send one word and print the reply")
    p.add_argument("--host", default="192.168.206.130")
    p.add_argument("--port", type=int, default=9999)
    p.add_argument("message", nargs="?")

    p = sub.add_parser("fork-server", help="serve each client in a child process")
    p.add_argument("--host", default="0.0.0.0")
    p.add_argument("--port", type=int, default=8888)

    p = sub.add_parser("thread-server", help="serve each client in a thread")
    p.add_argument("--host", default="0.0.0.0")
    p.add_argument("--port", type=int, default=8888)
    p.add_argument("--max-clients", type=int, default=128)

    p = sub.add_parser("loop-client", help="send numbered messages every second")
    p.add_argument("--host", default="127.0.0.1")
    p.add_argument("--port", type=int, default=8888)
    p.add_argument("--count", type=int)

    args = parser.parse_args(argv)
    try:
        if args.command == "server":
            serve_once(args.host, args.port)
        elif args.command == "client":
            message = args.message
            if message is None:
                words = sys.stdin.readline().split()
                message = words[0] if words else ""
            send_once(args.host, args.port, message)
        elif args.command == "fork-server":
            serve_forking(args.host, args.port)
        elif args.command == "thread-server":
            serve_threaded(args.host, args.port, args.max_clients)
        else:
            client_loop(args.host, args.port, args.count)
    except OSError as exc:
        print(f"{args.command}: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())