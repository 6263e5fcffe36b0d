"""UDP echo server and client, and a broadcast sender and receiver."""

from __future__ import annotations

import argparse
import itertools
import socket
import sys
import time
from collections.abc import Iterable, Sequence

BUFFER_SIZE = 128
BROADCAST_ADDRESS = "192.168.206.255"
PORT = 6789


def _counter(count: int | None) -> Iterable[int]:
    return itertools.count() if count is None else range(count)


def _cstr(data: bytes) -> str:
    return data.split(b"\0", 1)[0].decode("utf-8", "replace")


def udp_echo_server(host: str = "127.0.0.1", port: int = PORT, max_messages: int | None = None) -> list[str]:
    """Echo datagrams back to their senders; return the messages received."""
    messages: list[str] = []
    with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
        sock.bind((host, port))
        for _ in _counter(max_messages):
            data, address = sock.recvfrom(BUFFER_SIZE)
            print(f"client IP : {address[0]}, Port : {address[1]}")
            text = data.split(b"\0", 1)[0]
            decoded = text.decode("utf-8", "replace")
            print(f"client say : {decoded}")
            sock.sendto(text + b"\0", address)
            messages.append(decoded)
    return messages


def udp_client(host: str = "127.0.0.1", port: int = PORT, count: int | None = None) -> list[str]:
    """Send numbered greetings once a second; return the replies."""
    replies: list[str] = []
    with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
        for num in _counter(count):
            if num:
                time.sleep(1)
            message = f"hello , i am client {num} \n".encode() + b"\0"
            sock.sendto(message, (host, port))
            data, _ = sock.recvfrom(BUFFER_SIZE)
            text = _cstr(data)
            print(f"server say : {text}")
            replies.append(text)
    return replies


def broadcast_sender(
    address: str = BROADCAST_ADDRESS,
    port: int = PORT,
    count: int | None = None,
    interval: float = 1.0,
) -> list[str]:
    """Broadcast numbered messages every ``interval`` seconds; return them."""
    sent: list[str] = []
    with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_BROADCAST, 1)
        for num in _counter(count):
            if num and interval > 0:
                time.sleep(interval)
            message = f"hello, client....{num}"
            sock.sendto(message.encode() + b"\0", (address, port))
            print(f"广播的数据：{message}")
            sent.append(message)
    return sent


def broadcast_receiver(address: str = BROADCAST_ADDRESS, port: int = PORT, count: int | None = None) -> list[str]:
    """Receive datagrams sent to ``address``; return their text."""
    received: list[str] = []
    with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
        sock.bind((address, port))
        for _ in _counter(count):
            data, _ = sock.recvfrom(BUFFER_SIZE)
            text = _cstr(data)
            print(f"server say : {text}")
            received.append(text)
    return received


def main(argv: Sequence[str] | None = None) -> int:
    """Run one of the UDP programs."""
    parser = argparse.ArgumentParser(prog="udp", description="UDP echo and broadcast")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("server", help="echo datagrams")
    p.add_argument("--host", default="127.0.0.1")
    p.add_argument("--port", type=int, default=PORT)
    p.add_argument("--count", type=int)

    p = sub.add_parser("client", help="send greetings and print replies")
    p.add_argument("--host", default="127.0.0.1")
    p.add_argument("--port", type=int, default=PORT)
    p.add_argument("--count", type=int)

    p = sub.add_parser("broadcast", help="broadcast numbered messages")
    p.add_argument("--address", default=BROADCAST_ADDRESS)
    p.add_argument("--port", type=int, default=PORT)
    p.add_argument("--count", type=int)
    p.add_argument("--interval", type=float, default=1.0)

    p = sub.add_parser("listen", help="receive broadcast messages")
    p.add_argument("--address", default=BROADCAST_ADDRESS)
    p.add_argument("--port", type=int, default=PORT)
    p.add_argument("--count", type=int)

    args = parser.parse_args(argv)
    try:
        if args.command == "server":
            udp_echo_server(args.host, args.port, args.count)
        elif args.command == "client":
            udp_client(args.host, args.port, args.count)
        elif args.command == "broadcast":
            broadcast_sender(args.address, args.port, args.count, args.interval)
        else:
            broadcast_receiver(args.address, args.port, args.count)
    except OSError as exc:
        print(f"bind: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())