import socket
import threading
import time

import pytest

from posixlab.udp import broadcast_receiver, broadcast_sender, main, udp_client, udp_echo_server


def _free_udp_port():
    with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


def test_echo_server_replies():
    port = _free_udp_port()
    result = {}
    thread = threading.Thread(
        target=lambda: result.update(messages=udp_echo_server("127.0.0.1", port, 1)),
        daemon=True,
    )
    thread.start()
    reply = None
    with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
        sock.settimeout(0.2)
        for _ in range(50):
            sock.sendto(b"ping\0", ("127.0.0.1", port))
            try:
                reply, _ = sock.recvfrom(128)
                break
            except (socket.timeout, ConnectionRefusedError):
                continue
    thread.join(5)
    assert reply == b"ping\0"
    assert result["messages"] == ["ping"]


def test_client_sends_greeting_and_returns_reply():
    with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as peer:
        peer.bind(("127.0.0.1", 0))
        peer.settimeout(5)
        port = peer.getsockname()[1]
        received = {}

        def answer():
            data, address = peer.recvfrom(128)
            received["data"] = data
            peer.sendto(b"pong\0", address)

        thread = threading.Thread(target=answer, daemon=True)
        thread.start()
        replies = udp_client("127.0.0.1", port, 1)
        thread.join(5)
    assert replies == ["pong"]
    assert received["data"] == b"hello , i am client 0 \n\0"


def test_broadcast_sender_messages():
    with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as peer:
        peer.bind(("127.0.0.1", 0))
        peer.settimeout(5)
        port = peer.getsockname()[1]
        sent = broadcast_sender("127.0.0.1", port, 2, 0)
        first, _ = peer.recvfrom(128)
        second, _ = peer.recvfrom(128)
    assert sent == ["hello, client....0", "hello, client....1"]
    assert first == b"hello, client....0\0"
    assert second == sent[1].encode() + b"\0"


def test_broadcast_receiver_collects():
    port = _free_udp_port()
    done = threading.Event()

    def keep_sending():
        with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
            deadline = time.monotonic() + 5
            while not done.is_set() and time.monotonic() < deadline:
                try:
                    sock.sendto(b"news\0", ("127.0.0.1", port))
                except ConnectionRefusedError:
                    pass
                time.sleep(0.05)

    thread = threading.Thread(target=keep_sending, daemon=True)
    thread.start()
    try:
        received = broadcast_receiver("127.0.0.1", port, 1)
    finally:
        done.set()
        thread.join(1)
    assert received == ["news"]


def test_echo_server_port_in_use():
    with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as taken:
        taken.bind(("127.0.0.1", 0))
        port = taken.getsockname()[1]
        with pytest.raises(OSError):
            udp_echo_server("127.0.0.1", port, 1)


def test_main_reports_bind_failure():
    with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as taken:
        taken.bind(("127.0.0.1", 0))
        port = taken.getsockname()[1]
        assert main(["server", "--host", "127.0.0.1", "--port", str(port), "--count", "1"]) == 1