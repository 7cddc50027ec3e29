"""pytest configuration and fixtures for ipkcp-client tests.

Provides:
- FakeTransport: Scripted in-memory transport for session unit tests
- TcpPeer / UdpPeer: Local test servers running in background threads
- ipkcp_tcp_reply / ipkcp_udp_reply: Minimal IPKCP server behaviour
- Markers for unit vs integration tests
"""

import socket
import threading
from collections.abc import Callable, Generator

import pytest

from common import message
from common.protocol import Status

PEER_TIMEOUT_S = 5.0


class FakeTransport:
    """In-memory transport for unit testing.

    Sent payloads are recorded in ``sent``. Each receive() pops the next
    scripted item from ``responses``: bytes are returned, exceptions are
    raised. An exhausted script behaves like a closed peer (b"").
    """

    def __init__(
        self,
        responses: list[bytes | Exception] | None = None,
        open_error: Exception | None = None,
        send_error: Exception | None = None,
    ) -> None:
        self.responses = list(responses or [])
        self.open_error = open_error
        self.send_error = send_error
        self.sent: list[bytes] = []
        self.receive_timeouts: list[float | None] = []
        self.opened_with: tuple[str, int] | None = None
        self.close_calls = 0

    def open(self, host: str, port: int) -> None:
        if self.open_error is not None:
            raise self.open_error
        self.opened_with = (host, port)

    def send(self, payload: bytes) -> int:
        if self.send_error is not None:
            raise self.send_error
        self.sent.append(payload)
        return len(payload)

    def receive(self, timeout: float | None = None) -> bytes:
        self.receive_timeouts.append(timeout)
        if not self.responses:
            return b""
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    def close(self) -> None:
        self.close_calls += 1


class TcpPeer:
    """Single-connection TCP server on 127.0.0.1.

    Each newline-terminated request is passed to ``handler``; a bytes
    reply is sent back, None closes the connection. ``greeting`` chunks
    are sent right after accept, before any request is read. The
    connection is closed after a BYE request has been answered.
    """

    def __init__(
        self,
        handler: Callable[[bytes], bytes | None] | None = None,
        greeting: list[bytes] | None = None,
        close_after_greeting: bool = False,
    ) -> None:
        self.handler = handler or (lambda line: line + b"\n")
        self.greeting = greeting or []
        self.close_after_greeting = close_after_greeting
        self.received: list[bytes] = []
        self._sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        self._sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        self._sock.bind(("127.0.0.1", 0))
        self._sock.listen(1)
        self._sock.settimeout(PEER_TIMEOUT_S)
        self.port = self._sock.getsockname()[1]
        self._thread = threading.Thread(target=self._serve, daemon=True)
        self._thread.start()

    def _serve(self) -> None:
        try:
            conn, _ = self._sock.accept()
        except OSError:
            return
        with conn:
            conn.settimeout(PEER_TIMEOUT_S)
            try:
                for chunk in self.greeting:
                    conn.sendall(chunk)
                if self.close_after_greeting:
                    return
                self._relay(conn)
            except OSError:
                return

    def _relay(self, conn: socket.socket) -> None:
        buffer = b""
        while True:
            chunk = conn.recv(4096)
            if not chunk:
                return
            buffer += chunk
            while b"\n" in buffer:
                line, buffer = buffer.split(b"\n", 1)
                self.received.append(line)
                reply = self.handler(line)
                if reply is None:
                    return
                conn.sendall(reply)
                if line == b"BYE":
                    return

    def close(self) -> None:
        self._sock.close()
        self._thread.join(timeout=PEER_TIMEOUT_S)


class UdpPeer:
    """UDP server on 127.0.0.1 answering each datagram with ``handler(data)``.

    A None reply means the datagram is dropped.
    """

    def __init__(self, handler: Callable[[bytes], bytes | None] | None = None) -> None:
        self.handler = handler or (lambda data: data)
        self.received: list[bytes] = []
        self._stop = threading.Event()
        self._sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        self._sock.bind(("127.0.0.1", 0))
        self._sock.settimeout(0.1)
        self.port = self._sock.getsockname()[1]
        self._thread = threading.Thread(target=self._serve, daemon=True)
        self._thread.start()

    def _serve(self) -> None:
        while not self._stop.is_set():
            try:
                data, sender = self._sock.recvfrom(65535)
            except TimeoutError:
                continue
            except OSError:
                return
            self.received.append(data)
            reply = self.handler(data)
            if reply is not None:
                self._sock.sendto(reply, sender)

    def close(self) -> None:
        self._stop.set()
        self._thread.join(timeout=PEER_TIMEOUT_S)
        self._sock.close()


def ipkcp_tcp_reply(line: bytes) -> bytes | None:
    """Answer like a minimal IPKCP TCP server (HELLO, SOLVE, BYE)."""
    if line == b"HELLO":
        return b"HELLO\n"
    if line == b"BYE":
        return b"BYE\n"
    if line.startswith(b"SOLVE "):
        return b"RESULT 3\n"
    # Malformed request: server says goodbye
    return b"BYE\n"


def ipkcp_udp_reply(data: bytes) -> bytes | None:
    """Answer IPKCP datagram requests: '(+ 1 2)' solves, anything else errors."""
    payload = message.decode_request(data)
    if payload is None:
        return message.encode_response(Status.ERROR, b"Invalid request")
    if payload == b"(+ 1 2)":
        return message.encode_response(Status.OK, b"3")
    return message.encode_response(Status.ERROR, b"Could not parse the message")


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: mark test as unit test")
    config.addinivalue_line("markers", "integration: mark test as integration test (uses local sockets)")


@pytest.fixture
def tcp_peer() -> Generator[Callable[..., TcpPeer], None, None]:
    """Factory for TcpPeer instances, closed after the test."""
    peers: list[TcpPeer] = []

    def factory(*args: object, **kwargs: object) -> TcpPeer:
        peer = TcpPeer(*args, **kwargs)  # type: ignore[arg-type]
        peers.append(peer)
        return peer

    yield factory
    for peer in peers:
        peer.close()


@pytest.fixture
def udp_peer() -> Generator[Callable[..., UdpPeer], None, None]:
    """Factory for UdpPeer instances, closed after the test."""
    peers: list[UdpPeer] = []

    def factory(*args: object, **kwargs: object) -> UdpPeer:
        peer = UdpPeer(*args, **kwargs)  # type: ignore[arg-type]
        peers.append(peer)
        return peer

    yield factory
    for peer in peers:
        peer.close()


@pytest.fixture
def closed_port() -> int:
    """Return a local TCP port with no listener."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


@pytest.fixture
def fake_transport_factory(monkeypatch: pytest.MonkeyPatch) -> Callable[..., FakeTransport]:
    """Make Session build a FakeTransport instead of a socket transport."""

    def install(*args: object, **kwargs: object) -> FakeTransport:
        fake = FakeTransport(*args, **kwargs)  # type: ignore[arg-type]
        monkeypatch.setattr("session.machine.create_transport", lambda kind, terminator=None: fake)
        return fake

    return install

