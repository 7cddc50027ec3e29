"""UDP transport for ipkcp-client."""

import logging
import socket

from common.connection import ConnectError
from common.encoding import TransportError
from common.protocol import MAX_DATAGRAM_SIZE, TRACE

logger = logging.getLogger(__name__)


class DatagramTransport:
    """Connectionless transport where one datagram is one message.

    open() only resolves the server and binds a local ephemeral port; an
    unreachable server is not detected until a receive never completes.
    """

    def __init__(self) -> None:
        self._sock: socket.socket | None = None
        self._remote: tuple | None = None
        self._peer = ""

    @property
    def is_open(self) -> bool:
        return self._sock is not None

    def open(self, host: str, port: int) -> None:
        """Resolve host and bind a local socket. Raises ConnectError."""
        try:
            addr_info = socket.getaddrinfo(host, port, type=socket.SOCK_DGRAM)
        except socket.gaierror as e:
            raise ConnectError(f"Could not resolve host '{host}': {e.strerror}") from e
        except UnicodeError as e:
            # IDNA encoding rejects empty or over-long labels
            raise ConnectError(f"Could not resolve host '{host}': invalid hostname ({e})") from e

        family, sock_type, proto, _, address = addr_info[0]
        local = ("::", 0) if family == socket.AF_INET6 else ("0.0.0.0", 0)
        try:
            sock = socket.socket(family, sock_type, proto)
        except OSError as e:
            raise ConnectError(f"Could not create socket: {e}") from e
        try:
            sock.bind(local)
        except OSError as e:
            sock.close()
            raise ConnectError(f"Could not bind local socket: {e}") from e

        self._sock = sock
        self._remote = address
        self._peer = f"{host}:{port}"
        logger.info(f"Bound {sock.getsockname()[:2]} for {self._peer} ({address[0]})")

    def send(self, payload: bytes) -> int:
        """Send payload as a single datagram. Raises TransportError."""
        if self._sock is None or self._remote is None:
            raise TransportError("Transport is not open")
        try:
            sent = self._sock.sendto(payload, self._remote)
        except OSError as e:
            raise TransportError(f"Send to {self._peer} failed: {e}") from e
        if sent != len(payload):
            raise TransportError(f"Datagram truncated: sent {sent} of {len(payload)} bytes")

        logger.log(TRACE, f"Sent datagram ({sent} bytes): {payload!r}")
        return sent

    def receive(self, timeout: float | None = None) -> bytes:
        """Receive exactly one datagram. Raises TransportError."""
        if self._sock is None:
            raise TransportError("Transport is not open")

        self._sock.settimeout(timeout)
        try:
            data, sender = self._sock.recvfrom(MAX_DATAGRAM_SIZE)
        except TimeoutError as e:
            raise TransportError(f"Timeout ({timeout}s) waiting for {self._peer}") from e
        except OSError as e:
            raise TransportError(f"Receive from {self._peer} failed: {e}") from e
        finally:
            if self._sock is not None:
                self._sock.settimeout(None)

        if self._remote is not None and sender[:2] != self._remote[:2]:
            logger.debug(f"Datagram from unexpected sender {sender[:2]}")
        logger.log(TRACE, f"Received datagram ({len(data)} bytes): {data!r}")
        return data

    def close(self) -> None:
        """Release the socket. Safe to call more than once."""
        if self._sock is None:
            return
        sock, self._sock = self._sock, None
        sock.close()
        logger.debug(f"Closed datagram socket for {self._peer}")
