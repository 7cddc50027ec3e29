"""TCP transport for ipkcp-client."""

import logging
import socket

from common.connection import ConnectError
from common.encoding import TransportError
from common.protocol import LINE_TERMINATOR, RECV_CHUNK_SIZE, TRACE

logger = logging.getLogger(__name__)


class StreamTransport:
    """Connection-oriented byte stream with terminator-delimited messages.

    Bytes read past a terminator are kept for the next receive(), so a
    peer may send several messages in one segment or split one across many.
    """

    def __init__(self, terminator: bytes = LINE_TERMINATOR) -> None:
        if not terminator:
            raise ValueError("Stream transport needs a non-empty message terminator")
        self.terminator = terminator
        self._sock: socket.socket | None = None
        self._buffer = bytearray()
        self._peer = ""

    @property
    def is_open(self) -> bool:
        return self._sock is not None

    def open(self, host: str, port: int) -> None:
        """Resolve host and connect. Raises ConnectError."""
        try:
            addr_info = socket.getaddrinfo(host, port, type=socket.SOCK_STREAM)
        except socket.gaierror as e:
            raise ConnectError(f"Could not resolve host '{host}': {e.strerror}") from e
        except UnicodeError as e:
            # IDNA encoding rejects empty or over-long labels
            raise ConnectError(f"Could not resolve host '{host}': invalid hostname ({e})") from e

        last_error: OSError | None = None
        for family, sock_type, proto, _, address in addr_info:
            try:
                sock = socket.socket(family, sock_type, proto)
            except OSError as e:
                raise ConnectError(f"Could not create socket: {e}") from e
            try:
                sock.connect(address)
            except OSError as e:
                sock.close()
                last_error = e
                logger.debug(f"Connect to {address} failed: {e}")
                continue
            self._sock = sock
            self._peer = f"{host}:{port}"
            logger.info(f"Connected to {self._peer} ({address[0]})")
            return

        reason = last_error.strerror if last_error and last_error.strerror else last_error
        raise ConnectError(f"Could not connect to {host}:{port}: {reason}")

    def send(self, payload: bytes) -> int:
        """Write the whole payload. Returns bytes written, raises TransportError."""
        if self._sock is None:
            raise TransportError("Transport is not open")

        view = memoryview(payload)
        total = 0
        while total < len(payload):
            try:
                sent = self._sock.send(view[total:])
            except OSError as e:
                raise TransportError(f"Send to {self._peer} failed: {e}") from e
            if sent == 0:
                raise TransportError(f"Connection to {self._peer} broken")
            total += sent

        logger.log(TRACE, f"Sent {total} bytes: {payload!r}")
        return total

    def receive(self, timeout: float | None = None) -> bytes:
        """Read one terminated message, or b"" once the peer has closed.

        Raises TransportError on socket errors or when timeout expires.
        """
        if self._sock is None:
            raise TransportError("Transport is not open")

        self._sock.settimeout(timeout)
        try:
            while True:
                end = self._buffer.find(self.terminator)
                if end >= 0:
                    end += len(self.terminator)
                    msg = bytes(self._buffer[:end])
                    del self._buffer[:end]
                    logger.log(TRACE, f"Received {len(msg)} bytes: {msg!r}")
                    return msg

                chunk = self._sock.recv(RECV_CHUNK_SIZE)
                if not chunk:
                    if self._buffer:
                        logger.warning(
                            f"Peer closed with {len(self._buffer)} bytes of unterminated data"
                        )
                        self._buffer.clear()
                    logger.info(f"Connection closed by {self._peer}")
                    return b""
                self._buffer += chunk
        except TimeoutError as e:
            raise TransportError(f"Timeout ({timeout}s) waiting for {self._peer}") from e
        except OSError as e:
            raise TransportError(f"Receive from {self._peer} failed: {e}") from e
        finally:
            if self._sock is not None:
                self._sock.settimeout(None)

    def close(self) -> None:
        """Shut down and release the socket. Safe to call more than once."""
        if self._sock is None:
            return
        sock, self._sock = self._sock, None
        self._buffer.clear()
        try:
            sock.shutdown(socket.SHUT_RDWR)
        except OSError:
            # Already reset or never fully connected
            pass
        sock.close()
        logger.debug(f"Closed connection to {self._peer}")
