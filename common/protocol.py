"""Protocol definitions for ipkcp-client.

Contains:
- TransportKind, Framing enums selecting the transport and its wire format
- Opcode, Status enums for the IPKCP binary (UDP) envelope
- Transport Protocol for type checking
- Buffer sizes and timing constants
- Logging configuration
"""

import logging
import os
from enum import Enum, IntEnum
from typing import Protocol

# TRACE logging level (below DEBUG)
TRACE = 5
logging.addLevelName(TRACE, "TRACE")

# Wait this long for the server to acknowledge BYE (configurable via envvar)
BYE_WAIT_TIMEOUT_S = float(os.environ.get("IPKCP_BYE_TIMEOUT", "5.0"))


class TransportKind(Enum):
    """Connection-oriented byte stream or connectionless datagrams."""

    STREAM = "stream"
    DATAGRAM = "datagram"

    @classmethod
    def from_token(cls, token: str) -> "TransportKind":
        """Map a user-facing token (tcp/udp or stream/datagram) to a kind."""
        match token.lower():
            case "tcp" | "stream":
                return cls.STREAM
            case "udp" | "datagram":
                return cls.DATAGRAM
            case _:
                raise ValueError(f"Invalid mode '{token}', expected tcp or udp")


class Framing(Enum):
    """Wire format used for datagram messages."""

    IPKCP = "ipkcp"  # Binary opcode/status/length envelope
    PLAIN = "plain"  # Datagram payload is the raw line


class Opcode(IntEnum):
    """First byte of an IPKCP datagram."""

    REQUEST = 0x00
    RESPONSE = 0x01


class Status(IntEnum):
    """Status byte of an IPKCP datagram response."""

    OK = 0x00
    ERROR = 0x01


class Transport(Protocol):
    """Protocol for the socket operations needed by a session."""

    def open(self, host: str, port: int) -> None: ...
    def send(self, payload: bytes) -> int: ...
    def receive(self, timeout: float | None = None) -> bytes: ...
    def close(self) -> None: ...


# Port range accepted for the target
MIN_PORT = 1
MAX_PORT = 65535

# Stream read size and datagram receive buffer
RECV_CHUNK_SIZE = 4096
MAX_DATAGRAM_SIZE = 65535

# IPKCP limits
MAX_PAYLOAD_LENGTH = 255  # Length field is a single byte
LINE_TERMINATOR = b"\n"
BYE = "BYE"
