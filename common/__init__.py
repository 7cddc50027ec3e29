"""Common modules for ipkcp-client.

This package contains code shared by the transports, the session and the client:
- protocol: TransportKind/Framing/Opcode/Status enums, Transport Protocol, constants
- connection: Target dataclass, configuration and connect errors
- message: IPKCP wire format helpers
- encoding: Message codecs and transport errors
- report: Reporting abstractions
"""

from common.connection import ConfigurationError, ConnectError, Target
from common.encoding import (
    BinaryCodec,
    Codec,
    EncodingError,
    PlainCodec,
    TextCodec,
    TransportError,
    codec_for,
)
from common.protocol import (
    BYE_WAIT_TIMEOUT_S,
    MAX_PAYLOAD_LENGTH,
    Framing,
    Opcode,
    Status,
    Transport,
    TransportKind,
)

__all__ = [
    # Protocol
    "Framing",
    "Opcode",
    "Status",
    "Transport",
    "TransportKind",
    "BYE_WAIT_TIMEOUT_S",
    "MAX_PAYLOAD_LENGTH",
    # Connection
    "Target",
    # Codecs
    "Codec",
    "TextCodec",
    "BinaryCodec",
    "PlainCodec",
    "codec_for",
    # Exceptions
    "ConfigurationError",
    "ConnectError",
    "EncodingError",
    "TransportError",
]
