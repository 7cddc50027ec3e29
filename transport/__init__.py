"""Transport package for ipkcp-client.

Contains the two Transport implementations:
- stream: StreamTransport (TCP, terminator-delimited messages)
- datagram: DatagramTransport (UDP, one datagram per message)
"""

from common.protocol import LINE_TERMINATOR, Transport, TransportKind
from transport.datagram import DatagramTransport
from transport.stream import StreamTransport


def create_transport(kind: TransportKind, terminator: bytes | None = LINE_TERMINATOR) -> Transport:
    """Create an unopened transport for the given kind."""
    if kind is TransportKind.STREAM:
        return StreamTransport(terminator or LINE_TERMINATOR)
    return DatagramTransport()


__all__ = [
    "DatagramTransport",
    "StreamTransport",
    "create_transport",
]
