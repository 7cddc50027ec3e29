"""Message codecs for ipkcp-client.

A codec maps one line of user text to one wire message and one wire
message back to display text:
- TextCodec: newline-terminated text (TCP)
- BinaryCodec: IPKCP opcode/status/length envelope (UDP)
- PlainCodec: raw datagram payload (UDP, plain framing)
"""

from typing import Protocol

from common import message
from common.protocol import BYE, LINE_TERMINATOR, MAX_PAYLOAD_LENGTH, Framing, Status, TransportKind


class EncodingError(Exception):
    """Raised when a message cannot be encoded or a response is malformed."""

    pass


class TransportError(Exception):
    """Raised when a send or receive fails at the socket level (reset, broken pipe, timeout)."""

    pass


def _encode_text(text: str) -> bytes:
    # Undecodable stdin bytes arrive as surrogate escapes and go out unchanged
    try:
        return text.encode(message.TEXT_ENCODING, errors="surrogateescape")
    except UnicodeEncodeError as e:
        raise EncodingError(f"Cannot encode message: {e.reason}") from e


class Codec(Protocol):
    """Protocol for message codecs used by a session."""

    # Message boundary on a byte stream (None for datagrams)
    terminator: bytes | None
    # Message sent to request graceful termination (None if the protocol has none)
    termination_notice: str | None

    def encode(self, text: str) -> bytes: ...
    def decode(self, data: bytes) -> str: ...
    def is_termination_ack(self, text: str) -> bool: ...


class TextCodec:
    """Newline-terminated UTF-8 text, the IPKCP TCP format."""

    terminator: bytes | None = LINE_TERMINATOR
    termination_notice: str | None = BYE

    def encode(self, text: str) -> bytes:
        if "\n" in text:
            raise EncodingError("Message must not contain a line terminator")
        return message.encode_line(_encode_text(text))

    def decode(self, data: bytes) -> str:
        return message.strip_line(data).decode(message.TEXT_ENCODING, errors="replace")

    def is_termination_ack(self, text: str) -> bool:
        return text.strip() == BYE


class BinaryCodec:
    """IPKCP UDP envelope. Responses decode to ``OK:<payload>`` or ``ERR:<payload>``."""

    terminator: bytes | None = None
    termination_notice: str | None = None

    def encode(self, text: str) -> bytes:
        payload = _encode_text(text)
        encoded = message.encode_request(payload)
        if encoded is None:
            raise EncodingError(
                f"Message too long: {len(payload)} bytes, max {MAX_PAYLOAD_LENGTH}"
            )
        return encoded

    def decode(self, data: bytes) -> str:
        decoded = message.decode_response(data)
        if decoded is None:
            raise EncodingError(f"Malformed response datagram ({len(data)} bytes)")
        status, payload = decoded
        label = "OK" if status == Status.OK else "ERR"
        return f"{label}:{payload.decode(message.TEXT_ENCODING, errors='replace')}"

    def is_termination_ack(self, text: str) -> bool:
        return False


class PlainCodec:
    """Raw UTF-8 datagrams with no envelope."""

    terminator: bytes | None = None
    termination_notice: str | None = None

    def encode(self, text: str) -> bytes:
        return _encode_text(text)

    def decode(self, data: bytes) -> str:
        return data.decode(message.TEXT_ENCODING, errors="replace")

    def is_termination_ack(self, text: str) -> bool:
        return False


def codec_for(kind: TransportKind, framing: Framing = Framing.IPKCP) -> Codec:
    """Select the codec for a transport kind.

    Streams always carry newline-terminated text; framing only applies to datagrams.
    """
    if kind is TransportKind.STREAM:
        return TextCodec()
    if framing is Framing.PLAIN:
        return PlainCodec()
    return BinaryCodec()
