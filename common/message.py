"""IPKCP wire format helpers.

TCP messages are UTF-8 text terminated by a newline:
  <text>\\n

UDP messages use a binary envelope:
  request:  [1-byte opcode=0x00][1-byte length][payload]
  response: [1-byte opcode=0x01][1-byte status][1-byte length][payload]

Lengths are unsigned single bytes, so a payload holds at most 255 bytes.
"""

import logging

from common.protocol import LINE_TERMINATOR, MAX_PAYLOAD_LENGTH, Opcode, Status

logger = logging.getLogger(__name__)

TEXT_ENCODING = "utf-8"

REQUEST_HEADER_SIZE = 2  # opcode + length
RESPONSE_HEADER_SIZE = 3  # opcode + status + length


def encode_line(payload: bytes) -> bytes:
    """Terminate a payload with the line terminator."""
    return payload + LINE_TERMINATOR


def strip_line(data: bytes) -> bytes:
    """Remove one trailing line terminator, if present."""
    if data.endswith(LINE_TERMINATOR):
        return data[: -len(LINE_TERMINATOR)]
    return data


def encode_request(payload: bytes) -> bytes | None:
    """Encode a datagram request. Returns None if the payload is too long."""
    if len(payload) > MAX_PAYLOAD_LENGTH:
        return None
    return bytes([Opcode.REQUEST, len(payload)]) + payload


def encode_response(status: Status, payload: bytes) -> bytes:
    """Encode a datagram response (used by test peers)."""
    return bytes([Opcode.RESPONSE, status, len(payload)]) + payload


def decode_request(data: bytes) -> bytes | None:
    """Decode a datagram request. Returns payload or None if malformed."""
    if len(data) < REQUEST_HEADER_SIZE or data[0] != Opcode.REQUEST:
        return None
    length = data[1]
    payload = data[REQUEST_HEADER_SIZE : REQUEST_HEADER_SIZE + length]
    if len(payload) < length:
        return None
    return payload


def decode_response(data: bytes) -> tuple[Status, bytes] | None:
    """Decode a datagram response.

    Returns (status, payload) or None if the datagram is too short, has
    the wrong opcode, an unknown status or a length beyond its end.
    Trailing bytes past the declared length are ignored.
    """
    if len(data) < RESPONSE_HEADER_SIZE:
        return None
    if data[0] != Opcode.RESPONSE:
        logger.debug(f"Unexpected opcode 0x{data[0]:02x} in response")
        return None
    try:
        status = Status(data[1])
    except ValueError:
        logger.debug(f"Unknown status 0x{data[1]:02x} in response")
        return None

    length = data[2]
    payload = data[RESPONSE_HEADER_SIZE : RESPONSE_HEADER_SIZE + length]
    if len(payload) < length:
        return None
    if len(data) > RESPONSE_HEADER_SIZE + length:
        logger.debug(f"Ignoring {len(data) - RESPONSE_HEADER_SIZE - length} trailing bytes")
    return status, payload
