"""Client shutdown functions for ipkcp-client."""

import logging

from common.encoding import Codec, EncodingError, TransportError
from common.protocol import BYE_WAIT_TIMEOUT_S, Transport

logger = logging.getLogger(__name__)


def graceful_shutdown(
    transport: Transport, codec: Codec, timeout_s: float = BYE_WAIT_TIMEOUT_S
) -> str:
    """Client initiates clean shutdown.

    Sends the codec's termination notice and waits for the server's
    acknowledgement. Returns the acknowledgement text, or "" if the
    protocol has no termination exchange or the server did not answer.
    Never raises; the caller closes the transport afterwards.
    """
    notice = codec.termination_notice
    if notice is None:
        logger.debug("Client: no termination exchange for this transport")
        return ""

    logger.info(f"Client: initiating shutdown ({notice})")
    try:
        transport.send(codec.encode(notice))
    except (TransportError, EncodingError) as e:
        logger.warning(f"Client: could not send {notice}, closing anyway ({e})")
        return ""

    try:
        data = transport.receive(timeout=timeout_s)
        if not data:
            logger.info("Client: server closed without acknowledging, closing anyway")
            return ""
        ack = codec.decode(data)
    except (TransportError, EncodingError) as e:
        logger.warning(f"Client: no acknowledgement for {notice}, closing anyway ({e})")
        return ""

    if codec.is_termination_ack(ack):
        logger.info("Client: termination acknowledged, shutdown complete")
    else:
        logger.warning(f"Client: unexpected reply to {notice}: {ack!r}")
    return ack
