"""Session state machine for ipkcp-client.

Contains:
- SessionState: INITIAL -> UP -> DOWN, or ERRORED from any state
- Session: Owns a transport and maps lines of text onto request/response exchanges
"""

import logging
from enum import Enum

from client.shutdown import graceful_shutdown
from common.connection import ConfigurationError, ConnectError, Target
from common.encoding import EncodingError, TransportError, codec_for
from common.protocol import BYE_WAIT_TIMEOUT_S, Framing, Transport, TransportKind
from transport import create_transport

logger = logging.getLogger(__name__)


class SessionState(Enum):
    """Lifecycle state of a session."""

    INITIAL = "initial"  # Constructed, transport not open
    UP = "up"  # Transport open, exchanging messages
    DOWN = "down"  # Clean shutdown (terminal)
    ERRORED = "errored"  # Abnormal shutdown (terminal)


class Session:
    """Client session with one IPKCP server.

    Failures never raise out of the public methods. They move the session
    to ERRORED and store a human-readable cause in error_msg. The
    transport is released exactly once, when the session leaves UP (or
    when connect() fails).

    Calling send() or receive() outside UP is a caller bug; it is logged
    and answered with -1 / "" without touching the state.
    """

    def __init__(
        self,
        host: str,
        port: int,
        kind: TransportKind | str,
        framing: Framing = Framing.IPKCP,
        bye_timeout_s: float = BYE_WAIT_TIMEOUT_S,
    ) -> None:
        self.host = host
        self.port = port
        self.error_msg = ""
        self.bye_timeout_s = bye_timeout_s
        self._state = SessionState.INITIAL
        self._transport: Transport | None = None
        self.target: Target | None = None
        self.kind: TransportKind | None = None

        try:
            self.target = Target.parse(host, port, kind)
        except ConfigurationError as e:
            self._fail(str(e))
            return

        self.kind = self.target.kind
        self.codec = codec_for(self.kind, framing)
        self._transport = create_transport(self.kind, self.codec.terminator)

    @property
    def state(self) -> SessionState:
        return self._state

    def connect(self) -> bool:
        """Open the transport. Returns True if the session is UP."""
        if self._state is not SessionState.INITIAL:
            logger.warning(f"connect() called in state {self._state.name}, ignoring")
            return False
        assert self._transport is not None and self.target is not None

        try:
            self._transport.open(self.target.host, self.target.port)
        except ConnectError as e:
            self._fail(str(e))
            return False

        self._state = SessionState.UP
        logger.info(f"Session up with {self.target}")
        return True

    def send(self, text: str) -> int:
        """Send one line as one message. Returns bytes sent, or -1 on failure."""
        if self._state is not SessionState.UP:
            logger.warning(f"send() called in state {self._state.name}, ignoring")
            return -1
        assert self._transport is not None

        try:
            return self._transport.send(self.codec.encode(text))
        except EncodingError as e:
            self._fail(f"Cannot encode message: {e}")
        except TransportError as e:
            self._fail(str(e))
        return -1

    def receive(self) -> str:
        """Receive one response.

        Returns "" if the peer closed the session; the caller should then
        call disconnect(). A termination confirmation from the server moves
        the session to DOWN and is still returned for display.
        """
        if self._state is not SessionState.UP:
            logger.warning(f"receive() called in state {self._state.name}, ignoring")
            return ""
        assert self._transport is not None

        try:
            data = self._transport.receive()
        except TransportError as e:
            self._fail(str(e))
            return ""

        if not data:
            logger.info("Peer terminated the session")
            return ""

        try:
            text = self.codec.decode(data)
        except EncodingError as e:
            self._fail(f"Malformed response: {e}")
            return ""

        if self.codec.is_termination_ack(text):
            logger.info("Server confirmed termination")
            self._finish(SessionState.DOWN)
        return text

    def disconnect(self) -> str:
        """Terminate the session gracefully. Returns a status line for display."""
        match self._state:
            case SessionState.DOWN | SessionState.ERRORED:
                logger.debug(f"disconnect() in terminal state {self._state.name}, nothing to do")
                return ""
            case SessionState.INITIAL:
                self._finish(SessionState.DOWN)
                return ""

        assert self._transport is not None
        status = graceful_shutdown(self._transport, self.codec, timeout_s=self.bye_timeout_s)
        self._finish(SessionState.DOWN)
        return status

    def _fail(self, reason: str) -> None:
        logger.error(f"Session error: {reason}")
        self.error_msg = reason
        self._finish(SessionState.ERRORED)

    def _finish(self, state: SessionState) -> None:
        transport, self._transport = self._transport, None
        if transport is not None:
            transport.close()
        self._state = state
        logger.debug(f"Session {state.name}")
