"""Session package for ipkcp-client.

This package holds the client's connection lifecycle:
- INITIAL -> UP -> DOWN state machine, ERRORED from any state
- Request/response exchange over the selected transport
- Graceful termination via the protocol's BYE exchange
- Final status reporting
"""

from session.machine import Session, SessionState
from session.report import SessionReport

__all__ = [
    "Session",
    "SessionReport",
    "SessionState",
]
