"""Client runner for ipkcp-client.

Contains drive_session(), the stdin-to-server relay loop, and run_client()
which connects a session, drives it and maps the outcome to an exit code.
"""

import logging
import sys
import threading
from collections.abc import Iterator
from enum import IntEnum
from typing import Protocol, TextIO

from common.protocol import Framing, TransportKind
from session.machine import Session, SessionState
from session.report import SessionReport

logger = logging.getLogger(__name__)


class ExitCode(IntEnum):
    """Exit codes for client operations."""

    SUCCESS = 0  # Session reached DOWN
    FAILURE = 1  # Invalid parameters, connect failure or session error


class ClientSession(Protocol):
    """Protocol for the session operations used by the driving loop."""

    @property
    def state(self) -> SessionState: ...
    def send(self, text: str) -> int: ...
    def receive(self) -> str: ...
    def disconnect(self) -> str: ...


def read_lines(stream: TextIO) -> Iterator[str]:
    """Yield lines from stream without their line endings, until end-of-input."""
    for line in iter(stream.readline, ""):
        yield line.rstrip("\r\n")


def drive_session(
    session: ClientSession,
    lines: Iterator[str],
    interrupted: threading.Event,
    out: TextIO | None = None,
) -> None:
    """Relay lines to the server until input ends, the peer leaves or an error occurs.

    The interrupt flag is checked before each request, never during a
    blocking receive.
    """
    out = out if out is not None else sys.stdout

    while session.state is SessionState.UP:
        line = next(lines, None)

        if line is None or interrupted.is_set():
            reason = "interrupt" if interrupted.is_set() else "end of input"
            logger.info(f"Disconnecting ({reason})")
            status = session.disconnect()
            if status:
                print(status, file=out, flush=True)
            break

        if not line:
            continue

        if session.send(line) < 0:
            break

        response = session.receive()
        if not response:
            if session.state is SessionState.UP:
                logger.info("Server ended the session")
                status = session.disconnect()
                if status:
                    print(status, file=out, flush=True)
            break

        print(response, file=out, flush=True)


def run_client(
    host: str,
    port: int,
    kind: TransportKind | str,
    interrupted: threading.Event,
    framing: Framing = Framing.IPKCP,
    stdin: TextIO | None = None,
    stdout: TextIO | None = None,
    stderr: TextIO | None = None,
) -> int:
    """Run client: connect + relay loop + final report. Returns exit code."""
    stdin = stdin if stdin is not None else sys.stdin
    stderr = stderr if stderr is not None else sys.stderr

    session = Session(host, port, kind, framing=framing)
    if session.state is SessionState.ERRORED:
        SessionReport(session.state, session.error_msg, stream=stderr).print()
        return ExitCode.FAILURE

    logger.info(f"Client: connecting to {session.target}...")
    if not session.connect() or session.state is not SessionState.UP:
        SessionReport(session.state, session.error_msg, stream=stderr).print()
        return ExitCode.FAILURE

    drive_session(session, read_lines(stdin), interrupted, out=stdout)

    report = SessionReport(session.state, session.error_msg, stream=stderr)
    report.print()
    return ExitCode.SUCCESS if report.success() else ExitCode.FAILURE
