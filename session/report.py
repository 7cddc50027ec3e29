"""Session reporting for ipkcp-client.

Contains:
- SessionReport: Final report after the driving loop ends
"""

import sys
from dataclasses import dataclass, field
from typing import TextIO

from common.report import Report
from session.machine import SessionState

ERROR_MARKER = "!ERR!"


@dataclass
class SessionReport(Report):
    """Report on the terminal state of a session.

    A clean DOWN prints nothing (the disconnect status was already shown).
    Any other state prints the stored cause prefixed with the error marker.
    """

    state: SessionState
    error_msg: str = ""
    stream: TextIO = field(default_factory=lambda: sys.stderr)

    def print(self) -> None:
        """Print the error line, if any."""
        if self.success():
            return
        cause = self.error_msg or f"Session ended in state {self.state.name}"
        print(f"{ERROR_MARKER} {cause}", file=self.stream)

    def success(self) -> bool:
        """Return True if the session shut down cleanly."""
        return self.state is SessionState.DOWN
