"""Connection parameters for ipkcp-client.

Contains:
- ConfigurationError: Exception for invalid target parameters
- ConnectError: Exception for failures while opening a transport
- Target: Host, port and transport kind of the server
"""

from dataclasses import dataclass

from common.protocol import MAX_PORT, MIN_PORT, TransportKind


class ConfigurationError(ValueError):
    """Raised when host, port or transport kind is invalid."""

    pass


class ConnectError(Exception):
    """Raised when a transport cannot be opened (resolution, refusal, local error)."""

    pass


@dataclass
class Target:
    """Server endpoint a session talks to."""

    host: str
    port: int
    kind: TransportKind

    @classmethod
    def parse(cls, host: object, port: object, kind: object) -> "Target":
        """Build a validated Target from loosely typed parameters.

        Raises ConfigurationError if any parameter is invalid.
        """
        if isinstance(kind, TransportKind):
            resolved_kind = kind
        elif isinstance(kind, str):
            try:
                resolved_kind = TransportKind.from_token(kind)
            except ValueError as e:
                raise ConfigurationError(str(e)) from e
        else:
            raise ConfigurationError(f"Invalid mode: {kind!r}")

        target = cls(host=host, port=port, kind=resolved_kind)  # type: ignore[arg-type]
        target.validate()
        return target

    def validate(self) -> None:
        """Check host and port. Raises ConfigurationError."""
        if not isinstance(self.host, str) or not self.host.strip():
            raise ConfigurationError("Host not specified")
        # bool is an int subclass but never a valid port
        if isinstance(self.port, bool) or not isinstance(self.port, int):
            raise ConfigurationError(f"Port must be an integer, got {self.port!r}")
        if not MIN_PORT <= self.port <= MAX_PORT:
            raise ConfigurationError(
                f"Port must be between {MIN_PORT} and {MAX_PORT}, got {self.port}"
            )

    def __str__(self) -> str:
        return f"{self.host}:{self.port} ({self.kind.value})"
