"""Client package for ipkcp-client.

Contains client-side shutdown and the driving loop:
- shutdown: graceful_shutdown

Note: run_client, drive_session and ExitCode are not exported here to avoid
circular imports with session/. Import directly from client.runner when needed.
"""

from client.shutdown import graceful_shutdown

__all__ = [
    "graceful_shutdown",
]
