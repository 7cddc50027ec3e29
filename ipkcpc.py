#!/usr/bin/env python3
"""IPKCP client: relay stdin lines to an IPKCP server over TCP or UDP."""

import argparse
import logging
import signal
import sys
import threading
from types import FrameType

from client.runner import ExitCode, run_client
from common.connection import ConfigurationError, Target
from common.protocol import TRACE, Framing
from session.report import ERROR_MARKER

logger = logging.getLogger(__name__)

USAGE = "ipkcpc -h <host> -p <port> -m <mode>"


def configure_logging(verbosity: int) -> None:
    """Log to stderr so stdout only carries server responses."""
    levels = [logging.WARNING, logging.INFO, logging.DEBUG, TRACE]
    logging.basicConfig(
        level=levels[min(verbosity, len(levels) - 1)],
        format="[%(asctime)s] [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )


def build_arg_parser() -> argparse.ArgumentParser:
    # -h is the host; help is --help only
    parser = argparse.ArgumentParser(
        description="IPKCP client",
        usage=USAGE,
        add_help=False,
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s -h 127.0.0.1 -p 2023 -m tcp      Talk to a TCP server
  %(prog)s -h localhost -p 2023 -m udp      Talk to a UDP server
  %(prog)s -h ::1 -p 7 -m udp -f plain      Talk to a plain UDP echo peer
""",
    )
    parser.add_argument("--help", action="help", help="Show this help message and exit")
    parser.add_argument("-h", "--host", type=str, default="", help="Server hostname or address")
    parser.add_argument("-p", "--port", type=int, default=None, help="Server port (1-65535)")
    parser.add_argument("-m", "--mode", type=str, default="", help="Transport mode: tcp or udp")
    parser.add_argument(
        "-f",
        "--framing",
        type=str,
        choices=[f.value for f in Framing],
        default=Framing.IPKCP.value,
        help="UDP message format (default: ipkcp)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase log verbosity on stderr (-v info, -vv debug, -vvv trace)",
    )
    return parser


def _fail(message: str) -> int:
    print(f"{ERROR_MARKER} {message}!", file=sys.stderr)
    print(f"  Usage: {USAGE}", file=sys.stderr)
    return ExitCode.FAILURE


def main() -> int:
    args = build_arg_parser().parse_args()
    configure_logging(args.verbose)

    if not args.host:
        return _fail("Host not specified")
    if args.port is None:
        return _fail("Port not specified")
    if not args.mode:
        return _fail("Mode not specified")
    try:
        target = Target.parse(args.host, args.port, args.mode)
    except ConfigurationError as e:
        return _fail(str(e))
    logger.debug(f"Target: {target}, framing={args.framing}")

    interrupted = threading.Event()

    def handler(_sig: int, _frame: FrameType | None) -> None:
        interrupted.set()

    signal.signal(signal.SIGINT, handler)

    # Undecodable input bytes are forwarded unchanged whatever the locale
    sys.stdin.reconfigure(errors="surrogateescape")
    sys.stdout.reconfigure(errors="replace")

    return run_client(
        target.host,
        target.port,
        target.kind,
        interrupted,
        framing=Framing(args.framing),
    )


if __name__ == "__main__":
    sys.exit(main())
