"""
=============================================================================
SYNC SERVER CLI ENTRY POINT
=============================================================================

    # Run with defaults (0.0.0.0:8080, serving ./www)
    python -m syncserver

    # Custom port and document root
    python -m syncserver --port 3000 --root ./shared

    # Drop slow clients after 30 seconds
    python -m syncserver --timeout 30

    # JSON access log for log shippers
    python -m syncserver --log-format json

Settings are layered: defaults, then SYNCSERVER_* environment variables
(see ServerConfig.from_env), then command-line flags.

=============================================================================
EXIT CODES
=============================================================================

    0   Stopped by SIGINT/SIGTERM
    1   Could not listen (port in use, permission denied) or bad settings
    2   Bad command-line arguments (argparse)

=============================================================================
"""

import argparse
import sys

from . import __version__
from .config import ServerConfig, LOG_FORMATS
from .server import SyncServer


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="syncserver",
        description="Concurrent HTTP server for listing and downloading files",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m syncserver                        # Run with defaults
  python -m syncserver --port 3000            # Custom port
  python -m syncserver --root ./shared        # Serve another directory
  python -m syncserver --timeout 30           # Per-connection timeout
        """
    )

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--host", "-H",
        default=None,
        help="Host to bind to (default: 0.0.0.0)"
    )

    parser.add_argument(
        "--port", "-p",
        type=int,
        default=None,
        help="Port to listen on (default: 8080)"
    )

    parser.add_argument(
        "--backlog",
        type=int,
        default=None,
        help="listen() backlog (default: 5)"
    )

    parser.add_argument(
        "--timeout", "-t",
        type=float,
        default=None,
        help="Per-connection socket timeout in seconds (default: none)"
    )

    # ─────────────────────────────────────────────────────────────────────
    # FILE ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--root", "-r",
        default=None,
        help="Document root to serve (default: ./www)"
    )

    parser.add_argument(
        "--no-confine",
        action="store_true",
        help="Do not reject paths that resolve outside the document root"
    )

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--log-level", "-l",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Logging level (default: INFO)"
    )

    parser.add_argument(
        "--log-format",
        choices=LOG_FORMATS,
        default=None,
        help="Access log format (default: text)"
    )

    # ─────────────────────────────────────────────────────────────────────
    # META ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"syncserver {__version__}"
    )

    return parser


def config_from_args(args: argparse.Namespace) -> ServerConfig:
    """Environment first, then any flag that was actually given."""
    config = ServerConfig.from_env()

    if args.host is not None:
        config.host = args.host
    if args.port is not None:
        config.port = args.port
    if args.backlog is not None:
        config.backlog = args.backlog
    if args.timeout is not None:
        config.timeout = args.timeout
    if args.root is not None:
        config.doc_root = args.root
    if args.no_confine:
        config.confine_to_root = False
    if args.log_level is not None:
        config.log_level = args.log_level
    if args.log_format is not None:
        config.log_format = args.log_format

    return config


def main(argv=None):
    args = build_parser().parse_args(argv)

    try:
        server = SyncServer(config_from_args(args))
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    try:
        server.run()
    except OSError as e:
        print(f"Error: cannot listen: {e}", file=sys.stderr)
        sys.exit(1)


# =============================================================================
# ENTRY POINT
# =============================================================================

if __name__ == "__main__":
    main()


# =============================================================================
# MODULE SUMMARY
# =============================================================================
#
# 1. Parse command-line arguments
# 2. Layer them over ServerConfig.from_env()
# 3. Build SyncServer (validates the config)
# 4. Run until a signal arrives
# =============================================================================
