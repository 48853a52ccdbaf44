"""
Wordrace CLI - Command-line interface for the server.

Usage:
    wordrace serve [bind_addr]     Run the game server (default 127.0.0.1:9002)
"""

import argparse
import logging
import sys

from .config import WORDRACE_LOG_LEVEL, parse_bind_addr


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Wordrace - real-time word-race game server",
        prog="wordrace",
    )
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    serve_parser = subparsers.add_parser("serve", help="Run the game server")
    serve_parser.add_argument("bind_addr", nargs="?", help="host:port to listen on")
    serve_parser.add_argument("--log-level", default=WORDRACE_LOG_LEVEL, help="Logging level")
    serve_parser.add_argument("--static-dir", help="Directory of client files to serve")

    args = parser.parse_args(argv)

    if args.command == "serve":
        cmd_serve(args)
    else:
        parser.print_help()
        sys.exit(1)


def cmd_serve(args):
    """Run the game server."""
    import uvicorn
    from .api import create_app

    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        host, port = parse_bind_addr(args.bind_addr)
    except ValueError:
        print(f"Error: Invalid bind address: {args.bind_addr}")
        sys.exit(1)

    app = create_app(static_dir=args.static_dir) if args.static_dir else create_app()
    logging.getLogger(__name__).info("server listening on http://%s:%d", host, port)
    uvicorn.run(app, host=host, port=port, log_level=args.log_level.lower())


if __name__ == "__main__":
    main()
