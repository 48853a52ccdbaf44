"""
Runtime configuration, read once from the environment.
"""

import os

WORDRACE_HOST = os.getenv("WORDRACE_HOST", "127.0.0.1")
WORDRACE_PORT = int(os.getenv("WORDRACE_PORT", "9002"))
WORDRACE_LOG_LEVEL = os.getenv("WORDRACE_LOG_LEVEL", "INFO").upper()

# Frames queued per connection before it counts as a failed sink.
WORDRACE_OUTBOX_SIZE = int(os.getenv("WORDRACE_OUTBOX_SIZE", "256"))

WORDRACE_STATIC_DIR = os.getenv("WORDRACE_STATIC_DIR", "static")
ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "*").split(",")


def parse_bind_addr(bind_addr: str | None) -> tuple[str, int]:
    """
    Split a ``host:port`` string, falling back to the configured defaults.

    Examples:
        parse_bind_addr("0.0.0.0:8000") -> ("0.0.0.0", 8000)
        parse_bind_addr(":8000") -> (WORDRACE_HOST, 8000)
        parse_bind_addr(None) -> (WORDRACE_HOST, WORDRACE_PORT)
    """
    if not bind_addr:
        return WORDRACE_HOST, WORDRACE_PORT
    host, sep, port = bind_addr.rpartition(":")
    if not sep:
        return bind_addr, WORDRACE_PORT
    return host or WORDRACE_HOST, int(port)
