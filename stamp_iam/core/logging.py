"""
Logging utilities for the IAM service and the authorization handshake.

Verification outcomes are logged with ``extra`` context (provider, session key,
failure category); the formatter appends those fields so they survive plain
text log sinks.
"""

import logging
import sys

_CONTEXT_FIELDS = ("provider", "platform", "session_key", "category", "target")


class ContextFormatter(logging.Formatter):
    """Append known ``extra`` fields as ``key=value`` pairs."""

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        context = [
            f"{name}={getattr(record, name)}"
            for name in _CONTEXT_FIELDS
            if getattr(record, name, None) is not None
        ]
        if context:
            message = f"{message} | {' '.join(context)}"
        return message


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging with a sensible default format."""
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        ContextFormatter("%(asctime)s | %(levelname)s | %(name)s | %(message)s")
    )
    logging.basicConfig(level=level.upper(), handlers=[handler], force=True)


__all__ = ["ContextFormatter", "configure_logging"]
