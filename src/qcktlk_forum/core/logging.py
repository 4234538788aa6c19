"""Logging setup for the forum API."""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime

# Extra record attributes surfaced by the JSON formatter when present.
_CONTEXT_FIELDS = ("post_id", "voter_id", "author_id", "email", "payment_intent_id", "path")


class JSONFormatter(logging.Formatter):
    """Format records as single-line JSON documents."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.now(UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in _CONTEXT_FIELDS:
            value = record.__dict__.get(key)
            if value is not None:
                payload[key] = value
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


def configure_logging(level: str = "INFO", fmt: str = "plain") -> None:
    """Install a single stream handler on the root logger.

    Calling this more than once replaces the handler instead of stacking them.
    """
    handler = logging.StreamHandler()
    if fmt == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )

    root = logging.getLogger()
    for existing in list(root.handlers):
        if getattr(existing, "_qcktlk_handler", False):
            root.removeHandler(existing)
    handler._qcktlk_handler = True  # type: ignore[attr-defined]
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
