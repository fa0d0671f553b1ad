"""AdsDesk — Structured JSON Logging.

Access tokens travel as query parameters and bot tokens inside Bot API
paths, so both are masked before a line is written.
"""

import logging
import json
import re
import sys
from datetime import datetime, timezone
from adsdesk.config import settings

EXTRA_FIELDS = ("account_id", "entity_id", "date_preset", "duration_ms", "status_code")

_SECRET_PATTERNS = (
    (re.compile(r"(access_token|input_token|fb_exchange_token|client_secret)=[^&\s'\"]+"), r"\1=***"),
    (re.compile(r"/bot[^/\s]+/"), "/bot***/"),
)


def redact(text: str) -> str:
    for pattern, replacement in _SECRET_PATTERNS:
        text = pattern.sub(replacement, text)
    return text


class JSONFormatter(logging.Formatter):
    """One JSON object per line, secrets masked."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": redact(record.getMessage()),
        }
        if record.exc_info and record.exc_info[0] is not None:
            log_entry["exception"] = redact(self.formatException(record.exc_info))
        for key in EXTRA_FIELDS:
            if hasattr(record, key):
                log_entry[key] = getattr(record, key)
        return json.dumps(log_entry, default=str)


def get_logger(name: str) -> logging.Logger:
    """Named ``adsdesk.*`` logger writing JSON lines to stdout."""
    logger = logging.getLogger(f"adsdesk.{name}")
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(JSONFormatter())
        logger.addHandler(handler)
    logger.setLevel(getattr(logging, settings.log_level.upper(), logging.INFO))
    return logger
