"""Logging setup for the Lambda handlers."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone

from .config import HandlerConfig


class JsonFormatter(logging.Formatter):
    """Render each record as one JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def configure_logging(config: HandlerConfig) -> logging.Logger:
    """Apply level and formatter from config to the root logger.

    The Lambda runtime installs its own handler on the root logger, so
    existing handlers are reused rather than replaced.
    """
    root = logging.getLogger()
    root.setLevel(config.log_level)

    if not root.handlers:
        root.addHandler(logging.StreamHandler())

    if config.structured_logging:
        for handler in root.handlers:
            handler.setFormatter(JsonFormatter())

    # boto noise drowns out the request log at DEBUG
    for name in ("boto3", "botocore", "urllib3"):
        logging.getLogger(name).setLevel(logging.WARNING)

    return root
