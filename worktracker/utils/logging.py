"""
Logging configuration with optional JSON output.
"""
import json
import logging
import sys
from datetime import datetime
from typing import Any, Dict, Optional

from worktracker.config import settings


class JSONFormatter(logging.Formatter):
    """JSON log formatter."""

    def format(self, record: logging.LogRecord) -> str:
        log_obj: Dict[str, Any] = {
            "ts": datetime.utcnow().isoformat() + "Z",
            "level": record.levelname,
            "msg": record.getMessage(),
            "logger": record.name,
            "service": "worktracker",
        }

        # Add extra fields if present
        if hasattr(record, "user_id"):
            log_obj["user_id"] = record.user_id
        if hasattr(record, "entry_id"):
            log_obj["entry_id"] = record.entry_id
        if hasattr(record, "transition"):
            log_obj["transition"] = record.transition

        # Add exception info if present
        if record.exc_info:
            log_obj["exc_info"] = self.formatException(record.exc_info)

        return json.dumps(log_obj)


def configure_logging(level: Optional[str] = None, use_json: Optional[bool] = None) -> None:
    """
    Configure root logging.

    Falls back to ``settings.log_level`` / ``settings.log_json`` when the
    arguments are omitted.
    """
    if use_json is None:
        use_json = settings.log_json

    handler = logging.StreamHandler(sys.stdout)

    if use_json:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )

    logging.basicConfig(
        level=(level or settings.log_level).upper(),
        handlers=[handler],
        force=True,
    )
