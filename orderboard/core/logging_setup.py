from __future__ import annotations

import json
import logging
import re
from datetime import datetime, timezone

from orderboard.core.config import LOG_LEVEL
from orderboard.core.request_context import get_request_id

_SENSITIVE_PATTERNS = [
    re.compile(r"(aws_secret_access_key\s*[:=]\s*)([^\s\",}]+)", re.IGNORECASE),
    re.compile(r"(access_key_id\s*[:=]\s*)([^\s\",}]+)", re.IGNORECASE),
    re.compile(r"(secret\s*[:=]\s*)([^\s\",}]+)", re.IGNORECASE),
    re.compile(r"(password\s*[:=]\s*)([^\s\",}]+)", re.IGNORECASE),
    re.compile(r"(://[^:/\s]+:)([^@\s]+)(@)"),
]


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "request_id": getattr(record, "request_id", None) or get_request_id(),
            "module": record.name,
            "message": self._mask(record.getMessage()),
            "duration_ms": getattr(record, "duration_ms", None),
        }
        for key in ("endpoint", "method", "status_code", "order_id", "customer_id"):
            value = getattr(record, key, None)
            if value is not None:
                payload[key] = value
        if record.exc_info:
            payload["exc_info"] = self._mask(self.formatException(record.exc_info))
        return json.dumps(payload, ensure_ascii=False)

    def _mask(self, value: str) -> str:
        masked = value
        for pattern in _SENSITIVE_PATTERNS:
            if pattern.groups == 3:
                masked = pattern.sub(r"\1***\3", masked)
            else:
                masked = pattern.sub(r"\1***", masked)
        return masked


def configure_logging() -> None:
    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(LOG_LEVEL)

    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter("%(message)s"))
    root_logger.addHandler(handler)

    for logger_name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        logging.getLogger(logger_name).setLevel(LOG_LEVEL)
    # boto3 es muy verboso en INFO
    for logger_name in ("botocore", "boto3", "s3transfer"):
        logging.getLogger(logger_name).setLevel(logging.WARNING)
