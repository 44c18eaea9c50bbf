import logging
import sys
import json
from datetime import datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional
import pytz
from core.config import settings

# All configured boards publish in Korean local time
KST = pytz.timezone("Asia/Seoul")

CONSOLE_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
FILE_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _to_kst(timestamp: float) -> datetime:
    return datetime.fromtimestamp(timestamp).astimezone(KST)


class KSTFormatter(logging.Formatter):
    """Text formatter with KST timestamps and a trailing `key=value` context."""

    def formatTime(self, record, datefmt=None):
        dt = _to_kst(record.created)
        return dt.strftime(datefmt) if datefmt else dt.isoformat(timespec="milliseconds")

    def format(self, record):
        message = super().format(record)

        context = getattr(record, "context", None)
        if context:
            message += " | " + " | ".join(f"{k}={v}" for k, v in context.items())

        if hasattr(record, "duration_ms"):
            message += f" | ⏱️ {record.duration_ms:.2f}ms"
        elif hasattr(record, "duration"):
            message += f" | ⏱️ {record.duration:.2f}s"

        return message


class StructuredLoggerAdapter(logging.LoggerAdapter):
    """
    Accepts `context=`, `duration=` and `duration_ms=` keyword arguments
    and moves them into the record's extra fields.
    """

    def process(self, msg, kwargs):
        extra = kwargs.setdefault("extra", {})
        extra["context"] = kwargs.pop("context", {})

        for key in ("duration", "duration_ms"):
            if key in kwargs:
                extra[key] = kwargs.pop(key)

        return msg, kwargs


class JSONFormatter(logging.Formatter):
    """One JSON object per line, for log shipping."""

    def format(self, record):
        log_record = {
            "timestamp": _to_kst(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "function": record.funcName,
        }

        if getattr(record, "context", None):
            log_record["context"] = record.context
        if hasattr(record, "duration"):
            log_record["duration_seconds"] = record.duration
        if hasattr(record, "duration_ms"):
            log_record["duration_ms"] = record.duration_ms
        if record.exc_info:
            log_record["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_record, ensure_ascii=False)


def get_logger(
    name: str,
    log_level: Optional[str] = None,
    log_file: Optional[str] = None,
) -> StructuredLoggerAdapter:
    """
    Returns a structured logger writing INFO+ to stdout and every level to a
    rotating file (LOG_FILE). Handlers are attached once per logger name.
    """
    logger = logging.getLogger(name)
    if logger.handlers:
        return StructuredLoggerAdapter(logger, {})

    logger.setLevel(getattr(logging, (log_level or settings.LOG_LEVEL).upper(), logging.INFO))

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.INFO)
    console_handler.setFormatter(KSTFormatter(CONSOLE_FORMAT, datefmt=DATE_FORMAT))
    logger.addHandler(console_handler)

    log_file = settings.LOG_FILE if log_file is None else log_file
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = RotatingFileHandler(
            log_path,
            maxBytes=settings.LOG_MAX_BYTES,
            backupCount=settings.LOG_BACKUP_COUNT,
            encoding="utf-8",
        )
        file_handler.setLevel(logging.DEBUG)
        if settings.LOG_FORMAT == "json":
            file_handler.setFormatter(JSONFormatter())
        else:
            file_handler.setFormatter(KSTFormatter(FILE_FORMAT, datefmt=DATE_FORMAT))
        logger.addHandler(file_handler)

    # Handlers live on each named logger; the root logger would print twice
    logger.propagate = False

    return StructuredLoggerAdapter(logger, {})
