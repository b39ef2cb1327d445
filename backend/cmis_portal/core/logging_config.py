"""
CMIS Student Portal - Logging

Plain text with request/student context in development, one JSON object per
line in production.
"""

import logging
import sys
import json
import traceback
import uuid
from datetime import datetime
from pathlib import Path
from logging.handlers import RotatingFileHandler
from typing import Any, Dict, Optional
from contextvars import ContextVar

from cmis_portal.core.config import settings


request_id_var: ContextVar[str] = ContextVar('request_id', default='')
student_id_var: ContextVar[str] = ContextVar('student_id', default='')

LOG_FILE_MAX_BYTES = 10 * 1024 * 1024


def set_request_id(request_id: str) -> None:
    request_id_var.set(request_id)


def set_student_id(student_id: str) -> None:
    """Attach the authenticated (or just registered) student to later log lines"""
    student_id_var.set(student_id)


def generate_request_id() -> str:
    return uuid.uuid4().hex[:8]


_RESERVED_RECORD_KEYS = frozenset(
    logging.LogRecord("", 0, "", 0, "", None, None).__dict__
) | {'message', 'request_id', 'student_id'}


class JSONFormatter(logging.Formatter):
    """Structured records for production log shipping"""

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.utcnow().isoformat() + "Z",
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        for key, var in (("request_id", request_id_var), ("student_id", student_id_var)):
            if var.get():
                log_data[key] = var.get()

        if record.exc_info and record.exc_info[0]:
            exc_type, exc_value, _ = record.exc_info
            log_data["exception"] = {
                "type": exc_type.__name__,
                "message": str(exc_value),
                "traceback": traceback.format_exception(*record.exc_info),
            }

        # event_type, storage_key, duration_ms ... passed via extra=
        log_data.update(
            (key, value) for key, value in record.__dict__.items()
            if key not in _RESERVED_RECORD_KEYS and not key.startswith('_')
        )

        return json.dumps(log_data, default=str)


class ContextualFormatter(logging.Formatter):
    """Text formatter that fills %(request_id)s and %(student_id)s"""

    def format(self, record: logging.LogRecord) -> str:
        record.request_id = request_id_var.get() or '-'
        record.student_id = student_id_var.get() or '-'
        return super().format(record)


class PortalLogger(logging.Logger):
    """Logger with one helper per kind of event the portal records"""

    def log_request(self, method: str, path: str, status_code: int,
                    duration_ms: float, **kwargs) -> None:
        self.info(
            f"HTTP {method} {path} - {status_code} ({duration_ms:.2f}ms)",
            extra={
                "event_type": "http_request",
                "http_method": method,
                "http_path": path,
                "http_status": status_code,
                "duration_ms": duration_ms,
                **kwargs
            }
        )

    def log_db_query(self, operation: str, table: str, duration_ms: float,
                     rows_affected: int = 0, **kwargs) -> None:
        self.debug(
            f"DB {operation} on {table} - {rows_affected} rows ({duration_ms:.2f}ms)",
            extra={
                "event_type": "db_query",
                "db_operation": operation,
                "db_table": table,
                "duration_ms": duration_ms,
                "rows_affected": rows_affected,
                **kwargs
            }
        )

    def log_auth_event(self, event: str, success: bool, user_email: Optional[str] = None,
                       reason: Optional[str] = None, **kwargs) -> None:
        """Login and registration outcomes; failures log at WARNING"""
        outcome = "success" if success else "failed"
        details = "".join(f" - {part}" for part in (user_email, reason) if part)
        self.log(
            logging.INFO if success else logging.WARNING,
            f"Auth {event}: {outcome}{details}",
            extra={
                "event_type": "auth",
                "auth_event": event,
                "auth_success": success,
                "user_email": user_email,
                "failure_reason": reason,
                **kwargs
            }
        )

    def log_storage_event(self, operation: str, key: str, success: bool = True,
                          reason: Optional[str] = None, **kwargs) -> None:
        """Resume and event-file object operations, including presign fallbacks"""
        self.log(
            logging.INFO if success else logging.WARNING,
            f"Storage {operation}: {key}" + (f" - {reason}" if reason else ""),
            extra={
                "event_type": "storage",
                "storage_operation": operation,
                "storage_key": key,
                "storage_success": success,
                "failure_reason": reason,
                **kwargs
            }
        )

    def log_error_with_context(self, error: Exception, context: Optional[str] = None,
                               **kwargs) -> None:
        error_type = type(error).__name__
        self.error(
            f"Error in {context}: {error_type}: {error}",
            exc_info=True,
            extra={
                "event_type": "error",
                "error_type": error_type,
                "error_message": str(error),
                "error_context": context,
                **kwargs
            }
        )


def _file_handler(formatter: logging.Formatter, backup_count: int) -> RotatingFileHandler:
    log_file = Path(settings.LOG_FILE)
    log_file.parent.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(log_file, maxBytes=LOG_FILE_MAX_BYTES, backupCount=backup_count)
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(formatter)
    return handler


def setup_logging() -> PortalLogger:
    """Configure the ``cmis_portal`` logger from ENVIRONMENT, LOG_LEVEL and LOG_FILE"""
    logging.setLoggerClass(PortalLogger)

    logger = logging.getLogger("cmis_portal")
    logger.__class__ = PortalLogger
    logger.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
    logger.handlers.clear()

    json_logging = settings.ENVIRONMENT == "production"

    if json_logging:
        console_formatter = file_formatter = JSONFormatter()
        backup_count = 10
    else:
        console_formatter = ContextualFormatter(
            "%(levelname)-8s | [%(request_id)s] %(message)s"
        )
        file_formatter = ContextualFormatter(
            "%(asctime)s | %(levelname)-8s | "
            "[%(request_id)s] [%(student_id)s] | "
            "%(funcName)s:%(lineno)d | %(message)s"
        )
        backup_count = 5

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.INFO)
    console_handler.setFormatter(console_formatter)
    logger.addHandler(console_handler)

    if settings.LOG_FILE:
        logger.addHandler(_file_handler(file_formatter, backup_count))

    for noisy in ("httpx", "httpcore", "botocore", "uvicorn.access", "sqlalchemy.engine"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    logger.info(
        "Logging initialized",
        extra={
            "environment": settings.ENVIRONMENT,
            "log_level": settings.LOG_LEVEL,
            "json_logging": json_logging
        }
    )

    return logger


logger: PortalLogger = setup_logging()


__all__ = [
    'logger',
    'setup_logging',
    'set_request_id',
    'set_student_id',
    'generate_request_id',
    'PortalLogger',
]
