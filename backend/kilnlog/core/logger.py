import json
import logging
import sys
import uuid
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Optional

from kilnlog.core.config import settings

# Context variable for Trace ID
_trace_id_ctx_var: ContextVar[Optional[str]] = ContextVar("trace_id", default=None)

def get_trace_id() -> Optional[str]:
    return _trace_id_ctx_var.get()

def set_trace_id(trace_id: str) -> None:
    _trace_id_ctx_var.set(trace_id)

def generate_trace_id() -> str:
    """Generate a new Trace ID and bind it to the current context."""
    tid = str(uuid.uuid4())
    set_trace_id(tid)
    return tid

class TraceIdFilter(logging.Filter):
    """Attach the current trace id so text formats can reference %(trace_id)s."""
    def filter(self, record: logging.LogRecord) -> bool:
        record.trace_id = get_trace_id()
        return True

class JSONFormatter(logging.Formatter):
    """
    Formatter that outputs JSON strings after parsing the LogRecord.
    """
    def format(self, record: logging.LogRecord) -> str:
        log_record = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
            "trace_id": get_trace_id(),
            "file": record.filename,
            "line": record.lineno,
        }

        # Add extra fields from record if available
        if hasattr(record, "extra_data"):
            log_record["data"] = record.extra_data

        if record.exc_info:
            log_record["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_record, ensure_ascii=False)

def setup_logging():
    """
    Configure the root logger to output JSON (or text) to stdout.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(settings.log_level)

    # Remove existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(TraceIdFilter())

    if settings.log_format.lower() == "json":
        formatter = JSONFormatter()
    else:
        formatter = logging.Formatter(
            '[%(asctime)s] %(levelname)s [%(name)s] [TraceID:%(trace_id)s] %(message)s'
        )

    handler.setFormatter(formatter)
    root_logger.addHandler(handler)

    # Prevent propagation for some noisy libraries if needed
    logging.getLogger("uvicorn.access").propagate = False

def log_event(log: logging.Logger, message: str, level: int = logging.INFO, **data) -> None:
    """Log a message with structured fields, emitted under "data" by JSONFormatter."""
    log.log(level, message, extra={"extra_data": data} if data else None, stacklevel=2)
