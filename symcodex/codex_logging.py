import json
import logging
import threading
from datetime import datetime

from . import codex_diag

LOGGER_NAME = 'symcodex'

class JSONFormatter(logging.Formatter):
    """
    One JSON object per record.

    `extra_data` fields are merged in. A `CodexError` in `exc_info` adds its
    code and source location, so a failed compile can be traced to
    `file:line` without parsing the message.
    """

    def format(self, record):
        log_entry = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat() + "Z",
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "thread": threading.current_thread().name,
        }

        if hasattr(record, 'extra_data'):
            log_entry.update(record.extra_data)

        if record.exc_info:
            exc = record.exc_info[1]
            if isinstance(exc, codex_diag.CodexError):
                log_entry["error_code"] = exc.code
                log_entry["source_file"] = exc.file
                log_entry["source_line"] = exc.line
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, ensure_ascii=False)

def setup_logging(level=logging.WARNING, log_file=None, json_format=True):
    """Attach console (and optional file) handlers to the `symcodex` logger."""
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        handler.close()

    if json_format:
        formatter = JSONFormatter()
    else:
        formatter = logging.Formatter("%(levelname)s %(name)s: %(message)s")

    handlers = [logging.StreamHandler()]
    if log_file:
        handlers.append(logging.FileHandler(log_file, encoding='utf-8'))
    for handler in handlers:
        handler.setFormatter(formatter)
        handler.setLevel(level)
        logger.addHandler(handler)

    return logger
