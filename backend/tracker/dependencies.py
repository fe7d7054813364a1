"""
Shared dependencies for the capacity tracker: logging, configuration and the
entry store factory.
"""
import os
import logging
import logging.handlers
import traceback

from dotenv import load_dotenv
from caplib.store import EntryStore

# Load .env file if present
load_dotenv(os.path.join(os.path.dirname(__file__), '..', '.env'))

# ── Structured JSON Logging setup ───────────────────────────────
import json as _json
from datetime import datetime as _dt, timezone as _tz


class _JsonFormatter(logging.Formatter):
    """Emit log records as single-line JSON objects."""
    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": _dt.fromtimestamp(record.created, tz=_tz.utc).strftime('%Y-%m-%dT%H:%M:%S.') + f"{int(record.msecs):03d}Z",
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            entry["exc"] = self.formatException(record.exc_info)
        return _json.dumps(entry, ensure_ascii=False)


_log_file = os.environ.get('CAPTRACK_LOG_FILE', '/tmp/captrack.log')

_logger = logging.getLogger('captrack')
# Log level configurable via ENV
_log_level_str = os.environ.get('CAPTRACK_LOG_LEVEL', 'INFO').upper()
_log_level = getattr(logging, _log_level_str, logging.INFO)
_logger.setLevel(_log_level)
if not _logger.handlers:
    try:
        _handler = logging.handlers.RotatingFileHandler(
            _log_file, maxBytes=10 * 1024 * 1024, backupCount=3
        )
        _handler.setFormatter(_JsonFormatter())
        _logger.addHandler(_handler)
    except OSError:
        # unwritable log location: stderr only
        pass
    _stderr_handler = logging.StreamHandler()
    _stderr_handler.setFormatter(_JsonFormatter())
    _logger.addHandler(_stderr_handler)

CAPTRACK_LOG_FILE = _log_file

# ── Config ──────────────────────────────────────────────────────
DATA_DIR = os.path.normpath(os.environ.get(
    'CAPTRACK_DATA_DIR',
    os.path.join(os.path.dirname(__file__), '..', '..', 'data')
))

MANAGER_PASSWORD = os.environ.get('CAPTRACK_MANAGER_PASSWORD', 'admin123')
IT_MASTER_PASSWORD = os.environ.get('CAPTRACK_IT_PASSWORD', 'itpass123')

try:
    AUTOSAVE_DELAY = float(os.environ.get('CAPTRACK_AUTOSAVE_DELAY', '0.9'))
except ValueError:
    AUTOSAVE_DELAY = 0.9


def get_store(data_dir: str = None) -> EntryStore:
    """Open and load the entry store, logging when it falls back to seed data."""
    store = EntryStore(data_dir or DATA_DIR)
    store.load()
    if store.load_error:
        _logger.warning("Corrupt entry store %s (%s); using seeded dataset", store.path, store.load_error)
    elif store.seeded:
        _logger.info("No entry store at %s; using seeded dataset", store.path)
    return store


def _failure(e: Exception, context: str = '') -> dict:
    """Log full exception, return a sanitized failure result."""
    _logger.error(
        "failure context=%s type=%s msg=%s trace=%s",
        context, type(e).__name__, str(e),
        traceback.format_exc().splitlines()[-1],
    )
    return {"ok": False, "error": "Could not save changes. Please try again."}
