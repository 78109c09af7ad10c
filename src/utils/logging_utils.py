import csv
import logging
import os
import re
import tempfile
import time
from datetime import datetime
from functools import wraps
from logging.handlers import RotatingFileHandler
from pathlib import Path

import pytz
from flask import current_app, request

# Setup logger for this module
logger = logging.getLogger(__name__)


class ColoredFormatter(logging.Formatter):
    """Custom formatter to add colors to console output"""

    def format(self, record):
        log_message = super().format(record)

        # Only colorize WARNING and above, leave INFO as default
        if record.levelname == 'WARNING':
            return f"\033[33m{log_message}\033[0m"  # Yellow
        elif record.levelname == 'ERROR':
            return f"\033[31m{log_message}\033[0m"  # Red
        elif record.levelname == 'CRITICAL':
            return f"\033[35m{log_message}\033[0m"  # Magenta
        else:
            return log_message


def setup_logging(
        app_name: str,
        log_level=logging.INFO,
        log_dir: str = 'logs',
        info_modules: list[str] = None,
        use_console: bool = True
):
    """
    Configure standardized logging with rotation.

    Sets up:
    - Rotating file handler (10MB max per file, 5 backups)
    - Console handler with colored WARNING/ERROR output
    - Local timezone formatting

    Args:
        app_name: Name used for the log file (e.g., 'web_server')
        log_level: Logging level for root logger (default: logging.INFO)
        log_dir: Directory for log files (default: 'logs')
        info_modules: List of module names to set to INFO level (useful when root is WARNING)
        use_console: Also log to stderr

    Returns:
        logging.Logger: Root logger instance (configured)
    """
    os.makedirs(log_dir, exist_ok=True)
    log_file = os.path.join(log_dir, f'{app_name}.log')

    file_handler = RotatingFileHandler(
        log_file,
        maxBytes=10 * 1024 * 1024,  # 10MB
        backupCount=5
    )
    file_handler.setLevel(log_level if log_level != logging.WARNING else logging.INFO)
    file_formatter = logging.Formatter('%(asctime)s - %(filename)s:%(lineno)d - %(levelname)s - %(message)s')
    file_formatter.converter = time.localtime  # Use local timezone instead of UTC
    file_handler.setFormatter(file_formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Clear any existing handlers (force=True equivalent)
    root_logger.handlers.clear()
    root_logger.addHandler(file_handler)

    if use_console:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(log_level)
        console_handler.setFormatter(ColoredFormatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))
        root_logger.addHandler(console_handler)

    if info_modules:
        for module_name in info_modules:
            logging.getLogger(module_name).setLevel(logging.INFO)

    return root_logger


# Default directory for the web activity CSV
LOG_FILE_DIR = Path(__file__).parent.parent.parent / 'logs'

# Fallback directory if primary fails (user's temp directory)
FALLBACK_LOG_DIR = Path(tempfile.gettempdir()) / 'countdown_logs'


def _ensure_log_dir(log_dir: Path = LOG_FILE_DIR) -> tuple[Path, bool]:
    """
    Ensure log directory exists and is writable.

    Returns:
        tuple[Path, bool]: (directory_path, is_writable)
    """
    try:
        log_dir.mkdir(parents=True, exist_ok=True)
        return log_dir, os.access(log_dir, os.W_OK)
    except OSError as e:
        logger.warning(f"Could not create log directory {log_dir}: {e}")
        return log_dir, False


def _append_csv_with_header(file_path: Path, headers: list[str], row: list[str], retry_with_fallback: bool = True):
    """
    Append a row to a CSV file, writing headers first if the file is new/empty.

    Returns:
        bool: True if write succeeded, False otherwise
    """
    _, is_writable = _ensure_log_dir(file_path.parent)
    if not is_writable:
        if retry_with_fallback:
            fallback_path = FALLBACK_LOG_DIR / file_path.name
            logger.warning(f"Retrying log write to fallback location: {fallback_path}")
            return _append_csv_with_header(fallback_path, headers, row, retry_with_fallback=False)
        return False

    try:
        is_new = not file_path.exists() or file_path.stat().st_size == 0
        with open(file_path, 'a', newline='') as f:
            writer = csv.writer(f, quoting=csv.QUOTE_MINIMAL)
            if is_new:
                writer.writerow(headers)
            writer.writerow(row)
        return True

    except OSError as e:
        logger.error(f"OS error writing CSV log {file_path.name}: {e}")
        return False


# Paths hit by vulnerability scanners; rejected before routing
SCANNER_PATTERNS = [
    r'/administrator/components/com_.*\.xml',
    r'/wp-content/plugins/.*/timthumb\.php',
    r'/.git/',
    r'/admin/',
    r'/wp-login',
    r'/wp-admin',
    r'\.php$'
]

COMPILED_SCANNER_PATTERNS = [re.compile(pattern, re.IGNORECASE) for pattern in SCANNER_PATTERNS]


def is_scanner_request():
    """Return True if the current request path matches a known scanner pattern."""
    return any(pattern.search(request.path) for pattern in COMPILED_SCANNER_PATTERNS)


def log_web_activity(func):
    """
    Decorator for logging web activity to a CSV file.

    The directory comes from the app's ACTIVITY_LOG_DIR setting. A failed
    write never fails the request.
    """

    @wraps(func)
    def wrapper(*args, **kwargs):
        log_dir = Path(current_app.config.get('ACTIVITY_LOG_DIR') or LOG_FILE_DIR)
        log_file_name = "web_server_activity_log.csv"
        now_utc = datetime.now(pytz.utc).strftime('%m/%d/%Y %I:%M:%S %p %Z')
        success = _append_csv_with_header(
            log_dir / log_file_name,
            headers=["remote_addr", "method", "path", "query", "timestamp_utc"],
            row=[
                request.remote_addr,
                request.method,
                request.path,
                request.query_string.decode('utf-8', errors='replace'),
                now_utc
            ]
        )
        if not success:
            logger.warning(f"Failed to log web activity for {log_file_name}, but continuing...")

        # Always execute the wrapped function, even if logging fails
        return func(*args, **kwargs)

    return wrapper
