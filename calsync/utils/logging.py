# ╔════════════════════════════════════════════════════════════════════════════╗
# ║                        CALENDAR SYNC LOGGING SETUP                         ║
# ║ Configures queued console logging (colored locally, workflow commands in   ║
# ║ GitHub Actions) and optional rotating file logging.                        ║
# ╚════════════════════════════════════════════════════════════════════════════╝

# Standard library imports
import atexit
import logging
import os
import platform
import sys
from logging.handlers import QueueHandler, QueueListener, TimedRotatingFileHandler
from queue import Queue
from typing import Optional

# Third-party imports
from colorlog import ColoredFormatter

# Local application imports
from calsync.utils import environ

# ╔════════════════════════════════════════════════════════════════════════════╗
# ║ LOGGER AND CONSTANTS                                                       ║
# ╚════════════════════════════════════════════════════════════════════════════╝

logger = logging.getLogger("calsync")

LOG_FILE_NAME = "calsync.log"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_listener: Optional[QueueListener] = None

# ╔════════════════════════════════════════════════════════════════════════════╗
# ║ FORMATTERS                                                                 ║
# ╚════════════════════════════════════════════════════════════════════════════╝

# --- WorkflowCommandFormatter ---
# Renders records as GitHub Actions workflow commands so warnings and errors
# show up as annotations on the run summary. INFO stays plain text.
class WorkflowCommandFormatter(logging.Formatter):
    COMMANDS = {
        logging.DEBUG: "::debug::",
        logging.WARNING: "::warning::",
        logging.ERROR: "::error::",
        logging.CRITICAL: "::error::",
    }

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        prefix = self.COMMANDS.get(record.levelno, "")
        if not prefix:
            return message
        # Workflow commands are single-line; escape as the runner expects
        escaped = message.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")
        return f"{prefix}{escaped}"

# --- build_console_formatter ---
# Picks the console formatter for the current environment.
# Args:
#     actions: True when running inside a GitHub Actions job.
# Returns: A logging.Formatter instance.
def build_console_formatter(actions: bool) -> logging.Formatter:
    if actions:
        return WorkflowCommandFormatter("%(message)s")
    return ColoredFormatter(
        "%(log_color)s[%(asctime)s] %(levelname)s: %(message)s",
        datefmt=DATE_FORMAT,
        log_colors={
            "DEBUG": "cyan",
            "INFO": "green",
            "WARNING": "yellow",
            "ERROR": "red",
            "CRITICAL": "bold_red",
        },
    )

# ╔════════════════════════════════════════════════════════════════════════════╗
# ║ LOGGER INITIALIZATION                                                      ║
# ╚════════════════════════════════════════════════════════════════════════════╝

# --- setup_logging ---
# Attaches a QueueHandler to the calsync logger and starts a QueueListener
# feeding the console (and, when a log directory is given, a daily rotating
# file). Safe to call more than once; later calls are no-ops.
# Args:
#     debug: Enable DEBUG level. Defaults to the DEBUG/RUNNER_DEBUG environment.
#     actions: Emit workflow commands. Defaults to GITHUB_ACTIONS.
#     log_dir: Directory for the rotating log file. Defaults to LOG_DIR.
# Returns: The configured logger.
def setup_logging(debug: Optional[bool] = None, actions: Optional[bool] = None,
                  log_dir: Optional[str] = None) -> logging.Logger:
    global _listener
    if _listener is not None:
        return logger

    debug = environ.DEBUG if debug is None else debug
    actions = environ.GITHUB_ACTIONS if actions is None else actions
    log_dir = environ.LOG_DIR if log_dir is None else log_dir
    level = logging.DEBUG if debug else logging.INFO

    logger.setLevel(level)
    handlers = []

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(build_console_formatter(actions))
    console_handler.setLevel(level)
    handlers.append(console_handler)

    log_file = None
    if log_dir:
        try:
            os.makedirs(log_dir, exist_ok=True)
            log_file = os.path.join(log_dir, LOG_FILE_NAME)
            file_handler = TimedRotatingFileHandler(
                log_file,
                when="midnight",
                interval=1,
                backupCount=7,
                encoding="utf-8",
            )
            file_handler.setFormatter(logging.Formatter(
                "[%(asctime)s] %(levelname)s in %(name)s [%(filename)s:%(lineno)d]: %(message)s",
                datefmt=DATE_FORMAT,
            ))
            file_handler.setLevel(level)
            handlers.append(file_handler)
        except OSError as e:
            log_file = None
            print(f"Notice: Could not use log directory {log_dir}: {e}")

    log_queue = Queue(-1)
    logger.addHandler(QueueHandler(log_queue))
    # Records reach the console through the listener only
    logger.propagate = False
    _listener = QueueListener(log_queue, *handlers, respect_handler_level=True)
    _listener.start()
    atexit.register(shutdown_logging)

    logger.debug(f"Logging initialized ({platform.system()} {platform.release()})")
    if log_file:
        logger.debug(f"Log file: {log_file}")
    return logger

# --- shutdown_logging ---
# Stops the queue listener, flushing queued records to their handlers.
def shutdown_logging():
    global _listener
    if _listener is None:
        return
    _listener.stop()
    for handler in _listener.handlers:
        handler.close()
    for handler in list(logger.handlers):
        if isinstance(handler, QueueHandler):
            logger.removeHandler(handler)
    logger.propagate = True
    _listener = None
