"""
Reusable logging and print setup for all parts of the project.

Functions:
    setup_logging      - Configure and return a logger.
    set_print_logger   - Set the logger for print_and_log and print_error.
    print_and_log      - Print (via rich) and log an info message.
    print_error        - Print (via rich) and log an error message.
"""

import logging
import logging.handlers
import os
import sys
from typing import Optional

from rich.console import Console

# Module-level variable to hold the logger for print_and_log and print_error
_print_logger: Optional[logging.Logger] = None

console = Console()
error_console = Console(stderr=True)


def setup_logging(
    app_name: str = "explorer",
    daemon: bool = False,
    loglevel: int = logging.INFO,
    logfile: Optional[str] = None,
) -> logging.Logger:
    """
    Set up logging for the application.
    - If logfile is given, logs go there in every mode.
    - If daemon=True, logs go to syslog when /dev/log exists, stderr otherwise.
    - Otherwise, logs go to ~/.<app_name>/log.txt.
    Returns the configured logger.
    """
    logger = logging.getLogger()
    logger.setLevel(loglevel)
    handler: logging.Handler
    if daemon:
        formatter = logging.Formatter(f"%(asctime)s %(levelname)s %(process)d [{app_name}] %(message)s")
    else:
        formatter = logging.Formatter("%(asctime)s %(levelname)s %(process)d %(name)s %(message)s")

    if logfile is not None:
        handler = logging.FileHandler(os.path.expanduser(logfile))
    elif daemon:
        if os.path.exists("/dev/log"):
            handler = logging.handlers.SysLogHandler(address="/dev/log")
        else:
            handler = logging.StreamHandler(sys.stderr)
    else:
        log_dir = os.path.expanduser(f"~/.{app_name}")
        os.makedirs(log_dir, exist_ok=True)
        handler = logging.FileHandler(os.path.join(log_dir, "log.txt"))

    # Remove any existing handlers
    for h in logger.handlers[:]:
        logger.removeHandler(h)

    handler.setFormatter(formatter)
    logger.addHandler(handler)
    set_print_logger(logger)
    logger.debug(f"Logger initialized for {app_name}")
    return logger


def set_print_logger(logger: logging.Logger):
    """
    Set the logger to be used by print_and_log and print_error.
    """
    global _print_logger
    _print_logger = logger


def print_and_log(message: str, **kwargs):
    """
    Print to console (rich markup allowed) and log as info.
    """
    console.print(message, **kwargs)
    if _print_logger is not None:
        _print_logger.info(message)


def print_error(message: str, **kwargs):
    """
    Print and log an error message (stderr and error level).
    """
    error_console.print(f"[bold red]{message}[/bold red]", **kwargs)
    if _print_logger is not None:
        _print_logger.error(message)
