#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Utility Module for simplehttpd
------------------------------
Helper functions shared by the server components:
- Logging setup (colored console output, optional rotating log file)
- Path containment checks against the document root
- HTTP date formatting
"""

import os
import time
import logging
from logging.handlers import RotatingFileHandler

from colorama import Fore, Style, just_fix_windows_console

just_fix_windows_console()

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


class ColoredFormatter(logging.Formatter):
    """Formatter that colors console records by level."""

    FORMATS = {
        logging.DEBUG: Fore.CYAN + LOG_FORMAT + Style.RESET_ALL,
        logging.INFO: Fore.GREEN + LOG_FORMAT + Style.RESET_ALL,
        logging.WARNING: Fore.YELLOW + LOG_FORMAT + Style.RESET_ALL,
        logging.ERROR: Fore.RED + LOG_FORMAT + Style.RESET_ALL,
        logging.CRITICAL: Fore.RED + Style.BRIGHT + LOG_FORMAT + Style.RESET_ALL
    }

    def format(self, record):
        log_fmt = self.FORMATS.get(record.levelno, self.FORMATS[logging.INFO])
        formatter = logging.Formatter(log_fmt, datefmt=DATE_FORMAT)
        return formatter.format(record)


def setup_logging(log_level='INFO', log_file=None, max_size=10485760, backup_count=5, use_colored_logging=True):
    """
    Set up logging configuration.

    Args:
        log_level: Logging level (default: INFO)
        log_file: Log file path (default: None, console only)
        max_size: Maximum log file size in bytes (default: 10MB)
        backup_count: Number of backup logs to keep (default: 5)
        use_colored_logging: Whether to use colored logging in console (default: True)

    Returns:
        logging.Logger: Root logger instance
    """
    log_level_value = getattr(logging, str(log_level).upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level_value)

    # Remove existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    if log_file:
        try:
            file_handler = RotatingFileHandler(
                log_file,
                maxBytes=max_size,
                backupCount=backup_count
            )
            file_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
            root_logger.addHandler(file_handler)
        except OSError as e:
            print(f"Error setting up log file: {e}")

    console_handler = logging.StreamHandler()
    if use_colored_logging:
        console_handler.setFormatter(ColoredFormatter())
    else:
        console_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))

    root_logger.addHandler(console_handler)
    return root_logger


def is_path_safe(base_path, target_path):
    """
    Check if a path is safe (doesn't escape the base directory).

    Args:
        base_path: Base directory path
        target_path: Target path to check

    Returns:
        bool: True if path is safe, False otherwise
    """
    base_path = os.path.normpath(os.path.abspath(base_path))
    target_path = os.path.normpath(os.path.abspath(target_path))

    try:
        return os.path.commonpath([base_path, target_path]) == base_path
    except ValueError:
        # Different drives on Windows
        return False


def format_http_date(timestamp=None):
    """
    Format a timestamp as an HTTP date string.

    Args:
        timestamp: UNIX timestamp (default: current time)

    Returns:
        str: HTTP date string in RFC 7231 format
    """
    if timestamp is None:
        timestamp = time.time()
    return time.strftime('%a, %d %b %Y %H:%M:%S GMT', time.gmtime(timestamp))
