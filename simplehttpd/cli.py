#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Command-line entry point for simplehttpd.
"""

import sys

from .config import parse_args
from .server import FileServer
from .utils import setup_logging


def main(argv=None):
    """
    Main entry point for the server.

    Args:
        argv: Command line arguments (default: sys.argv[1:])

    Returns:
        int: Process exit status
    """
    if argv is None:
        argv = sys.argv[1:]

    if sys.platform == 'win32' and argv[:1] == ['service']:
        from .service import handle_command_line
        return handle_command_line(argv[1:])

    config = parse_args(argv)

    setup_logging(
        log_level=config.log_level,
        log_file=config.log_file,
        max_size=config.log_max_size,
        backup_count=config.log_backup_count,
        use_colored_logging=config.colored_logging
    )

    return FileServer(config).run()
