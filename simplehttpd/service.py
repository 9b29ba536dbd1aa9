#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Windows Service Integration for simplehttpd
-------------------------------------------
Runs the server as a Windows service. The service stop control goes through
the same shutdown path as SIGINT/SIGTERM. Windows only (requires pywin32).

Usage:
    simplehttpd service install
    simplehttpd service start
    simplehttpd service stop
    simplehttpd service remove
"""

import sys
import logging

import servicemanager
import win32service
import win32serviceutil

from .config import parse_args
from .server import FileServer
from .utils import setup_logging

SERVER_NAME = "Simple HTTP Server"


class SimpleHTTPService(win32serviceutil.ServiceFramework):
    _svc_name_ = "SimpleHTTPServer"
    _svc_display_name_ = SERVER_NAME
    _svc_description_ = "Serves files and a directory listing over HTTP"

    def __init__(self, args):
        super().__init__(args)
        # args[0] is the service name, the rest are the service start parameters
        self.start_args = list(args[1:])
        self.server = None
        self.stop_requested = False
        self.logger = logging.getLogger('SimpleHTTPService')

    def SvcStop(self):
        self.ReportServiceStatus(win32service.SERVICE_STOP_PENDING)
        self.stop_requested = True
        if self.server is not None:
            self.server.request_shutdown()

    def SvcDoRun(self):
        servicemanager.LogMsg(
            servicemanager.EVENTLOG_INFORMATION_TYPE,
            servicemanager.PYS_SERVICE_STARTED,
            (self._svc_name_, '')
        )

        config = parse_args(self.start_args)
        setup_logging(
            log_level=config.log_level,
            log_file=config.log_file,
            max_size=config.log_max_size,
            backup_count=config.log_backup_count,
            use_colored_logging=False
        )

        self.server = FileServer(config)
        if self.stop_requested:
            self.server.request_shutdown()

        status = self.server.run(install_signals=False)
        if status != 0:
            self.logger.error(f"Server exited with status {status}")

        servicemanager.LogMsg(
            servicemanager.EVENTLOG_INFORMATION_TYPE,
            servicemanager.PYS_SERVICE_STOPPED,
            (self._svc_name_, '')
        )


def handle_command_line(argv):
    """
    Install, start, stop or remove the service.

    Args:
        argv: Service command and its options, e.g. ['install']

    Returns:
        int: Process exit status
    """
    return win32serviceutil.HandleCommandLine(
        SimpleHTTPService,
        argv=[sys.argv[0]] + list(argv)
    )
