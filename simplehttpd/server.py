#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
simplehttpd Server Module
-------------------------
Process lifecycle around the HTTP daemon: checks the served directory, starts
the daemon, waits until shutdown is requested (SIGINT, SIGTERM or the Windows
service stop control) and stops the daemon again.
"""

import os
import atexit
import signal
import logging
import threading

from .daemon import HTTPDaemon
from .resolver import ContentResolver


class FileServer:
    """
    Owns the daemon and the run loop of one server process.
    """

    def __init__(self, config):
        """
        Args:
            config: ServerConfig instance
        """
        self.config = config
        self.logger = logging.getLogger('FileServer')
        self.resolver = ContentResolver(config.root_directory, block_size=config.block_size)
        self.daemon = HTTPDaemon(config, self.resolver)
        self._shutdown_event = threading.Event()

    def _signal_handler(self, sig, frame):
        """
        Handle termination signals gracefully.

        Args:
            sig: Signal number
            frame: Current stack frame
        """
        self.logger.info(f"Received signal {sig}, shutting down...")
        self.request_shutdown()

    def install_signal_handlers(self):
        signal.signal(signal.SIGINT, self._signal_handler)
        signal.signal(signal.SIGTERM, self._signal_handler)

    def request_shutdown(self):
        """Ask the run loop to return. Safe to call from any thread or signal handler."""
        self._shutdown_event.set()

    @property
    def shutdown_requested(self):
        return self._shutdown_event.is_set()

    def check_root(self):
        """
        Returns:
            bool: True if the served directory exists and can be listed
        """
        root = self.config.root_directory
        return os.path.isdir(root) and os.access(root, os.R_OK | os.X_OK)

    def run(self, install_signals=True):
        """
        Run the server until shutdown is requested.

        Args:
            install_signals: Install SIGINT/SIGTERM handlers (main thread only)

        Returns:
            int: Process exit status
        """
        if not self.check_root():
            print("Failed to change working directory.")
            self.logger.error(f"Cannot serve {self.config.root_directory}")
            return 1

        if install_signals:
            self.install_signal_handlers()

        if not self.daemon.start():
            print("failed to start http server")
            return 1
        atexit.register(self.daemon.stop)

        try:
            # Wake up periodically so signals are handled on every platform
            while not self._shutdown_event.wait(1):
                pass
        finally:
            self.daemon.stop()
            atexit.unregister(self.daemon.stop)

        self.logger.info("Server shutdown complete")
        return 0
