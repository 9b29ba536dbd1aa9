#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
HTTP Daemon Module for simplehttpd
----------------------------------
The HTTP engine: owns the listening socket, accepts connections on a
background thread and dispatches each connection to a worker thread, which
runs the request callback through a ConnectionHandler.
"""

import socket
import threading
import time
import logging
from concurrent.futures import ThreadPoolExecutor

from .handler import ConnectionHandler

# How often the accept loop wakes up to notice stop()
ACCEPT_POLL_INTERVAL = 0.5


class HTTPDaemon:
    """
    Threaded HTTP daemon listening on a dual-stack (IPv4 + IPv6) socket.
    """

    def __init__(self, config, callback):
        """
        Initialize the daemon.

        Args:
            config: ServerConfig instance
            callback: Callable (method, path) -> Response or None, invoked once per request
        """
        self.config = config
        self.logger = logging.getLogger('HTTPDaemon')
        self.request_handler = ConnectionHandler(config, callback)

        # Daemon state
        self.server_socket = None
        self.is_running = False
        self.thread_pool = None
        self.accept_thread = None

        # Active connections tracking
        self.active_connections = 0
        self.active_connections_lock = threading.Lock()

    @property
    def server_port(self):
        """Port the daemon is bound to (useful when configured with port 0)."""
        if self.server_socket is None:
            return None
        return self.server_socket.getsockname()[1]

    def _create_socket(self):
        """
        Create the listening socket, dual-stack when IPv6 is available.

        Returns:
            socket.socket: Bound and listening socket
        """
        host = self.config.host or '::'
        if host == '::' and not socket.has_ipv6:
            host = '0.0.0.0'

        family = socket.AF_INET6 if ':' in host else socket.AF_INET
        try:
            sock = socket.socket(family, socket.SOCK_STREAM)
        except OSError as e:
            if host != '::':
                raise
            self.logger.warning(f"IPv6 unavailable ({e}), falling back to IPv4")
            host, sock = '0.0.0.0', socket.socket(socket.AF_INET, socket.SOCK_STREAM)

        try:
            if host == '::':
                # Accept IPv4 clients too (mapped addresses)
                sock.setsockopt(socket.IPPROTO_IPV6, socket.IPV6_V6ONLY, 0)
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            sock.bind((host, self.config.port))
            sock.listen(self.config.connection_queue)
        except OSError:
            sock.close()
            raise
        return sock

    def start(self):
        """
        Start the daemon.

        Returns:
            bool: True if the daemon is listening, False otherwise
        """
        if self.is_running:
            self.logger.warning("Daemon is already running")
            return True

        try:
            self.server_socket = self._create_socket()
        except OSError as e:
            self.logger.error(f"Error starting daemon on port {self.config.port}: {e}")
            self.server_socket = None
            return False

        self.server_socket.settimeout(ACCEPT_POLL_INTERVAL)
        self.thread_pool = ThreadPoolExecutor(
            max_workers=self.config.max_threads,
            thread_name_prefix="HTTPDaemonWorker"
        )
        self.is_running = True

        self.logger.info(f"Listening on port {self.server_port}")
        self.logger.info(f"Serving files from {self.config.root_directory}")

        self.accept_thread = threading.Thread(
            target=self._accept_connections,
            name="HTTPDaemonAccept",
            daemon=True
        )
        self.accept_thread.start()
        return True

    def stop(self):
        """
        Stop accepting connections and wait for in-flight requests.
        """
        if not self.is_running:
            return

        self.logger.info("Stopping daemon...")
        self.is_running = False

        if self.accept_thread is not None and self.accept_thread is not threading.current_thread():
            self.accept_thread.join()
        self.accept_thread = None

        if self.server_socket:
            self.server_socket.close()
            self.server_socket = None

        self.logger.debug("Shutting down thread pool...")
        self.thread_pool.shutdown(wait=True)
        self.thread_pool = None

        self.logger.info("Daemon stopped")

    def _accept_connections(self):
        """
        Accept incoming connections until stop() is called.
        """
        while self.is_running:
            try:
                client_socket, client_address = self.server_socket.accept()
            except socket.timeout:
                continue
            except OSError as e:
                if self.is_running:
                    self.logger.error(f"Error accepting connection: {e}")
                    # Sleep a bit to prevent CPU spinning on repeated errors
                    time.sleep(0.1)
                continue

            with self.active_connections_lock:
                self.active_connections += 1

            try:
                self.thread_pool.submit(self._handle_client, client_socket, client_address)
            except RuntimeError:
                # Pool already shut down
                client_socket.close()
                with self.active_connections_lock:
                    self.active_connections -= 1

    def _handle_client(self, client_socket, client_address):
        """
        Handle client connection.

        Args:
            client_socket: Client socket object
            client_address: Client address tuple
        """
        try:
            self.request_handler.handle_request(client_socket, client_address)
        finally:
            try:
                client_socket.shutdown(socket.SHUT_RDWR)
            except OSError:
                pass
            client_socket.close()

            with self.active_connections_lock:
                self.active_connections -= 1
