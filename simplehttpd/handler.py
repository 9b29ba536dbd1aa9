#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
HTTP Connection Handler Module for simplehttpd
----------------------------------------------
Parses one HTTP request from a client socket, hands (method, path) to the
request callback and streams the returned Response back to the client by
pulling its body chunk by chunk.
"""

import os
import socket
import logging
import traceback
import urllib.parse

from .producers import END_OF_STREAM
from .response import Response
from .utils import format_http_date

# HTTP status codes with descriptions
HTTP_STATUS = {
    200: 'OK',
    400: 'Bad Request',
    404: 'Not Found',
    431: 'Request Header Fields Too Large',
    500: 'Internal Server Error',
    503: 'Service Unavailable'
}


class BadRequest(Exception):
    """Raised when a request cannot be parsed."""

    def __init__(self, message, status=400):
        super().__init__(message)
        self.status = status


class ConnectionHandler:
    """
    Handles a single HTTP connection: one request, one response.

    The callback receives (method, path) and returns a Response, or None to
    refuse the request, in which case the connection is closed without
    sending anything.
    """

    def __init__(self, server_config, callback):
        """
        Initialize the connection handler.

        Args:
            server_config: Server configuration object
            callback: Callable (method, path) -> Response or None
        """
        self.config = server_config
        self.callback = callback
        self.logger = logging.getLogger('ConnectionHandler')

    def handle_request(self, client_socket, client_address):
        """
        Handle an incoming HTTP request. The socket is left open; the caller closes it.

        Args:
            client_socket: Client socket object
            client_address: Client address tuple (ip, port, ...)
        """
        peer = f"{client_address[0]}:{client_address[1]}"

        try:
            client_socket.settimeout(self.config.request_timeout)

            try:
                request = self._parse_request(client_socket)
            except BadRequest as e:
                self.logger.warning(f"Invalid request from {peer}: {e}")
                self._send_response(client_socket, Response.from_buffer(f"{e}\n", status=e.status))
                return

            if request is None:
                self.logger.debug(f"{peer} closed the connection before sending a request")
                return

            method = request['method']
            path = request['path']

            response = self.callback(method, path)
            if response is None:
                self.logger.info(f"{peer} - {method} {path!r} - refused")
                return

            self.logger.info(f"{peer} - {method} {path!r} - {response.status}")
            self._send_response(client_socket, response)

        except socket.timeout:
            self.logger.warning(f"Request from {peer} timed out")
        except ConnectionError as e:
            self.logger.warning(f"Connection error with {peer}: {e}")
        except Exception as e:
            self.logger.error(f"Error handling request from {peer}: {e}")
            self.logger.debug(traceback.format_exc())

    def _parse_request(self, client_socket):
        """
        Parse an HTTP request head from the client socket.

        Args:
            client_socket: Client socket object

        Returns:
            dict: Parsed request, or None if the client sent nothing

        Raises:
            BadRequest: If the request line is malformed or the head is too large
        """
        data = b''
        while b'\r\n\r\n' not in data:
            chunk = client_socket.recv(1024)
            if not chunk:
                if not data:
                    return None
                raise BadRequest("Incomplete request")
            data += chunk
            if len(data) > self.config.max_header_size and b'\r\n\r\n' not in data:
                raise BadRequest("Request header too large", status=431)

        head = data.split(b'\r\n\r\n', 1)[0]
        request_line, _, header_block = head.partition(b'\r\n')

        request_parts = request_line.split()
        if len(request_parts) != 3 or not request_parts[2].startswith(b'HTTP/'):
            raise BadRequest(f"Malformed request line {request_line.decode('iso-8859-1')!r}")

        request = {'headers': {}}
        request['method'] = request_parts[0].decode('iso-8859-1')
        request['http_version'] = request_parts[2].decode('iso-8859-1')

        # Drop the query string, then map the path bytes to a filesystem name
        # (surrogateescape keeps bytes that are not valid UTF-8)
        target = request_parts[1].split(b'?', 1)[0]
        request['path'] = os.fsdecode(urllib.parse.unquote_to_bytes(target))

        for header in header_block.decode('iso-8859-1').split('\r\n'):
            if ':' not in header:
                continue
            key, value = header.split(':', 1)
            request['headers'][key.strip().lower()] = value.strip()

        return request

    def _send_response(self, client_socket, response):
        """
        Send the response head, then pull and send the body.

        The response is released exactly once, whatever happens while sending.

        Args:
            client_socket: Client socket object
            response: Response to send
        """
        try:
            status_message = HTTP_STATUS.get(response.status, 'Unknown')
            headers = {
                'Date': format_http_date(),
                'Server': self.config.server_name,
                'Connection': 'close'
            }
            if response.size is not None:
                headers['Content-Length'] = str(response.size)

            head = f"HTTP/1.1 {response.status} {status_message}\r\n"
            head += "".join(f"{key}: {value}\r\n" for key, value in headers.items())
            head += "\r\n"
            client_socket.sendall(head.encode('iso-8859-1'))

            self._send_body(client_socket, response)
        finally:
            response.release()

    def _send_body(self, client_socket, response):
        pos = 0
        while response.size is None or pos < response.size:
            max_size = response.block_size
            if response.size is not None:
                max_size = min(max_size, response.size - pos)

            chunk = response.read(pos, max_size)
            if chunk is END_OF_STREAM:
                break
            if not chunk:
                # A known-size body that stops short (file truncated meanwhile)
                self.logger.warning(f"Body ended at {pos} of {response.size} bytes, aborting response")
                break

            client_socket.sendall(chunk)
            pos += len(chunk)
        return pos
