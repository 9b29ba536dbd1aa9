#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Content Resolver for simplehttpd
--------------------------------
Maps a request path to the content served for it:

- a path naming a regular file under the root is streamed as-is;
- anything else gets a listing of the root directory.

The resolver is the per-request callback handed to the HTTP engine. It never
touches the process working directory; every path is joined onto the root
captured when the resolver is created.
"""

import os
import stat
import logging

from .producers import FileStream, DirListing
from .response import Response, DEFAULT_BLOCK_SIZE
from .utils import is_path_safe

OPEN_FLAGS = os.O_RDONLY | getattr(os, 'O_NONBLOCK', 0) | getattr(os, 'O_BINARY', 0)


class ContentResolver:
    """
    Per-request callback resolving (method, path) to a Response.

    Returns None to refuse the request; the engine then drops the connection
    without sending a response.
    """

    def __init__(self, root, block_size=DEFAULT_BLOCK_SIZE):
        """
        Args:
            root: Directory content is served from
            block_size: Chunk size declared for streamed bodies
        """
        self.root = os.path.abspath(root)
        self.block_size = block_size
        self.logger = logging.getLogger('ContentResolver')

    def __call__(self, method, path):
        return self.resolve(method, path)

    def resolve(self, method, path):
        """
        Resolve a request.

        Args:
            method: HTTP method
            path: Decoded URL path, without query string

        Returns:
            Response or None if the request is refused
        """
        if method != 'GET':
            self.logger.debug(f"Refusing {method} {path!r}")
            return None

        file_path = self.local_path(path)
        if file_path is not None:
            try:
                fd = os.open(file_path, OPEN_FLAGS)
            except (OSError, ValueError) as e:
                # ValueError: embedded null byte
                self.logger.debug(f"Cannot open {file_path!r}: {e}")
            else:
                return self._serve_descriptor(fd, file_path)

        return self._serve_listing()

    def local_path(self, path):
        """
        Map a URL path onto the root directory.

        Returns:
            str: Absolute filesystem path, or None if it would leave the root
        """
        relative = path[1:] if path.startswith('/') else path
        file_path = os.path.normpath(os.path.join(self.root, relative))
        if not is_path_safe(self.root, file_path):
            self.logger.warning(f"Path {path!r} escapes the document root")
            return None
        return file_path

    def _serve_descriptor(self, fd, file_path):
        try:
            st = os.fstat(fd)
        except OSError as e:
            self.logger.debug(f"Cannot stat {file_path!r}: {e.strerror}")
            os.close(fd)
            return self._serve_listing()

        if not stat.S_ISREG(st.st_mode):
            # Not a regular file, refuse to serve it
            os.close(fd)
            return self._serve_listing()

        try:
            file = os.fdopen(fd, 'rb')
        except OSError as e:
            self.logger.error(f"Internal error wrapping descriptor for {file_path!r}: {e}")
            os.close(fd)
            return None

        return Response.from_producer(
            FileStream(file, st.st_size),
            size=st.st_size,
            block_size=self.block_size
        )

    def _serve_listing(self):
        try:
            iterator = os.scandir(os.fsencode(self.root))
        except OSError as e:
            # Most likely cause: more concurrent requests than available file descriptors
            self.logger.error(f"Failed to open directory {self.root}: {e.strerror}")
            return Response.from_buffer(
                f"Failed to open directory `.': {e.strerror}\n",
                status=503
            )

        return Response.from_producer(
            DirListing(iterator),
            size=None,
            block_size=self.block_size
        )
