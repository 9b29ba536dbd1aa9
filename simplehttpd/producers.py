#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Body Producers for simplehttpd
------------------------------
A producer is a request-scoped object that hands response body chunks to the
HTTP engine on demand:

- read(pos, max_size) returns the next chunk (bytes), b'' when no data is
  available right now, or END_OF_STREAM once the body is complete.
- close() releases the underlying handle. It may be called more than once.

FileStream streams a regular file; DirListing streams an anchor list of the
entries of a directory.
"""

import os
import logging

# Returned by read() when the body is complete
END_OF_STREAM = None

# Smallest destination capacity DirListing formats a new entry into
MIN_CAPACITY = 512


class FileStream:
    """
    Producer backed by an open regular file.

    Reads are addressed by absolute offset, so any range can be pulled again.
    """

    def __init__(self, file, size):
        """
        Args:
            file: File object opened in binary read mode
            size: File size in bytes, taken from fstat when it was opened
        """
        self.file = file
        self.size = size
        self.logger = logging.getLogger('FileStream')

    def read(self, pos, max_size):
        if self.file is None:
            return END_OF_STREAM
        self.file.seek(pos)
        return self.file.read(max_size)

    def close(self):
        if self.file is not None:
            self.logger.debug(f"Closing {self.file.name!r}")
            self.file.close()
            self.file = None

    @property
    def closed(self):
        return self.file is None


class DirListing:
    """
    Producer that lists a directory as one HTML anchor per visible entry.

    Entries whose name starts with a dot are skipped. The directory iterator
    only moves forward, so a listing cannot be restarted. An entry larger than
    the requested chunk is split across pulls instead of being truncated.
    """

    def __init__(self, iterator):
        """
        Args:
            iterator: os.scandir() iterator over the directory (bytes path)
        """
        self.iterator = iterator
        self.pending = b''
        self.logger = logging.getLogger('DirListing')

    @staticmethod
    def format_entry(name):
        """Format one directory entry name (bytes) as an anchor tag."""
        return b'<a href="/' + name + b'">' + name + b'</a><br>'

    def _next_entry(self):
        if self.iterator is None:
            return None
        for entry in self.iterator:
            name = os.fsencode(entry.name)
            if not name.startswith(b'.'):
                return self.format_entry(name)
        self._close_iterator()
        return None

    def read(self, pos, max_size):
        if not self.pending:
            if max_size < MIN_CAPACITY:
                return b''
            entry = self._next_entry()
            if entry is None:
                return END_OF_STREAM
            self.pending = entry

        chunk = self.pending[:max_size]
        self.pending = self.pending[max_size:]
        return chunk

    def _close_iterator(self):
        if self.iterator is not None:
            self.iterator.close()
            self.iterator = None

    def close(self):
        self._close_iterator()
        self.pending = b''

    @property
    def closed(self):
        return self.iterator is None
