#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Response Module for simplehttpd
-------------------------------
A Response pairs an HTTP status with a pull-based body source. The engine
pulls chunks with read(pos, max_size) and calls release() exactly once when
it is done with the response, whether the body was fully sent or not.
"""

import threading

from .producers import END_OF_STREAM

DEFAULT_BLOCK_SIZE = 32 * 1024


class BufferProducer:
    """Producer serving an in-memory body."""

    def __init__(self, data):
        self.data = data

    def read(self, pos, max_size):
        if pos >= len(self.data):
            return END_OF_STREAM
        return self.data[pos:pos + max_size]

    def close(self):
        self.data = b''


class Response:
    """
    HTTP response whose body is produced on demand.

    Attributes:
        status: HTTP status code
        producer: Object with read(pos, max_size) and close()
        size: Declared body length in bytes, or None when unknown
        block_size: Largest chunk the engine asks for in one pull
    """

    def __init__(self, status, producer, size=None, block_size=DEFAULT_BLOCK_SIZE):
        self.status = status
        self.producer = producer
        self.size = size
        self.block_size = block_size
        self._released = False
        self._lock = threading.Lock()

    @classmethod
    def from_producer(cls, producer, size=None, block_size=DEFAULT_BLOCK_SIZE, status=200):
        return cls(status, producer, size=size, block_size=block_size)

    @classmethod
    def from_buffer(cls, data, status=200):
        if isinstance(data, str):
            data = data.encode('utf-8')
        return cls(status, BufferProducer(data), size=len(data))

    def read(self, pos, max_size):
        return self.producer.read(pos, max_size)

    def release(self):
        """Close the body source. Only the first call has an effect."""
        with self._lock:
            if self._released:
                return
            self._released = True
        self.producer.close()

    @property
    def released(self):
        return self._released

    def __repr__(self):
        return f"<Response status={self.status} size={self.size} producer={type(self.producer).__name__}>"
