#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
simplehttpd
-----------
A minimal static file HTTP server.

A request for a path naming a regular file under the served directory streams
that file; any other path streams an HTML listing of the served directory.
Only GET is supported.
"""

__version__ = '1.0.0'

from .config import ServerConfig, parse_args
from .daemon import HTTPDaemon
from .handler import ConnectionHandler
from .producers import FileStream, DirListing, END_OF_STREAM
from .resolver import ContentResolver
from .response import Response
from .server import FileServer
from .utils import setup_logging

# Make these classes available at the package level
__all__ = [
    'ServerConfig', 'parse_args', 'HTTPDaemon', 'ConnectionHandler',
    'FileStream', 'DirListing', 'END_OF_STREAM', 'ContentResolver',
    'Response', 'FileServer', 'setup_logging'
]
