#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
simplehttpd
-----------
Serve a directory over HTTP. This is the main entry point for the server.

    python run.py --port 8000 --directory /srv/files
"""

import sys

from simplehttpd.cli import main


if __name__ == '__main__':
    sys.exit(main())
