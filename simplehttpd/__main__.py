#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
simplehttpd Module Entry Point
------------------------------
Allows running the server with ``python -m simplehttpd``.
"""

import sys

from .cli import main

if __name__ == '__main__':
    sys.exit(main())
