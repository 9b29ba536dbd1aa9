#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Configuration Module for simplehttpd
------------------------------------
Handles loading and managing server configuration from various sources:
- Default configuration
- Configuration file (JSON)
- Command-line arguments

This module centralizes all configuration-related functionality.
"""

import os
import sys
import json
import logging
import argparse


class ServerConfig:
    """
    Server configuration manager.

    Loads and provides access to server configuration settings from various sources,
    with the following precedence (highest to lowest):
    1. Command-line arguments
    2. Configuration file
    3. Default values
    """

    # Default configuration settings
    DEFAULT_CONFIG = {
        "host": "::",
        "port": 8000,
        "directory": ".",
        "block_size": 32768,  # 32 KiB per body pull
        "max_threads": 256,  # Upper bound on concurrently served connections
        "request_timeout": 30,
        "connection_queue": 16,
        "max_header_size": 8192,
        "log_level": "INFO",
        "log_file": None,  # Console only
        "log_max_size": 10485760,  # 10 MB
        "log_backup_count": 5,
        "colored_logging": True,
        "server_name": "Simple HTTP Server"
    }

    def __init__(self, config_file=None, **kwargs):
        """
        Initialize the configuration with values from file and kwargs.

        Args:
            config_file: Path to the configuration file
            **kwargs: Additional configuration parameters that override file values
        """
        self._config = self.DEFAULT_CONFIG.copy()
        self.logger = logging.getLogger(__name__)

        if config_file:
            self.load_from_file(config_file)

        for key, value in kwargs.items():
            self._config[key] = value

    def load_from_file(self, config_path="config.json"):
        """
        Load configuration from a JSON file.

        Args:
            config_path: Path to the configuration file (default: config.json)

        Returns:
            bool: True if loaded successfully, False otherwise
        """
        if not os.path.exists(config_path):
            self.logger.warning(f"Configuration file {config_path} not found. Using defaults.")
            return False
        try:
            with open(config_path, 'r') as f:
                file_config = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            self.logger.error(f"Error loading configuration: {e}")
            return False

        self._config.update(file_config)
        self.logger.info(f"Loaded configuration from {config_path}")
        return True

    def get(self, key, default=None):
        """
        Get a configuration value.

        Args:
            key: Configuration key
            default: Default value if key is not found

        Returns:
            Value for the key or default if not found
        """
        return self._config.get(key, default)

    def set(self, key, value):
        """
        Set a configuration value.

        Args:
            key: Configuration key
            value: Value to set
        """
        self._config[key] = value

    def get_all(self):
        """
        Get all configuration values.

        Returns:
            dict: All configuration values
        """
        return self._config.copy()

    # Property accessors for common configuration values
    @property
    def host(self):
        return self.get('host')

    @property
    def port(self):
        return self.get('port')

    @property
    def directory(self):
        return self.get('directory')

    @property
    def root_directory(self):
        """Absolute path of the served directory."""
        return os.path.abspath(self.directory)

    @property
    def block_size(self):
        return self.get('block_size')

    @property
    def max_threads(self):
        return self.get('max_threads')

    @property
    def request_timeout(self):
        return self.get('request_timeout')

    @property
    def connection_queue(self):
        return self.get('connection_queue')

    @property
    def max_header_size(self):
        return self.get('max_header_size')

    @property
    def log_level(self):
        return self.get('log_level')

    @property
    def log_file(self):
        return self.get('log_file')

    @property
    def log_max_size(self):
        return self.get('log_max_size')

    @property
    def log_backup_count(self):
        return self.get('log_backup_count')

    @property
    def colored_logging(self):
        return self.get('colored_logging')

    @property
    def server_name(self):
        return self.get('server_name')


class OptionParser(argparse.ArgumentParser):
    """Argument parser that reports failures on stdout and exits with status 1."""

    def error(self, message):
        print(f"Option parsing failed: {message}")
        sys.exit(1)


def build_parser():
    parser = OptionParser(prog='simplehttpd', description='- start http server')

    parser.add_argument('-p', '--port', type=int, help='Port to listen on (default: 8000)')
    parser.add_argument('-d', '--directory', type=str, help='Directory to serve (default: current directory)')
    parser.add_argument('-H', '--host', type=str, help='Address to bind to (default: :: dual-stack)')
    parser.add_argument('-c', '--config', type=str, help='Path to JSON configuration file')

    # Logging options
    parser.add_argument('--log-level', type=str, choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
                        help='Logging level')
    parser.add_argument('--log-file', type=str, help='Path to log file')
    parser.add_argument('--no-color', action='store_true', help='Disable colored logging')

    # Server behavior options
    parser.add_argument('--max-threads', type=int, help='Maximum number of worker threads')
    parser.add_argument('--request-timeout', type=int, help='Request timeout in seconds')
    return parser


def parse_args(args=None):
    """
    Parse command line arguments into a configuration.

    Args:
        args: Command line arguments to parse (default: None, uses sys.argv)

    Returns:
        ServerConfig: Configuration instance
    """
    parsed_args = build_parser().parse_args(args)

    # Convert arguments to dictionary, excluding None values
    config_args = {k: v for k, v in vars(parsed_args).items() if v is not None}
    config_file = config_args.pop('config', None)

    # Special handling for boolean flags
    if config_args.pop('no_color', False):
        config_args['colored_logging'] = False

    return ServerConfig(config_file, **config_args)
