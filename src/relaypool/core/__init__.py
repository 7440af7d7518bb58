"""
Core layer: exceptions, structured logging and YAML loading.

Shared infrastructure with no Nostr semantics of its own:
- Exceptions: the relaypool error hierarchy
- Logger: Structured logging with key=value or JSON output
- load_yaml: Safe YAML loading for configuration files

Example:
    from relaypool.core import Logger, setup_logging

    setup_logging("DEBUG")
    logger = Logger("my.module")
    logger.info("started", relays=3)
"""

from .exceptions import (
    ConfigurationError,
    ConnectivityError,
    InvalidEncodingError,
    InvalidKeyError,
    RelayConnectionError,
    RelayPoolError,
)
from .logger import Logger, StructuredFormatter, setup_logging
from .yaml import load_yaml


__all__ = [
    "ConfigurationError",
    "ConnectivityError",
    "InvalidEncodingError",
    "InvalidKeyError",
    "Logger",
    "RelayConnectionError",
    "RelayPoolError",
    "StructuredFormatter",
    "load_yaml",
    "setup_logging",
]
