"""
Core module - Configuration and cross-cutting concerns.

This module provides:
- config.py         : Environment-based configuration management
- logging_config.py : Centralized logging setup
- exceptions.py     : Error taxonomy shared by the store and the API
- crypto.py         : Session encryption key bootstrap and cipher
- validators.py     : Session id, bearer token and identifier helpers
- audit.py          : Request audit and security header middleware
"""
from dbconsole.core.config import get_settings, Settings
from dbconsole.core.logging_config import setup_logging, get_logger

__all__ = [
    "get_settings",
    "Settings",
    "setup_logging",
    "get_logger",
]
