"""
Utility Module for the Customs Valuation System.

Common utilities used across the other modules:
    - Logging configuration
    - Exceptions
    - File helpers
"""

from .logger import setup_logger, get_logger
from .helpers import ensure_directory, generate_timestamp, safe_filename

__all__ = [
    'setup_logger',
    'get_logger',
    'ensure_directory',
    'generate_timestamp',
    'safe_filename'
]
