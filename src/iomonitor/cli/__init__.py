"""
Command-line interface for the iomonitor package.
"""

from .main import main_cli

__all__ = [
    "main_cli",
]
