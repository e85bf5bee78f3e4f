"""
CLI module for the top.gg client.
"""

from .main import TopggCLI, main

__all__ = [
    "TopggCLI",
    "main",
]
