"""CLI package for the chat gateway

Parses command-line flags, applies them over the loaded settings and runs
the server.
"""

from cli.main import main

__all__ = [
    "main",
]
