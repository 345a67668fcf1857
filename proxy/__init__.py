"""
Chat gateway - HTTP server package.

Serves the OpenAI Chat Completions and Anthropic Messages surfaces in front
of a single OpenAI-protocol upstream.
"""
from .server import ProxyServer
from .app import app

__version__ = "1.0.0"

__all__ = [
    'ProxyServer',
    'app',
]
