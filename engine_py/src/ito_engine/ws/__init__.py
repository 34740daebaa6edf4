"""
WebSocket server and event handling for the ito game.
"""

from .server import app

__all__ = ["app"]
