"""FastAPI integration layer."""

from bimtalk.server.app import create_app

__all__ = ["create_app"]
