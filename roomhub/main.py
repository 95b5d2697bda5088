"""ASGI entrypoint for the RoomHub accounts API.

Served with ``uvicorn roomhub.main:app``.
"""

from .core.app_factory import create_application

app = create_application()

__all__ = ("app",)
