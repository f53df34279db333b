"""Web application for the friendly URL service."""

from .app_factory import create_app

__all__ = ["create_app"]
