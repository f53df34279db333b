"""Middleware for the friendly URL web app."""

from .friendly_urls import FriendlyUrlMiddleware
from .logging import LoggingMiddleware

__all__ = ["FriendlyUrlMiddleware", "LoggingMiddleware"]
