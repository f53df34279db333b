"""Common utilities for the friendly URL service."""

from .validators import is_valid_item_id, is_valid_base_path
from .url_builder import (
    normalize_base_path,
    build_friendly_path,
    build_original_url,
    build_absolute_url,
)
from .headers import extract_forwarded_headers, build_public_origin
from .logging_config import setup_logging

__all__ = [
    "is_valid_item_id",
    "is_valid_base_path",
    "normalize_base_path",
    "build_friendly_path",
    "build_original_url",
    "build_absolute_url",
    "extract_forwarded_headers",
    "build_public_origin",
    "setup_logging",
]
