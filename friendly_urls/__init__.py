"""Core business logic for friendly URLs."""

from .slug import SlugNormalizer, slugify
from .url_generator import UrlGenerator, UrlSettings
from .resolver import ResolutionGateway, RedirectTarget, Miss
from .sync_worker import CatalogSyncWorker, GenerationResult, GenerationStatus, ScanResult
from .service import FriendlyUrlService

__all__ = [
    "SlugNormalizer",
    "slugify",
    "UrlGenerator",
    "UrlSettings",
    "ResolutionGateway",
    "RedirectTarget",
    "Miss",
    "CatalogSyncWorker",
    "GenerationResult",
    "GenerationStatus",
    "ScanResult",
    "FriendlyUrlService",
]
