"""Slug generation utilities."""

import re
import unicodedata
from typing import Optional


class SlugNormalizer:
    """Turn display names into URL-safe slugs."""
    
    # Anything that is not a lowercase ASCII letter, digit, whitespace or hyphen
    INVALID_CHARS = re.compile(r"[^a-z0-9\s-]")
    WHITESPACE = re.compile(r"\s+")
    HYPHENS = re.compile(r"-+")
    
    def create_slug(self, text: Optional[str]) -> str:
        """Create a URL-friendly slug from the input text.
        
        Accents are removed by decomposing the text and dropping combining
        marks, so "Amélie" becomes "amelie". Characters outside
        ``[a-z0-9 -]`` are removed, whitespace runs become a single hyphen
        and the result never starts or ends with a hyphen.
        
        Args:
            text: Text to convert (None is treated as empty)
            
        Returns:
            Slug, possibly empty. An empty slug means the text cannot be used
            in a friendly URL.
        """
        if not text:
            return ""
        
        decomposed = unicodedata.normalize("NFD", str(text))
        stripped = "".join(c for c in decomposed if not unicodedata.combining(c))
        slug = unicodedata.normalize("NFC", stripped).lower()
        
        slug = self.INVALID_CHARS.sub("", slug)
        slug = self.WHITESPACE.sub("-", slug)
        slug = self.HYPHENS.sub("-", slug)
        return slug.strip("-")
    
    __call__ = create_slug


_default_normalizer = SlugNormalizer()


def slugify(text: Optional[str]) -> str:
    """Module level shortcut for :meth:`SlugNormalizer.create_slug`."""
    return _default_normalizer.create_slug(text)
