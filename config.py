"""Configuration management for the friendly URL service."""

import os
from typing import Optional
from pydantic_settings import BaseSettings
from pydantic import Field, field_validator

from friendly_urls.catalog import ItemKind
from friendly_urls.common.validators import is_valid_base_path
from friendly_urls.url_generator import UrlSettings


class Config(BaseSettings):
    """Application configuration."""
    
    # Storage settings
    store_backend: str = Field(
        default="json",
        description="Mapping store backend: 'json' (file) or 'postgres'"
    )
    
    data_file: str = Field(
        default="friendly-urls.json",
        description="Path of the JSON mapping file (json backend)"
    )
    
    postgres_url: Optional[str] = Field(
        default=None,
        description="PostgreSQL connection URL (postgres backend)"
    )
    
    postgres_create_tables: str = Field(
        default="0",
        description="Set to '1' to enable automatic table creation"
    )
    
    soft_delete: bool = Field(
        default=True,
        description="Deactivate mappings on delete instead of removing them"
    )
    
    # Redis settings (optional)
    redis_url: Optional[str] = Field(
        default=None,
        description="Redis connection URL for caching resolutions"
    )
    
    cache_ttl_seconds: int = Field(
        default=3600,
        description="Cache TTL in seconds"
    )
    
    # Catalog settings
    catalog_file: Optional[str] = Field(
        default=None,
        description="JSON catalog export to load at startup"
    )
    
    server_id: Optional[str] = Field(
        default=None,
        description="Media server identifier added to original URLs"
    )
    
    # URL policy
    base_url: str = Field(
        default="/web",
        description="Base path friendly URLs live under"
    )
    
    force_https: bool = Field(
        default=False,
        description="Use https for absolute friendly links"
    )
    
    public_host: Optional[str] = Field(
        default=None,
        description="Public origin for absolute friendly links (e.g., https://media.example.com)"
    )
    
    enable_movie_urls: bool = True
    enable_show_urls: bool = True
    enable_person_urls: bool = True
    enable_collection_urls: bool = True
    enable_genre_urls: bool = True
    enable_studio_urls: bool = True
    
    auto_generate_urls: bool = Field(
        default=True,
        description="Generate URLs for catalog changes and scan the catalog at startup"
    )
    
    # Server settings
    host: str = Field(
        default="0.0.0.0",
        description="Host to bind to"
    )
    
    port: int = Field(
        default=8097,
        description="Port to listen on"
    )
    
    workers: int = Field(
        default=1,
        ge=1,
        description="Number of uvicorn worker processes"
    )
    
    # Logging settings
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    
    log_file: Optional[str] = Field(
        default=None,
        description="Log file path (logs to stdout if not specified)"
    )
    
    log_json: bool = Field(
        default=False,
        description="Use JSON format for logs"
    )
    
    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
    }
    
    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        """Validate base path format."""
        is_valid, error = is_valid_base_path(v)
        if not is_valid:
            raise ValueError(error)
        return v
    
    @field_validator("store_backend")
    @classmethod
    def validate_store_backend(cls, v: str) -> str:
        v = v.lower()
        if v not in ("json", "postgres", "postgresql"):
            raise ValueError("store_backend must be 'json' or 'postgres'")
        return v
    
    def __init__(self, **kwargs):
        """Initialize config and set environment variables."""
        super().__init__(**kwargs)
        
        # The postgres store reads this flag directly
        os.environ["POSTGRES_CREATE_TABLES"] = self.postgres_create_tables
    
    def url_settings(self) -> UrlSettings:
        """Snapshot of the URL policy."""
        toggles = {
            ItemKind.MOVIE: self.enable_movie_urls,
            ItemKind.SHOW: self.enable_show_urls,
            ItemKind.PERSON: self.enable_person_urls,
            ItemKind.COLLECTION: self.enable_collection_urls,
            ItemKind.GENRE: self.enable_genre_urls,
            ItemKind.STUDIO: self.enable_studio_urls,
        }
        return UrlSettings(
            base_url=self.base_url,
            force_https=self.force_https,
            enabled_kinds=frozenset(kind for kind, enabled in toggles.items() if enabled),
            auto_generate=self.auto_generate_urls,
            server_id=self.server_id,
        )


def load_config() -> Config:
    """Load configuration from environment."""
    return Config()
