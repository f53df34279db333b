"""Pydantic schemas for API requests and responses."""

from pydantic import BaseModel, Field
from typing import Optional, List, Literal
from datetime import datetime


class MappingResponse(BaseModel):
    """A friendly URL mapping."""
    
    id: str
    item_id: str
    item_type: str
    friendly_url: str
    original_url: str
    created_at: datetime
    updated_at: Optional[datetime] = None
    is_active: bool
    access_count: int
    last_accessed: Optional[datetime] = None


class MappingListResponse(BaseModel):
    """All mappings."""
    
    count: int
    mappings: List[MappingResponse]


class GenerateResponse(BaseModel):
    """Response after generating a friendly URL for an item."""
    
    item_id: str = Field(..., description="Catalog item identifier")
    status: str = Field(..., description="created, exists or conflict")
    friendly_url: str = Field(..., description="The friendly URL path")
    absolute_url: Optional[str] = Field(None, description="Absolute friendly link when the public host is known")
    
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "item_id": "a1b2c3",
                    "status": "created",
                    "friendly_url": "/web/movie/inception-2010",
                    "absolute_url": "https://media.example.com/web/movie/inception-2010",
                }
            ]
        }
    }


class ScanResponse(BaseModel):
    """Bulk generation counts."""
    
    processed_count: int
    generated_count: int
    failed_count: int = 0
    cancelled: bool = False


class CatalogItemModel(BaseModel):
    """A catalog item as sent by the media server."""
    
    id: str = Field(..., min_length=1, max_length=64)
    kind: str = Field(..., description="movie, show, season, episode, person, collection, genre, studio")
    name: str = ""
    production_year: Optional[int] = None
    series_name: Optional[str] = None
    season_index: Optional[int] = None
    episode_index: Optional[int] = None
    parent_id: Optional[str] = None
    series_id: Optional[str] = None


class CatalogEventRequest(BaseModel):
    """Catalog change notification."""
    
    change: Literal["added", "updated"]
    item: CatalogItemModel


class CatalogEventResponse(BaseModel):
    accepted: bool
    item_id: str


class HealthResponse(BaseModel):
    """Health check response."""
    
    status: str = Field(..., description="Overall status")
    database: str = Field(..., description="Store status")
    cache: str = Field(..., description="Cache status")
    timestamp: datetime = Field(..., description="Check timestamp")


class ErrorResponse(BaseModel):
    """Error response."""
    
    error: str = Field(..., description="Error message")
    detail: Optional[str] = Field(None, description="Detailed error information")


class StatisticsResponse(BaseModel):
    """Statistics response."""
    
    total_mappings: int
    active_mappings: int
    total_accesses: int
    database: str
    cache_enabled: bool
    auto_generate: bool
    worker_state: str
    last_scan: Optional[ScanResponse] = None
