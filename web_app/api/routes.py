"""API routes implementation."""

from fastapi import APIRouter, Request, HTTPException, status
from fastapi.responses import RedirectResponse
from datetime import datetime, timezone

from .schemas import (
    MappingResponse,
    MappingListResponse,
    GenerateResponse,
    ScanResponse,
    CatalogEventRequest,
    CatalogEventResponse,
    HealthResponse,
    ErrorResponse,
    StatisticsResponse,
)
from friendly_urls.catalog import CatalogChangeNotification, CatalogItem, ChangeType, InMemoryCatalog
from friendly_urls.common.headers import build_public_origin
from friendly_urls.common.url_builder import build_absolute_url
from friendly_urls.common.validators import is_valid_item_id
from friendly_urls.errors import ScanInProgressError, StorageError
from friendly_urls.resolver import RedirectTarget
from friendly_urls.sync_worker import GenerationStatus

router = APIRouter()


def _mapping_response(mapping) -> MappingResponse:
    return MappingResponse(**mapping.to_dict())


@router.get(
    "/resolve/{friendly_path:path}",
    responses={
        301: {"description": "Redirect to the original URL"},
        404: {"model": ErrorResponse, "description": "No mapping for this URL"},
    },
    summary="Resolve friendly URL",
    description="Resolve a friendly URL given relative to the base path (e.g. movie/inception-2010).",
)
async def resolve_friendly_url(request: Request, friendly_path: str):
    """Resolve a friendly URL and redirect."""
    gateway = request.app.state.service.gateway
    
    kind, _, rest = friendly_path.strip("/").partition("/")
    result = await gateway.resolve_slug(kind, rest)
    
    if isinstance(result, RedirectTarget):
        return RedirectResponse(url=result.url, status_code=result.status_code)
    
    raise HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"Content not found for URL: {friendly_path}",
    )


@router.post(
    "/generate/{item_id}",
    response_model=GenerateResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Unsupported item kind or invalid id"},
        404: {"model": ErrorResponse, "description": "Item not found"},
        500: {"model": ErrorResponse, "description": "Internal server error"},
    },
    summary="Generate friendly URL",
    description="Generate a friendly URL for one catalog item. Returns the existing URL if the item already has one.",
)
async def generate_url(request: Request, item_id: str):
    """Generate a friendly URL for a catalog item."""
    service = request.app.state.service
    config = request.app.state.config
    
    is_valid, error = is_valid_item_id(item_id)
    if not is_valid:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=error)
    
    try:
        result = await service.generate_for_item(item_id)
    except StorageError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Internal error: {str(e)}",
        )
    
    if result.status == GenerationStatus.NOT_FOUND:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Item not found")
    
    if result.status == GenerationStatus.UNSUPPORTED:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Cannot generate URL for this item type",
        )
    
    origin = build_public_origin(
        headers=dict(request.headers),
        fallback_origin=config.public_host,
        request_scheme=request.url.scheme,
        request_host=request.headers.get("host"),
        force_https=config.force_https,
    )
    
    return GenerateResponse(
        item_id=item_id,
        status=result.status.value,
        friendly_url=result.friendly_url,
        absolute_url=build_absolute_url(result.friendly_url, origin),
    )


@router.post(
    "/generate",
    response_model=ScanResponse,
    responses={
        409: {"model": ErrorResponse, "description": "A scan is already running"},
    },
    summary="Generate friendly URLs for the whole catalog",
)
async def generate_all(request: Request):
    """Run a full catalog scan."""
    service = request.app.state.service
    
    try:
        result = await service.generate_all()
    except ScanInProgressError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    
    return ScanResponse(**result.to_dict())


@router.post(
    "/catalog/events",
    response_model=CatalogEventResponse,
    status_code=status.HTTP_202_ACCEPTED,
    summary="Catalog change notification",
    description="Webhook for the media server: an item was added or updated.",
)
async def catalog_event(request: Request, body: CatalogEventRequest):
    """Queue a catalog change for the sync worker."""
    service = request.app.state.service
    
    item = CatalogItem.from_dict(body.item.model_dump())
    if isinstance(service.catalog, InMemoryCatalog):
        item = service.catalog.add(item)
    
    service.worker.notify(CatalogChangeNotification(change=ChangeType(body.change), item=item))
    
    return CatalogEventResponse(accepted=True, item_id=item.id)


@router.get(
    "/mappings",
    response_model=MappingListResponse,
    summary="List mappings",
    description="List every mapping, including inactive ones.",
)
async def list_mappings(request: Request):
    service = request.app.state.service
    
    mappings = await service.list_mappings()
    
    return MappingListResponse(
        count=len(mappings),
        mappings=[_mapping_response(m) for m in mappings],
    )


@router.get(
    "/mappings/{mapping_id}",
    response_model=MappingResponse,
    responses={404: {"model": ErrorResponse, "description": "Mapping not found"}},
    summary="Get mapping",
)
async def get_mapping(request: Request, mapping_id: str):
    service = request.app.state.service
    
    mapping = await service.get_mapping(mapping_id)
    if mapping is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Mapping '{mapping_id}' not found",
        )
    
    return _mapping_response(mapping)


@router.delete(
    "/mappings/{mapping_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"model": ErrorResponse, "description": "Mapping not found"}},
    summary="Delete mapping",
    description="Deactivate (or remove, depending on configuration) a mapping.",
)
async def delete_mapping(request: Request, mapping_id: str):
    service = request.app.state.service
    
    deleted = await service.delete_mapping(mapping_id)
    if not deleted:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Mapping '{mapping_id}' not found",
        )


@router.get(
    "/stats",
    response_model=StatisticsResponse,
    summary="Get statistics",
    description="Get service-wide statistics.",
)
async def get_statistics(request: Request):
    """Get service statistics."""
    service = request.app.state.service
    
    stats = await service.get_statistics()
    
    return StatisticsResponse(**stats)


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
    description="Check if the service is healthy.",
)
async def health_check(request: Request):
    """Health check endpoint."""
    service = request.app.state.service
    
    health = await service.health_check()
    
    return HealthResponse(
        status="healthy" if health["overall"] else "unhealthy",
        database="healthy" if health["database"] else "unhealthy",
        cache="healthy" if health["cache"] else "unhealthy",
        timestamp=datetime.now(timezone.utc),
    )
