"""Friendly URL routes without the base path prefix.

The middleware handles paths under the configured base path (e.g.
/web/movie/inception-2010). These routes accept the short form
(/movie/inception-2010) and resolve it against the same mappings.
"""

from fastapi import APIRouter, Request, HTTPException, status
from fastapi.responses import RedirectResponse

from friendly_urls.resolver import RedirectTarget

router = APIRouter()


async def _resolve(request: Request, kind: str, *segments: str):
    gateway = request.app.state.service.gateway
    
    result = await gateway.resolve_slug(kind, *segments)
    
    if isinstance(result, RedirectTarget):
        # Permanent redirect: the friendly URL is the canonical public address
        return RedirectResponse(url=result.url, status_code=result.status_code)
    
    friendly_url = "/".join(("", kind) + segments)
    raise HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"Content not found for URL: {friendly_url}",
    )


@router.get("/movie/{movie_slug}", include_in_schema=False)
async def movie_url(request: Request, movie_slug: str):
    return await _resolve(request, "movie", movie_slug)


@router.get("/show/{show_slug}", include_in_schema=False)
async def show_url(request: Request, show_slug: str):
    return await _resolve(request, "show", show_slug)


@router.get("/show/{show_slug}/{season_slug}", include_in_schema=False)
async def show_season_url(request: Request, show_slug: str, season_slug: str):
    return await _resolve(request, "show", show_slug, season_slug)


@router.get("/show/{show_slug}/{season_slug}/{episode_slug}", include_in_schema=False)
async def show_episode_url(request: Request, show_slug: str, season_slug: str, episode_slug: str):
    return await _resolve(request, "show", show_slug, season_slug, episode_slug)


@router.get("/person/{person_slug}", include_in_schema=False)
async def person_url(request: Request, person_slug: str):
    return await _resolve(request, "person", person_slug)


@router.get("/collection/{collection_slug}", include_in_schema=False)
async def collection_url(request: Request, collection_slug: str):
    return await _resolve(request, "collection", collection_slug)


@router.get("/genre/{genre_slug}", include_in_schema=False)
async def genre_url(request: Request, genre_slug: str):
    return await _resolve(request, "genre", genre_slug)


@router.get("/studio/{studio_slug}", include_in_schema=False)
async def studio_url(request: Request, studio_slug: str):
    return await _resolve(request, "studio", studio_slug)


@router.get("/health", include_in_schema=False)
async def health_check_web(request: Request):
    """Health check endpoint (simple version for load balancers)."""
    service = request.app.state.service
    
    health = await service.health_check()
    
    if health["overall"]:
        return {"status": "healthy"}
    else:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Service unhealthy",
        )
