"""
FastAPI Endpoints for URL Shortener Service

This module defines all REST API endpoints with minimal logic.
Endpoints only handle:
- Request validation (Pydantic models)
- Rate limiting
- Mapping core errors to HTTP responses
- Delegating to service layer

Error mapping:
- InvalidURLError / bad code format -> 400
- ShortCodeNotFoundError -> 404
- ExhaustedRetriesError -> 503 with Retry-After (the caller may try again later)
- StoreUnavailableError -> 503
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from fastapi.responses import RedirectResponse

from shortener.api.schemas import (
    DecodeRequest,
    DecodeResponse,
    ShortenRequest,
    ShortenResponse,
    StatsResponse,
    URLListResponse,
)
from shortener.core.container import ServiceContainer
from shortener.core.exceptions import (
    ExhaustedRetriesError,
    InvalidURLError,
    ShortCodeNotFoundError,
    StoreUnavailableError,
)
from shortener.core.rate_limit import RATE_LIMITS, limiter
from shortener.core.validators import sanitize_short_code
from shortener.services.stats_service import MIN_SEARCH_LENGTH

RETRY_AFTER_SECONDS = "1"

router = APIRouter()


def get_container(request: Request) -> ServiceContainer:
    """Dependency returning the services wired for this application."""
    return request.app.state.container


def _not_found(short_code: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"Short code '{short_code}' not found"
    )


def _unavailable(error: Exception, retry_after: Optional[str] = None) -> HTTPException:
    headers = {"Retry-After": retry_after} if retry_after else None
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail=str(error),
        headers=headers,
    )


def _require_valid_code(short_code: str, container: ServiceContainer) -> str:
    sanitized_code = sanitize_short_code(
        short_code, alphabet=container.settings.SHORT_CODE_ALPHABET
    )
    if not sanitized_code:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid short code format: '{short_code}'. Short codes must contain only alphanumeric characters."
        )
    return sanitized_code


@router.post(
    "/shorten",
    response_model=ShortenResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a short URL",
    description="Takes a long URL and returns a shortened version with a unique code"
)
@limiter.limit(RATE_LIMITS["shorten"])
async def create_short_url(
    request: Request,  # Required for rate limiting (slowapi expects parameter named 'request')
    body: ShortenRequest,
    container: ServiceContainer = Depends(get_container)
) -> ShortenResponse:
    """
    Create a new short URL from a long URL, or return the existing one.
    """
    try:
        short_url_obj = await container.url_service.create_short_url(str(body.url))
    except InvalidURLError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    except ExhaustedRetriesError as e:
        raise _unavailable(e, retry_after=RETRY_AFTER_SECONDS)
    except StoreUnavailableError as e:
        raise _unavailable(e)

    return ShortenResponse(**container.stats_service.to_dict(short_url_obj))


@router.post(
    "/decode",
    response_model=DecodeResponse,
    summary="Decode a short URL",
    description="Takes a complete short URL and returns the original URL; counts as a visit"
)
@limiter.limit(RATE_LIMITS["decode"])
async def decode_short_url(
    request: Request,
    body: DecodeRequest,
    container: ServiceContainer = Depends(get_container)
) -> DecodeResponse:
    short_url = str(body.short_url)
    try:
        original_url = await container.redirect_service.decode(short_url)
    except ShortCodeNotFoundError as e:
        raise _not_found(e.short_code)
    except StoreUnavailableError as e:
        raise _unavailable(e)

    return DecodeResponse(short_url=short_url, original_url=original_url)


@router.get(
    "/urls",
    response_model=URLListResponse,
    summary="List short URLs",
    description="Newest first, optionally filtered by a substring of the original URL"
)
@limiter.limit(RATE_LIMITS["list"])
async def list_urls(
    request: Request,
    search: Optional[str] = Query(None, min_length=MIN_SEARCH_LENGTH),
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1),
    container: ServiceContainer = Depends(get_container)
) -> URLListResponse:
    try:
        listing = await container.stats_service.list_urls(search=search, page=page, limit=limit)
    except StoreUnavailableError as e:
        raise _unavailable(e)

    return URLListResponse(**listing)


@router.get(
    "/stats/{short_code}",
    response_model=StatsResponse,
    summary="Get URL statistics",
    description="Returns statistics for a short URL including visit count and creation date"
)
@limiter.limit(RATE_LIMITS["stats"])
async def get_url_stats(
    short_code: str,
    request: Request,  # Required for rate limiting
    container: ServiceContainer = Depends(get_container)
) -> StatsResponse:
    """
    Get statistics for a short URL. Does not count as a visit.

    Raises:
        HTTPException 400: If short code format is invalid
        HTTPException 404: If short code not found
        HTTPException 429: If rate limit exceeded
    """
    short_code = _require_valid_code(short_code, container)

    try:
        stats = await container.stats_service.get_stats(short_code)
    except ShortCodeNotFoundError:
        raise _not_found(short_code)
    except StoreUnavailableError as e:
        raise _unavailable(e)

    return StatsResponse(**stats)


@router.get(
    "/{short_code}",
    status_code=status.HTTP_302_FOUND,
    summary="Redirect to original URL",
    description="Takes a short code and redirects to the original long URL"
)
@limiter.limit(RATE_LIMITS["redirect"])
async def redirect_to_url(
    short_code: str,
    request: Request,
    container: ServiceContainer = Depends(get_container)
) -> RedirectResponse:
    """
    Redirect to the original URL for a given short code.

    The visit is counted in the same transaction as the lookup.

    Raises:
        HTTPException 400: If short code format is invalid
        HTTPException 404: If short code not found
        HTTPException 429: If rate limit exceeded
    """
    short_code = _require_valid_code(short_code, container)

    try:
        original_url = await container.redirect_service.resolve(short_code)
    except ShortCodeNotFoundError:
        raise _not_found(short_code)
    except StoreUnavailableError as e:
        raise _unavailable(e)

    return RedirectResponse(
        url=original_url,
        status_code=status.HTTP_302_FOUND
    )
