"""
Rate limit dependencies.

Each endpoint group gets its own budget per client address and case.
"""

from typing import Callable

from fastapi import Depends, Request

from casevault.api.deps.dependencies import ServiceCache, get_service_cache
from casevault.api.error_handling import to_http_exception
from casevault.core.exceptions import RateLimitedError
from casevault.core.rate_limiter import RateLimitRule


def client_identifier(request: Request) -> str:
    """First X-Forwarded-For hop, else the socket peer, else "unknown"."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    if request.client is not None:
        return request.client.host
    return "unknown"


def rate_limited(scope: str) -> Callable:
    """
    Build a dependency enforcing the ``scope`` budget ("api", "search", "upload").

    The identifier combines client address, scope and the case id when
    the route has one.
    """

    async def dependency(
        request: Request, cache: ServiceCache = Depends(get_service_cache)
    ) -> None:
        settings = cache.settings.rate_limit
        if not settings.enabled:
            return
        rule = RateLimitRule(
            limit=getattr(settings, f"{scope}_limit"),
            window_seconds=settings.window_seconds,
        )
        case_id = request.path_params.get("case_id")
        identifier = f"{client_identifier(request)}:{scope}"
        if case_id:
            identifier = f"{identifier}:{case_id}"
        try:
            await cache.rate_limiter.check(identifier, rule)
        except RateLimitedError as e:
            raise to_http_exception(e)

    return dependency
