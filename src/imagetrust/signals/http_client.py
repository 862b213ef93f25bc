"""JSON lookups against registry metadata APIs.

Docker Hub, Quay and the GitHub Packages API are queried for adoption
data through :func:`fetch_json`. An adoption lookup must never decide
the outcome of an evaluation, so this module has one rule: every
failure becomes an empty dict. The adoption strategies read ``{}`` as
"API unavailable" and apply their registry's fallback score.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT: float = 30.0

USER_AGENT: str = "imagetrust/0.1"


async def fetch_json(
    url: str,
    *,
    params: dict[str, str] | None = None,
    headers: dict[str, str] | None = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> dict[str, Any] | list[Any]:
    """GET ``url`` and decode the JSON body.

    Args:
        url: Registry API endpoint.
        params: Query string parameters.
        headers: Headers sent in addition to the User-Agent, such as a
            bearer token.
        timeout: Seconds allowed for the whole request.

    Returns:
        The decoded document (a dict or a list), or ``{}`` when the URL
        is malformed, the registry cannot be reached, it answers with an
        error status, or the body is not JSON.
    """
    merged = {"User-Agent": USER_AGENT, **(headers or {})}
    try:
        async with httpx.AsyncClient(
            timeout=timeout, headers=merged, follow_redirects=True,
        ) as client:
            response = await client.get(url, params=params)
            response.raise_for_status()
            return response.json()
    except httpx.TimeoutException:
        logger.warning("Registry API timed out after %.0fs: %s", timeout, url)
    except httpx.HTTPStatusError as exc:
        logger.warning("Registry API answered %d: %s", exc.response.status_code, url)
    except (httpx.RequestError, httpx.InvalidURL, ValueError) as exc:
        logger.warning("Registry API lookup failed for %s: %s", url, exc)
    return {}
