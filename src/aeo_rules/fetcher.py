"""Fetch a page and turn it into PageContent."""

import time
from typing import Optional

import httpx

from .models import PageContent

DEFAULT_HEADERS = {
    "User-Agent": "Mozilla/5.0 (compatible; AEORules/0.1)",
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9",
}


class FetchError(Exception):
    """The page could not be fetched."""


def normalize_url(url: str) -> str:
    """Ensure URL has a scheme."""
    url = url.strip()
    if not url.startswith(("http://", "https://")):
        url = "https://" + url
    return url


def fetch_page(
    url: str,
    timeout: float = 30.0,
    client: Optional[httpx.Client] = None,
) -> tuple[PageContent, int]:
    """Fetch ``url`` following redirects.

    Returns:
        The parsed page content (keyed by the final URL) and the fetch time in ms.

    Raises:
        FetchError: on timeout, HTTP error status or transport failure.
    """
    url = normalize_url(url)
    start_time = time.time()

    try:
        if client is not None:
            response = client.get(url)
            response.raise_for_status()
        else:
            with httpx.Client(headers=DEFAULT_HEADERS, timeout=timeout, follow_redirects=True) as own_client:
                response = own_client.get(url)
                response.raise_for_status()
    except httpx.TimeoutException as e:
        raise FetchError(f"Timeout after {timeout}s") from e
    except httpx.HTTPStatusError as e:
        raise FetchError(f"HTTP {e.response.status_code}") from e
    except httpx.RequestError as e:
        raise FetchError(f"Request failed: {e}") from e

    fetch_time_ms = int((time.time() - start_time) * 1000)
    return PageContent.from_html(str(response.url), response.text), fetch_time_ms
