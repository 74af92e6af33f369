import logging
import posixpath
from typing import Optional
from urllib.parse import unquote, urlparse

import httpx

logger = logging.getLogger(__name__)

DEFAULT_URL_FILENAME = "image_from_url.jpg"


class ImageFetchError(Exception):
    """The image at a URL could not be downloaded."""
    pass


def filename_from_url(url: str, default: str = DEFAULT_URL_FILENAME) -> str:
    """Last path segment of a URL, or a default when there is none."""
    name = posixpath.basename(unquote(urlparse(url).path))
    return name or default


async def fetch_image(
    url: str,
    http_client: Optional[httpx.AsyncClient] = None,
    timeout: float = 60.0,
) -> bytes:
    """
    Download image bytes.

    Raises:
        ImageFetchError: transport failure, non-2xx status, or empty body
    """
    if not url or not url.startswith(("http://", "https://")):
        raise ImageFetchError(f"Not a downloadable image URL: {url!r}")

    try:
        if http_client is not None:
            response = await http_client.get(url, timeout=timeout, follow_redirects=True)
        else:
            async with httpx.AsyncClient(timeout=timeout, follow_redirects=True) as client:
                response = await client.get(url)
    except httpx.HTTPError as e:
        logger.error(f"Failed to download image from {url}: {e}")
        raise ImageFetchError(f"Could not download image from URL: {url}") from e

    if not response.is_success:
        raise ImageFetchError(
            f"Could not download image from URL: {url} (status {response.status_code})"
        )
    if not response.content:
        raise ImageFetchError(f"Received empty data from URL: {url}")

    logger.info(f"Downloaded {len(response.content)} bytes from {url}")
    return response.content
