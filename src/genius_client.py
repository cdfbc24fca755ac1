"""
Genius Client - Searches the Genius API for artists.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import requests

from config import DEFAULT_GENIUS_API_URL
from errors import UpstreamError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SearchHit:
    """A single search hit, reduced to the fields we use."""

    image_url: Optional[str]

    @classmethod
    def from_dict(cls, hit: Any) -> "SearchHit":
        """
        Decode one entry of `response.hits`.

        Raises:
            UpstreamError: If `result.primary_artist.image_url` is missing or not a string
        """
        result = hit.get("result") if isinstance(hit, dict) else None
        primary_artist = result.get("primary_artist") if isinstance(result, dict) else None
        if not isinstance(primary_artist, dict):
            raise UpstreamError(
                "Malformed Genius response", details="hit is missing result.primary_artist"
            )
        if "image_url" not in primary_artist:
            raise UpstreamError(
                "Malformed Genius response", details="primary_artist.image_url is missing"
            )
        image_url = primary_artist["image_url"]
        if image_url is not None and not isinstance(image_url, str):
            raise UpstreamError(
                "Malformed Genius response", details="primary_artist.image_url is not a string"
            )
        return cls(image_url=image_url)


def parse_search_response(body: Any) -> List[SearchHit]:
    """
    Decode a search response body into search hits.

    Args:
        body: Decoded JSON body, shaped as {"response": {"hits": [...]}}

    Returns:
        List of SearchHit in API order

    Raises:
        UpstreamError: If the body does not have the expected shape
    """
    response = body.get("response") if isinstance(body, dict) else None
    hits = response.get("hits") if isinstance(response, dict) else None
    if not isinstance(hits, list):
        raise UpstreamError("Malformed Genius response", details="response.hits is missing")
    return [SearchHit.from_dict(hit) for hit in hits]


class GeniusClient:
    """Minimal client for the Genius search endpoint."""

    def __init__(
        self,
        token: str,
        base_url: str = DEFAULT_GENIUS_API_URL,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = None,
    ):
        """
        Initialize the client.

        Args:
            token: Genius API bearer token
            base_url: API base URL, without trailing slash
            session: Optional requests session (a new one is created otherwise)
            timeout: Optional request timeout in seconds
        """
        self.token = token
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.token}",
            "Content-Type": "application/json",
        }

    def search(self, query: str) -> List[SearchHit]:
        """
        Search Genius for `query`.

        Issues exactly one request; there is no retry.

        Returns:
            List of SearchHit, empty for HTTP 204 or no results

        Raises:
            UpstreamError: On a non-2xx status or a malformed body
            requests.RequestException: On transport failures
        """
        logger.info("Searching Genius for %r", query)
        response = self.session.get(
            f"{self.base_url}/search",
            params={"q": query},
            headers=self._headers(),
            timeout=self.timeout,
        )

        if response.status_code < 200 or response.status_code >= 300:
            logger.error(
                "Genius query failed: %s %s", response.status_code, response.reason
            )
            raise UpstreamError(
                "Genius query failed",
                details=f"{response.status_code} {response.reason}",
                status_code=response.status_code,
                status_text=response.reason,
            )

        if response.status_code == 204:
            logger.info("Genius returned no content for %r", query)
            return []

        try:
            body = response.json()
        except ValueError as e:
            raise UpstreamError("Malformed Genius response", details="body is not JSON") from e

        hits = parse_search_response(body)
        logger.info("Genius returned %d hits for %r", len(hits), query)
        return hits
