"""
Artist Lookup - Validates lookup requests and resolves an artist image.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from errors import InvalidArgumentError
from genius_client import GeniusClient

logger = logging.getLogger(__name__)

# Protocol variants of the callable
LEGACY = "legacy"
V2 = "v2"

# The legacy protocol started with integer versions and moved to semver;
# only these exact values were ever released.
SUPPORTED_VERSIONS = (1, "1.0.0")


@dataclass(frozen=True)
class ArtistLookupRequest:
    name: str
    version: Any = None


@dataclass(frozen=True)
class ArtistLookupResponse:
    image_url: Optional[str]

    def to_dict(self) -> Dict[str, Optional[str]]:
        return {"imageUrl": self.image_url}


def _is_supported_version(version: Any) -> bool:
    # True == 1 in Python, but a boolean is not a version
    if isinstance(version, bool):
        return False
    return version in SUPPORTED_VERSIONS


def parse_lookup_request(data: Any, protocol: str = V2) -> ArtistLookupRequest:
    """
    Validate the callable payload and build a lookup request.

    Args:
        data: The `data` member of the callable request
        protocol: LEGACY requires a supported `version`, V2 ignores it

    Returns:
        ArtistLookupRequest

    Raises:
        InvalidArgumentError: If `name` (or, for LEGACY, `version`) is invalid
    """
    if protocol not in (LEGACY, V2):
        raise ValueError(f"Invalid protocol: {protocol}")

    if not isinstance(data, dict):
        raise InvalidArgumentError("The `name` argument is required")

    name = data.get("name")
    if not isinstance(name, str) or not name:
        raise InvalidArgumentError("The `name` argument is required")

    if protocol == V2:
        return ArtistLookupRequest(name=name)

    version = data.get("version")
    if version is None or version == "" or version == 0:
        raise InvalidArgumentError("The `version` argument is required")
    if not _is_supported_version(version):
        logger.warning("Rejected unsupported version %r", version)
        raise InvalidArgumentError("Invalid version")

    return ArtistLookupRequest(name=name, version=version)


def lookup_artist(request: ArtistLookupRequest, client: GeniusClient) -> ArtistLookupResponse:
    """Return the image of the top search hit for the requested artist."""
    hits = client.search(request.name)
    if not hits:
        logger.info("No artist found for %r", request.name)
        return ArtistLookupResponse(image_url=None)
    return ArtistLookupResponse(image_url=hits[0].image_url)
