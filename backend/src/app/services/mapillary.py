"""Mapillary API request construction.

Two upstream endpoints are exposed through the proxy:

**images**: image metadata inside a bounding box, from the Graph API.
**tiles**: Mapillary vector tiles (``mly1_public``) keyed by zoom/x/y.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlencode

from app.services.credentials import MapillaryCredential
from app.services.http_client import UpstreamResponse
from app.services.http_client import send_request

GRAPH_API_BASE_URL = "https://graph.mapillary.com"
TILES_BASE_URL = "https://tiles.mapillary.com/maps/vtp/mly1_public/2"

IMAGE_FIELDS = (
    "id",
    "thumb_256_url",
    "thumb_1024_url",
    "thumb_2048_url",
    "computed_geometry",
    "compass_angle",
    "captured_at",
    "sequence",
)
IMAGES_LIMIT = 2000

ENDPOINT_IMAGES = "images"
ENDPOINT_TILES = "tiles"


@dataclass(frozen=True)
class ImageryQuery:
    """A validated imagery request: either a bbox search or one tile."""

    endpoint: str
    bbox: Optional[str] = None
    zoom: Optional[int] = None
    x: Optional[int] = None
    y: Optional[int] = None

    def build_url(self) -> str:
        if self.endpoint == ENDPOINT_IMAGES and self.bbox:
            return build_images_url(self.bbox)
        if self.zoom is None or self.x is None or self.y is None:
            raise ValueError(f"Incomplete {self.endpoint} query")
        return build_tile_url(self.zoom, self.x, self.y)


def build_images_url(bbox: str) -> str:
    """Build the Graph API URL for images inside a bounding box.

    The bbox is passed through as given (``minLon,minLat,maxLon,maxLat``);
    commas are kept literal.
    """
    query = urlencode(
        {
            "fields": ",".join(IMAGE_FIELDS),
            "bbox": bbox,
            "limit": IMAGES_LIMIT,
        },
        safe=",",
    )
    return f"{GRAPH_API_BASE_URL}/images?{query}"


def build_tile_url(zoom: int, x: int, y: int) -> str:
    """Build the vector tile URL for a zoom/x/y tile."""
    return f"{TILES_BASE_URL}/{zoom}/{x}/{y}"


def fetch_imagery(
    query: ImageryQuery,
    credential: MapillaryCredential,
    timeout: Optional[float],
) -> UpstreamResponse:
    """Fetch images metadata or a tile from Mapillary."""
    return send_request(
        "GET",
        query.build_url(),
        headers={"Authorization": credential.authorization_header},
        timeout=timeout,
    )
