from __future__ import annotations

import io
import logging
import secrets
from typing import Dict, Optional, Tuple

from PIL import Image, UnidentifiedImageError

logger = logging.getLogger(__name__)

PREVIEW_SCHEME = "preview://"


class PreviewStore:
    """In-memory registry of preview payloads addressed by opaque URIs.

    A URI stays valid until `release` is called for it. Releasing twice or
    releasing an unknown URI is a no-op.
    """

    def __init__(self) -> None:
        self._items: Dict[str, Tuple[str, bytes]] = {}

    def create(self, data: bytes, mime_type: str) -> str:
        uri = f"{PREVIEW_SCHEME}{secrets.token_hex(8)}"
        self._items[uri] = (mime_type, data)
        return uri

    def get(self, uri: str) -> Optional[bytes]:
        item = self._items.get(uri)
        return item[1] if item else None

    def mime_type(self, uri: str) -> Optional[str]:
        item = self._items.get(uri)
        return item[0] if item else None

    def release(self, uri: Optional[str]) -> bool:
        if not uri:
            return False
        released = self._items.pop(uri, None) is not None
        if released:
            logger.debug("Released preview %s", uri)
        return released

    def release_all(self) -> int:
        count = len(self._items)
        self._items.clear()
        return count

    def thumbnail(self, uri: str, max_size: int = 320) -> Optional[bytes]:
        """Return a PNG thumbnail, the raw markup for SVG, or None when Pillow cannot decode the image."""
        data = self.get(uri)
        if data is None:
            return None
        if self.mime_type(uri) == "image/svg+xml":
            return data
        try:
            with Image.open(io.BytesIO(data)) as img:
                img.thumbnail((max_size, max_size))
                buf = io.BytesIO()
                img.convert("RGBA").save(buf, format="PNG")
                return buf.getvalue()
        except (UnidentifiedImageError, OSError, ValueError):
            logger.debug("No thumbnail for %s", uri)
            return None

    def __contains__(self, uri: object) -> bool:
        return uri in self._items

    def __len__(self) -> int:
        return len(self._items)
