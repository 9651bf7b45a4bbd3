from __future__ import annotations

import secrets
from dataclasses import dataclass, field
from typing import Any, Iterable, List, Optional

from image_analyzer.core.previews import PreviewStore

# Extensions offered by the file picker ("image/*" plus explicit .svg)
ACCEPTED_TYPES = [
    "png", "jpg", "jpeg", "jfif", "pjpeg", "pjp", "gif", "webp", "avif", "apng",
    "bmp", "ico", "cur", "tif", "tiff", "heic", "heif", "svg",
]


@dataclass
class SourceFile:
    """Minimal file handle with the same shape as Streamlit's UploadedFile."""

    name: str
    data: bytes = field(repr=False)
    type: str = ""

    @property
    def size(self) -> int:
        return len(self.data)

    def getvalue(self) -> bytes:
        return self.data


@dataclass(frozen=True)
class ImageRecord:
    id: str
    source: Any = field(repr=False, compare=False)
    name: str
    size_label: str
    preview_uri: Optional[str] = None


def new_image_id() -> str:
    return secrets.token_hex(8)


def size_label(num_bytes: int) -> str:
    return f"{num_bytes / 1024 / 1024:.2f} MB"


def _handle_size(handle: Any) -> int:
    size = getattr(handle, "size", None)
    if size is None:
        size = len(handle.getvalue())
    return int(size)


def intake_files(handles: Iterable[Any], previews: PreviewStore) -> List[ImageRecord]:
    """Turn a batch of file handles into image records.

    Every handle is accepted, including empty or undecodable files. A preview
    is registered only when the declared MIME type is an image type.
    """
    records: List[ImageRecord] = []
    for handle in handles:
        mime = (getattr(handle, "type", "") or "").lower()
        preview_uri = None
        if mime.startswith("image/"):
            preview_uri = previews.create(handle.getvalue(), mime)
        records.append(
            ImageRecord(
                id=new_image_id(),
                source=handle,
                name=handle.name,
                size_label=size_label(_handle_size(handle)),
                preview_uri=preview_uri,
            )
        )
    return records
