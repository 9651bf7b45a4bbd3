from __future__ import annotations

from io import BytesIO

import pytest
from PIL import Image

from image_analyzer.core.intake import SourceFile, intake_files
from image_analyzer.core.store import ImageStore


def _png(size: tuple[int, int] = (8, 8)) -> bytes:
    buf = BytesIO()
    Image.new("RGB", size, color=(200, 30, 30)).save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture
def png_bytes():
    return _png


@pytest.fixture
def store() -> ImageStore:
    return ImageStore()


@pytest.fixture
def make_records(store):
    def _make(*names: str):
        files = [SourceFile(name=n, data=_png(), type="image/png") for n in names]
        return intake_files(files, store.previews)

    return _make
