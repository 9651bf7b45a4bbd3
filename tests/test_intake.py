from __future__ import annotations

from image_analyzer.core.intake import ACCEPTED_TYPES, SourceFile, intake_files, size_label
from image_analyzer.core.previews import PreviewStore


def test_size_label_uses_two_decimal_megabytes():
    assert size_label(2_097_152) == "2.00 MB"
    assert size_label(0) == "0.00 MB"
    assert size_label(1_572_864) == "1.50 MB"


def test_preview_only_for_image_mime_types():
    previews = PreviewStore()
    files = [
        SourceFile(name="a.jpg", data=b"\xff\xd8\xff", type="image/jpeg"),
        SourceFile(name="b.txt", data=b"hello", type="text/plain"),
    ]

    records = intake_files(files, previews)

    assert [r.name for r in records] == ["a.jpg", "b.txt"]
    assert records[0].preview_uri is not None
    assert records[0].preview_uri in previews
    assert records[1].preview_uri is None
    assert len(previews) == 1


def test_empty_and_malformed_files_are_accepted():
    previews = PreviewStore()
    files = [
        SourceFile(name="empty.png", data=b"", type="image/png"),
        SourceFile(name="broken.png", data=b"not a png", type="image/png"),
    ]

    records = intake_files(files, previews)

    assert len(records) == 2
    assert records[0].size_label == "0.00 MB"


def test_ids_are_unique_within_a_batch():
    previews = PreviewStore()
    files = [SourceFile(name=f"{i}.png", data=b"x", type="image/png") for i in range(50)]

    records = intake_files(files, previews)

    assert len({r.id for r in records}) == 50


def test_thumbnail_decodes_png_and_passes_svg_through(png_bytes):
    previews = PreviewStore()
    png_uri = previews.create(png_bytes((600, 400)), "image/png")
    svg = b"<svg xmlns='http://www.w3.org/2000/svg'></svg>"
    svg_uri = previews.create(svg, "image/svg+xml")

    thumb = previews.thumbnail(png_uri, max_size=100)

    assert thumb is not None and thumb.startswith(b"\x89PNG")
    assert previews.thumbnail(svg_uri) == svg
    assert previews.thumbnail("preview://missing") is None


def test_thumbnail_is_none_for_undecodable_image():
    previews = PreviewStore()
    uri = previews.create(b"not really a heic", "image/heic")

    assert previews.thumbnail(uri) is None
    assert uri in previews


def test_accepted_types_cover_browser_image_formats():
    for ext in ("avif", "heic", "heif", "ico", "apng", "jfif", "svg", "png", "jpg"):
        assert ext in ACCEPTED_TYPES


def test_release_is_idempotent():
    previews = PreviewStore()
    uri = previews.create(b"x", "image/png")

    assert previews.release(uri) is True
    assert previews.release(uri) is False
    assert previews.release(None) is False
    assert len(previews) == 0
