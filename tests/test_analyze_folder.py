from __future__ import annotations

from scripts.analyze_folder import find_images, run


def test_find_images_filters_extensions(tmp_path, png_bytes):
    (tmp_path / "a.png").write_bytes(png_bytes())
    (tmp_path / "b.svg").write_text("<svg/>", encoding="utf-8")
    (tmp_path / "notes.txt").write_text("skip", encoding="utf-8")
    sub = tmp_path / "sub"
    sub.mkdir()
    (sub / "c.jpg").write_bytes(b"\xff\xd8")

    assert [p.name for p in find_images(tmp_path)] == ["a.png", "b.svg"]
    assert [p.name for p in find_images(tmp_path, recursive=True)] == ["a.png", "b.svg", "c.jpg"]


def test_run_writes_csv(tmp_path, png_bytes):
    (tmp_path / "a.png").write_bytes(png_bytes())
    (tmp_path / "b.png").write_bytes(png_bytes())
    out = tmp_path / "out.csv"

    code = run([str(tmp_path), "--api-key", "sk-test", "--delay", "0", "--describe", "--out", str(out)])

    assert code == 0
    lines = out.read_text(encoding="utf-8").split("\n")
    assert lines[0] == "filename,title,descriptors,keywords"
    assert len(lines) == 3


def test_run_without_key_fails(tmp_path, png_bytes, capsys):
    (tmp_path / "a.png").write_bytes(png_bytes())

    code = run([str(tmp_path), "--delay", "0"])

    assert code == 2
    assert "Please enter an API key" in capsys.readouterr().err


def test_run_on_empty_folder_fails(tmp_path, capsys):
    code = run([str(tmp_path), "--api-key", "k", "--delay", "0"])

    assert code == 2
    assert "Please upload images" in capsys.readouterr().err
