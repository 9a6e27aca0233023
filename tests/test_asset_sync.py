from pathlib import Path

import pytest

from leptosbuild.asset_sync import clean_dest, mirror, reserved, resync


def _write(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text)
    return path


def _tree(root: Path) -> set[str]:
    return {p.relative_to(root).as_posix() for p in root.rglob("*")}


def test_reserved_paths():
    assert reserved(Path("assets"), Path("pkg")) == [Path("assets/index.html"), Path("pkg")]


def test_clean_dest_keeps_pkg_and_index(tmp_path):
    _write(tmp_path / "index.html", "i")
    _write(tmp_path / "pkg" / "app.js", "a")
    _write(tmp_path / "old.txt", "o")
    _write(tmp_path / "images" / "x.png", "x")
    clean_dest(tmp_path, Path("pkg"))
    assert _tree(tmp_path) == {"index.html", "pkg", "pkg/app.js"}


def test_clean_dest_uses_last_component_of_pkg_dir(tmp_path):
    _write(tmp_path / "out" / "f", "f")
    _write(tmp_path / "pkg" / "f", "f")
    clean_dest(tmp_path, Path("nested/out"))
    assert _tree(tmp_path) == {"out", "out/f"}


def test_clean_dest_defaults_to_pkg_without_name(tmp_path):
    _write(tmp_path / "pkg" / "f", "f")
    _write(tmp_path / "other" / "f", "f")
    clean_dest(tmp_path, Path(""))
    assert _tree(tmp_path) == {"pkg", "pkg/f"}


def test_clean_dest_missing_directory(tmp_path):
    with pytest.raises(OSError):
        clean_dest(tmp_path / "absent", Path("pkg"))


def test_mirror_copies_files_and_dirs_skipping_reserved(tmp_path):
    src = tmp_path / "assets"
    dest = tmp_path / "site"
    dest.mkdir()
    _write(src / "favicon.ico", "icon")
    _write(src / "index.html", "reserved")
    _write(src / "img" / "a.png", "png")
    mirror(src, dest, reserved(src, Path("pkg")))
    assert _tree(dest) == {"favicon.ico", "img", "img/a.png"}
    assert (dest / "img" / "a.png").read_text() == "png"
    assert (dest / "favicon.ico").read_text() == "icon"


def test_mirror_merges_into_existing_directory(tmp_path):
    src = tmp_path / "assets"
    dest = tmp_path / "site"
    _write(src / "img" / "new.png", "n")
    _write(dest / "img" / "kept.png", "k")
    mirror(src, dest, [])
    assert _tree(dest) == {"img", "img/new.png", "img/kept.png"}


def test_resync_replaces_site_content(tmp_path):
    src = tmp_path / "assets"
    dest = tmp_path / "site"
    _write(src / "robots.txt", "r")
    _write(src / "index.html", "src index")
    _write(dest / "index.html", "site index")
    _write(dest / "pkg" / "app.wasm", "w")
    _write(dest / "stale.txt", "s")
    resync(src, dest, Path("pkg"))
    assert _tree(dest) == {"index.html", "pkg", "pkg/app.wasm", "robots.txt"}
    assert (dest / "index.html").read_text() == "site index"


def test_resync_reports_missing_destination(tmp_path):
    src = tmp_path / "assets"
    src.mkdir()
    with pytest.raises(OSError, match="Cleaning"):
        resync(src, tmp_path / "absent", Path("pkg"))


def test_resync_reports_missing_source(tmp_path):
    dest = tmp_path / "site"
    dest.mkdir()
    with pytest.raises(OSError, match="Mirroring"):
        resync(tmp_path / "absent", dest, Path("pkg"))