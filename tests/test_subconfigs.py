from pathlib import Path
from types import SimpleNamespace

import pytest

from leptosbuild.project_config import ConfigError, ProjectConfig
from leptosbuild.subconfigs import (
    AssetsConfig,
    End2EndConfig,
    HashFile,
    SiteFile,
    StyleConfig,
    TailwindConfig,
)


@pytest.fixture
def base(tmp_path):
    return ProjectConfig(
        output_name="example",
        site_root=Path("target/site"),
        config_dir=tmp_path,
        tmp_dir=tmp_path / "target" / "tmp",
    )


def test_assets_absent(base):
    assert AssetsConfig.resolve(base) is None


def test_assets_relative_to_config(base, tmp_path):
    base.assets_dir = Path("public")
    assert AssetsConfig.resolve(base).dir == tmp_path / "public"


def test_end2end(base):
    assert End2EndConfig.resolve(base) is None
    base.end2end_cmd = "npx playwright test"
    e2e = End2EndConfig.resolve(base)
    assert e2e.cmd == "npx playwright test"
    assert e2e.dir == Path()
    base.end2end_dir = Path("end2end")
    assert End2EndConfig.resolve(base).dir == Path("end2end")


def test_tailwind_absent(base):
    assert TailwindConfig.resolve(base) is None


def test_tailwind_config_without_input(base):
    base.tailwind_config_file = Path("tw.js")
    with pytest.raises(ConfigError):
        TailwindConfig.resolve(base)


def test_tailwind_v4(base, tmp_path, monkeypatch):
    monkeypatch.delenv("LEPTOS_TAILWIND_VERSION", raising=False)
    base.tailwind_input_file = Path("style/input.css")
    tw = TailwindConfig.resolve(base)
    assert tw.input_file == tmp_path / "style/input.css"
    assert tw.config_file is None
    assert tw.tmp_file == base.tmp_dir / "tailwind.css"
    base.tailwind_config_file = Path("tw.js")
    assert TailwindConfig.resolve(base).config_file == Path("tw.js")


def test_tailwind_v3(base, tmp_path, monkeypatch):
    monkeypatch.setenv("LEPTOS_TAILWIND_VERSION", "v3.4.0")
    base.tailwind_input_file = Path("input.css")
    assert TailwindConfig.resolve(base).config_file == tmp_path / "tailwind.config.js"
    base.tailwind_config_file = Path("tw.js")
    assert TailwindConfig.resolve(base).config_file == tmp_path / "tw.js"


def test_style_without_file(base, monkeypatch):
    monkeypatch.delenv("LEPTOS_TAILWIND_VERSION", raising=False)
    style = StyleConfig.resolve(base)
    assert style.file is None
    assert style.tailwind is None
    assert style.browserquery == "defaults"
    site = Path("pkg") / "example.css"
    assert style.site_file == SiteFile(dest=Path("target/site") / site, site=site)


def test_style_with_file(base, tmp_path):
    base.style_file = Path("style/main.scss")
    style = StyleConfig.resolve(base)
    assert style.file.source == tmp_path / "style/main.scss"
    assert style.file.dest == style.site_file.dest
    assert style.file.site == style.site_file.site


def test_hash_file_in_workspace():
    bin_pkg = SimpleNamespace(exe_file=Path("target/debug/app"), abs_dir=Path("/ws/app"))
    hf = HashFile.resolve(Path("/ws"), bin_pkg, None)
    assert hf.rel == Path("hash.txt")
    assert hf.abs == Path("/ws/target/debug/hash.txt")


def test_hash_file_single_package():
    bin_pkg = SimpleNamespace(exe_file=Path("target/debug/app"), abs_dir=Path("/ws/app"))
    hf = HashFile.resolve(None, bin_pkg, Path("hashes.txt"))
    assert hf.rel == Path("hashes.txt")
    assert hf.abs == Path("/ws/app/target/debug/hashes.txt")