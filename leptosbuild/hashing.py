"""Content hashes appended to the names of the front-end files of a site."""

from __future__ import annotations

import base64
import hashlib
import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

log = logging.getLogger(__name__)


def _content_hash(path: Path) -> str:
    digest = hashlib.md5(path.read_bytes()).digest()
    return base64.urlsafe_b64encode(digest).decode("ascii").rstrip("=")


def _is_inline_snippet(path: Path) -> bool:
    # The wasm module loads inline snippets by their unhashed names, so they keep them.
    return "snippets" in str(path) and "inline" in path.name and path.suffix == ".js"


def compute_file_hashes(
    pkg_dir: str | os.PathLike[str], style_dest: str | os.PathLike[str]
) -> dict[Path, str]:
    """Hash every file below pkg_dir that gets a hashed name.

    Stylesheets other than style_dest and inline snippet scripts are left out.
    Directories that cannot be read are skipped.
    """
    style = Path(style_dest)
    hashes: dict[Path, str] = {}
    stack = [Path(pkg_dir)]
    while stack:
        directory = stack.pop()
        try:
            entries = list(directory.iterdir())
        except OSError:
            continue
        for path in entries:
            if path.is_file():
                if path.suffix == ".css" and path != style:
                    continue
                if _is_inline_snippet(path):
                    continue
                hashes[path] = _content_hash(path)
            elif path.is_dir():
                stack.append(path)
    return hashes


def rename_files(files_to_hashes: Mapping[Path, str]) -> dict[Path, Path]:
    """Rename each file to `<stem>.<hash>.<ext>`; return the old to new paths."""
    old_to_new: dict[Path, Path] = {}
    for path, digest in files_to_hashes.items():
        path = Path(path)
        if not path.stem:
            raise ValueError(f"no file stem: {path}")
        if not path.suffix:
            raise ValueError(f"no extension: {path}")
        new_path = path.with_name(f"{path.stem}.{digest}{path.suffix}")
        try:
            path.rename(new_path)
        except OSError as exc:
            raise OSError(f"Failed to rename {path} to {new_path}: {exc}") from exc
        old_to_new[path] = new_path
    return old_to_new


def _relative(path: Path, root: Path) -> str:
    try:
        return path.relative_to(root).as_posix()
    except ValueError as exc:
        raise ValueError(f"could not strip root path {root} from {path}") from exc


def replace_in_file(
    path: str | os.PathLike[str],
    old_to_new: Mapping[Path, Path],
    root_dir: str | os.PathLike[str],
) -> None:
    """Replace every old file name, relative to root_dir, with its new one in the file."""
    target = Path(path)
    root = Path(root_dir)
    contents = target.read_text(encoding="utf-8")
    for old, new in old_to_new.items():
        contents = contents.replace(_relative(Path(old), root), _relative(Path(new), root))
    target.write_text(contents, encoding="utf-8")


def _extension(path: Path) -> str:
    if not path.suffix:
        raise ValueError(f"no extension: {path}")
    return path.suffix[1:]


def add_hashes_to_site(proj: Any) -> None:
    """Add content hashes to the names of the css, js and wasm files and record them."""
    pkg_dir = Path(proj.root_relative_pkg_dir)
    js_dest = Path(proj.lib.js_file.dest)
    wasm_dest = Path(proj.lib.wasm_file.dest)
    style_dest = Path(proj.style.site_file.dest)

    hashes = compute_file_hashes(pkg_dir, style_dest)
    log.debug("Hash computed: %r", hashes)

    renamed = rename_files(hashes)
    replace_in_file(renamed[js_dest], renamed, pkg_dir)

    hash_file = Path(proj.hash_file.abs)
    try:
        hash_file.parent.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise OSError(f"Failed to create parent dir for {hash_file}: {exc}") from exc

    text = "".join(
        f"{_extension(dest)}: {hashes[dest]}\n" for dest in (js_dest, wasm_dest, style_dest)
    )
    try:
        hash_file.write_text(text, encoding="utf-8")
    except OSError as exc:
        raise OSError(f"Failed to write hash file to {hash_file}: {exc}") from exc
    log.debug("Hash written to %s", hash_file)