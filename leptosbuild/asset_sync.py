"""Mirroring the assets directory into the site root."""

from __future__ import annotations

import logging
import os
import shutil
from collections.abc import Sequence
from pathlib import Path

log = logging.getLogger(__name__)


def reserved(src: str | os.PathLike[str], pkg_dir: str | os.PathLike[str]) -> list[Path]:
    """Paths in the assets directory that are never copied into the site."""
    return [Path(src) / "index.html", Path(pkg_dir)]


def resync(
    src: str | os.PathLike[str],
    dest: str | os.PathLike[str],
    pkg_dir: str | os.PathLike[str],
) -> None:
    """Empty the site root, keeping generated files, then copy the assets into it."""
    try:
        clean_dest(dest, pkg_dir)
    except OSError as exc:
        raise OSError(f"Cleaning {str(dest)!r}: {exc}") from exc
    try:
        mirror(src, dest, reserved(src, pkg_dir))
    except OSError as exc:
        raise OSError(f"Mirroring {str(src)!r} -> {str(dest)!r}: {exc}") from exc


def clean_dest(dest: str | os.PathLike[str], pkg_dir: str | os.PathLike[str]) -> None:
    """Remove everything in dest except the pkg directory and index.html."""
    pkg_dir_name = Path(pkg_dir).name
    if not pkg_dir_name:
        log.warning(
            "Assets No site-pkg-dir given, defaulting to 'pkg' for checks what to delete."
        )
        log.warning("Assets This will probably delete already generated files.")
        pkg_dir_name = "pkg"

    with os.scandir(dest) as entries:
        for entry in list(entries):
            if entry.is_dir(follow_symlinks=False):
                if entry.name != pkg_dir_name:
                    log.debug("Assets removing folder %s", entry.path)
                    shutil.rmtree(entry.path)
            elif entry.name != "index.html":
                log.debug("Assets removing file %s", entry.path)
                os.remove(entry.path)


def mirror(
    src_root: str | os.PathLike[str],
    dest_root: str | os.PathLike[str],
    reserved_paths: Sequence[str | os.PathLike[str]],
) -> None:
    """Copy the top-level files and directories of src_root into dest_root."""
    src = Path(src_root)
    dest = Path(dest_root)
    skipped = {Path(p) for p in reserved_paths}
    with os.scandir(src) as entries:
        for entry in list(entries):
            source = src / entry.name
            target = dest / entry.name
            if source in skipped:
                log.warning("Assets skipping reserved path %s", source)
                continue
            if entry.is_dir(follow_symlinks=False):
                log.debug("Assets copy folder %s -> %s", source, target)
                shutil.copytree(source, target, dirs_exist_ok=True)
            else:
                log.debug("Assets copy file %s -> %s", source, target)
                shutil.copy(source, target)