"""Parts of a project's configuration derived from its ProjectConfig."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .project_config import ConfigError, ProjectConfig
from .versions import VersionConfig

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class SiteFile:
    """A file in the site: its path on disk and its path relative to the site root."""

    dest: Path
    site: Path


@dataclass(frozen=True)
class SourcedSiteFile:
    """A site file that is produced from a source file."""

    source: Path
    dest: Path
    site: Path


@dataclass(frozen=True)
class AssetsConfig:
    """The directory whose content is copied into the site."""

    dir: Path

    @classmethod
    def resolve(cls, config: ProjectConfig) -> AssetsConfig | None:
        if config.assets_dir is None:
            return None
        return cls(dir=config.config_dir / config.assets_dir)


@dataclass(frozen=True)
class End2EndConfig:
    """The command that runs end-to-end tests and where it runs."""

    cmd: str
    dir: Path

    @classmethod
    def resolve(cls, config: ProjectConfig) -> End2EndConfig | None:
        if config.end2end_cmd is None:
            return None
        return cls(cmd=config.end2end_cmd, dir=config.end2end_dir or Path())


@dataclass(frozen=True)
class TailwindConfig:
    """Inputs and output of a tailwind run."""

    input_file: Path
    config_file: Path | None
    tmp_file: Path

    @classmethod
    def resolve(cls, config: ProjectConfig) -> TailwindConfig | None:
        if config.tailwind_input_file is None:
            if config.tailwind_config_file is not None:
                raise ConfigError(
                    "The Cargo.toml `tailwind-input-file` is required "
                    "when using `tailwind-config-file`"
                )
            return None
        input_file = config.config_dir / config.tailwind_input_file

        if VersionConfig.TAILWIND.version().startswith("v4"):
            if (
                config.tailwind_config_file is not None
                or (config.config_dir / "tailwind.config.js").exists()
            ):
                log.info(
                    "JavaScript config files are no longer required in Tailwind CSS v4."
                )
            config_file = config.tailwind_config_file
        else:
            config_file = config.config_dir / (
                config.tailwind_config_file or Path("tailwind.config.js")
            )

        return cls(
            input_file=input_file,
            config_file=config_file,
            tmp_file=config.tmp_dir / "tailwind.css",
        )


@dataclass(frozen=True)
class StyleConfig:
    """Where styles come from and where the combined stylesheet goes."""

    file: SourcedSiteFile | None
    browserquery: str
    tailwind: TailwindConfig | None
    site_file: SiteFile

    @classmethod
    def resolve(cls, config: ProjectConfig) -> StyleConfig:
        site_rel = (config.site_pkg_dir / config.output_name).with_suffix(".css")
        site_file = SiteFile(dest=config.site_root / site_rel, site=site_rel)
        style_file = None
        if config.style_file is not None:
            style_file = SourcedSiteFile(
                source=config.config_dir / config.style_file,
                dest=config.site_root / site_rel,
                site=site_rel,
            )
        return cls(
            file=style_file,
            browserquery=config.browserquery,
            tailwind=TailwindConfig.resolve(config),
            site_file=site_file,
        )


@dataclass(frozen=True)
class HashFile:
    """The text file that records the hashes of the front-end files."""

    abs: Path
    rel: Path

    @classmethod
    def resolve(
        cls, workspace_root: Path | str | None, bin: Any, rel: Path | str | None
    ) -> HashFile:
        """Place the hash file next to the server executable."""
        rel_path = Path(rel) if rel is not None else Path("hash.txt")
        exe_dir = Path(bin.exe_file).parent
        base = Path(workspace_root) if workspace_root is not None else Path(bin.abs_dir)
        return cls(abs=base / exe_dir / rel_path, rel=rel_path)