"""Projects resolved from cargo metadata, and the overall build configuration."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .cli import Opts
from .packages import BinPackage, CargoMetadata, CargoPackage, LibPackage
from .project_config import ConfigError, ProjectConfig
from .subconfigs import AssetsConfig, End2EndConfig, HashFile, StyleConfig

log = logging.getLogger(__name__)


def _leptos_metadata(metadata: Any) -> Any:
    if isinstance(metadata, Mapping):
        return metadata.get("leptos")
    return None


def _required_str(section: Mapping[str, Any], key: str) -> str:
    if key not in section:
        raise ConfigError(f"missing field `{key}` in leptos project definition")
    value = section[key]
    if not isinstance(value, str):
        raise ConfigError(f"invalid type for `{key}`: expected a string")
    return value


@dataclass(frozen=True)
class ProjectDefinition:
    """The name of a project and the packages that build it."""

    name: str
    bin_package: str
    lib_package: str

    @classmethod
    def _from_section(cls, section: Any) -> ProjectDefinition:
        if not isinstance(section, Mapping):
            raise ConfigError("a leptos project definition must be a table")
        return cls(
            name=_required_str(section, "name"),
            bin_package=_required_str(section, "bin-package"),
            lib_package=_required_str(section, "lib-package"),
        )

    @classmethod
    def _from_workspace(
        cls,
        sections: Any,
        config_dir: Path,
        metadata: CargoMetadata,
        environ: Mapping[str, str] | None,
    ) -> list[tuple[ProjectDefinition, ProjectConfig]]:
        if not isinstance(sections, list):
            return []
        found = []
        for section in sections:
            conf = ProjectConfig.from_metadata(
                config_dir, section, metadata.target_directory, environ
            )
            found.append((cls._from_section(section), conf))
        return found

    @classmethod
    def _from_package(
        cls,
        package: CargoPackage,
        section: Any,
        config_dir: Path,
        metadata: CargoMetadata,
        environ: Mapping[str, str] | None,
    ) -> tuple[ProjectDefinition, ProjectConfig]:
        conf = ProjectConfig.from_metadata(
            config_dir, section, metadata.target_directory, environ
        )
        if package.cdylib_target() is None:
            raise ConfigError(
                "Cargo.toml has leptos metadata but is missing a cdylib library target. "
                f"{package.manifest_path}"
            )
        if not package.has_bin_target():
            raise ConfigError(
                "Cargo.toml has leptos metadata but is missing a bin target. "
                f"{package.manifest_path}"
            )
        definition = cls(
            name=package.name, bin_package=package.name, lib_package=package.name
        )
        return definition, conf

    @classmethod
    def parse(
        cls, metadata: CargoMetadata, environ: Mapping[str, str] | None = None
    ) -> list[tuple[ProjectDefinition, ProjectConfig]]:
        """All projects in the workspace metadata and in the packages' metadata."""
        found: list[tuple[ProjectDefinition, ProjectConfig]] = []
        workspace_section = _leptos_metadata(metadata.workspace_metadata)
        if workspace_section is not None:
            found.extend(
                cls._from_workspace(workspace_section, Path(), metadata, environ)
            )

        for package in metadata.workspace_packages():
            try:
                rel_manifest = package.manifest_path.relative_to(metadata.workspace_root)
            except ValueError as exc:
                raise ConfigError(
                    f"Could not remove base {metadata.workspace_root} "
                    f"from {package.manifest_path}"
                ) from exc
            section = _leptos_metadata(package.metadata)
            if section is not None:
                found.append(
                    cls._from_package(
                        package, section, rel_manifest.parent, metadata, environ
                    )
                )
        return found


@dataclass
class Project:
    """A fully resolved project: its packages, site layout and build switches."""

    working_dir: Path
    name: str
    lib: LibPackage
    bin: BinPackage
    style: StyleConfig
    watch: bool
    release: bool
    precompress: bool
    hot_reload: bool
    wasm_debug: bool
    site_root: Path
    site_pkg_dir: Path
    site_addr: str
    reload_port: int
    end2end: End2EndConfig | None
    assets: AssetsConfig | None
    js_dir: Path
    watch_additional_files: list[Path]
    hash_file: HashFile
    hash_files: bool
    js_minify: bool
    server_fn_prefix: str | None
    disable_server_fn_hash: bool
    server_fn_mod_path: bool

    @property
    def root_relative_pkg_dir(self) -> Path:
        """The pkg directory inside the site root."""
        return self.site_root / self.site_pkg_dir

    @classmethod
    def resolve(
        cls,
        cli: Opts,
        cwd: str | os.PathLike[str],
        metadata: CargoMetadata,
        watch: bool,
        bin_args: Sequence[str] | None,
    ) -> list[Project]:
        """Resolve every project; only the one in cwd if exactly one lies there."""
        cwd_path = Path(cwd)
        is_workspace = len(metadata.workspace_members) > 1
        log.debug("Detected Workspace: %s", is_workspace)

        resolved: list[Project] = []
        for definition, config in ProjectDefinition.parse(metadata):
            if not config.output_name:
                config.output_name = definition.name

            lib = LibPackage.resolve(cli, metadata, definition, config)
            js_dir = config.js_dir if config.js_dir is not None else Path("src")
            watch_additional_files = list(config.watch_additional_files or [])
            bin_package = BinPackage.resolve(cli, metadata, definition, config, bin_args)
            hash_file = HashFile.resolve(
                metadata.workspace_root if is_workspace else None,
                bin_package,
                config.hash_file_name,
            )

            resolved.append(
                cls(
                    working_dir=metadata.workspace_root,
                    name=definition.name,
                    lib=lib,
                    bin=bin_package,
                    style=StyleConfig.resolve(config),
                    watch=watch,
                    release=cli.release,
                    precompress=cli.precompress,
                    hot_reload=cli.hot_reload,
                    wasm_debug=cli.wasm_debug,
                    site_root=config.site_root,
                    site_pkg_dir=config.site_pkg_dir,
                    site_addr=config.site_addr,
                    reload_port=config.reload_port,
                    end2end=End2EndConfig.resolve(config),
                    assets=AssetsConfig.resolve(config),
                    js_dir=js_dir,
                    watch_additional_files=watch_additional_files,
                    hash_file=hash_file,
                    hash_files=config.hash_files,
                    js_minify=cli.release and cli.js_minify and config.js_minify,
                    server_fn_prefix=config.server_fn_prefix,
                    disable_server_fn_hash=config.disable_server_fn_hash,
                    server_fn_mod_path=config.server_fn_mod_path,
                )
            )

        in_cwd = [
            p
            for p in resolved
            if p.bin.abs_dir.is_relative_to(cwd_path)
            or p.lib.abs_dir.is_relative_to(cwd_path)
        ]
        return in_cwd if len(in_cwd) == 1 else resolved

    def to_envs(self) -> list[tuple[str, str]]:
        """Environment variables to set when running external commands."""
        envs = [
            ("LEPTOS_OUTPUT_NAME", self.lib.output_name),
            ("LEPTOS_SITE_ROOT", str(self.site_root)),
            ("LEPTOS_SITE_PKG_DIR", str(self.site_pkg_dir)),
            ("LEPTOS_SITE_ADDR", self.site_addr),
            ("LEPTOS_RELOAD_PORT", str(self.reload_port)),
            ("LEPTOS_LIB_DIR", str(self.lib.rel_dir)),
            ("LEPTOS_BIN_DIR", str(self.bin.rel_dir)),
            ("LEPTOS_JS_MINIFY", str(bool(self.js_minify)).lower()),
            ("LEPTOS_HASH_FILES", str(bool(self.hash_files)).lower()),
        ]
        if self.hash_files:
            envs.append(("LEPTOS_HASH_FILE_NAME", str(self.hash_file.rel)))
        if self.watch:
            envs.append(("LEPTOS_WATCH", "true"))
        if self.server_fn_prefix is not None:
            envs.append(("SERVER_FN_PREFIX", self.server_fn_prefix))
        if self.disable_server_fn_hash:
            envs.append(("DISABLE_SERVER_FN_HASH", "true"))
        if self.server_fn_mod_path:
            envs.append(("SERVER_FN_MOD_PATH", "true"))
        return envs


def _names(projects: Sequence[Project]) -> str:
    return ", ".join(p.name for p in projects)


@dataclass
class Config:
    """The projects to work on and the options they were resolved with."""

    working_dir: Path
    projects: list[Project] = field(default_factory=list)
    cli: Opts = field(default_factory=Opts)
    watch: bool = False

    @classmethod
    def load(
        cls,
        cli: Opts,
        cwd: str | os.PathLike[str],
        manifest_path: str | os.PathLike[str],
        watch: bool,
        bin_args: Sequence[str] | None,
    ) -> Config:
        """Run cargo metadata for the manifest and resolve its projects."""
        metadata = CargoMetadata.load(manifest_path)
        return cls.from_metadata(cli, cwd, metadata, watch, bin_args)

    @classmethod
    def from_metadata(
        cls,
        cli: Opts,
        cwd: str | os.PathLike[str],
        metadata: CargoMetadata,
        watch: bool,
        bin_args: Sequence[str] | None,
    ) -> Config:
        """Resolve the projects of already loaded metadata."""
        projects = Project.resolve(cli, cwd, metadata, watch, bin_args)
        if not projects:
            raise ConfigError(
                "Please define leptos projects in the workspace Cargo.toml sections "
                "[[workspace.metadata.leptos]]"
            )
        if cli.project is not None:
            chosen = next((p for p in projects if p.name == cli.project), None)
            if chosen is None:
                raise ConfigError(
                    f'The specified project "{cli.project}" not found. '
                    f"Available projects: {_names(projects)}"
                )
            projects = [chosen]
        return cls(
            working_dir=metadata.workspace_root,
            projects=projects,
            cli=cli,
            watch=watch,
        )

    def current_project(self) -> Project:
        """The only project, or an error when there are several."""
        if len(self.projects) == 1:
            return self.projects[0]
        raise ConfigError(
            f"There are several projects available ({_names(self.projects)}). "
            "Please select one of them with the command line parameter --project"
        )