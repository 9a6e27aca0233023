"""Cargo metadata and the lib and bin packages of a project."""

from __future__ import annotations

import json
import logging
import os
import subprocess
import sys
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .cli import Opts
from .profile import Profile
from .project_config import ConfigError, ProjectConfig
from .subconfigs import SiteFile, SourcedSiteFile

log = logging.getLogger(__name__)


def _unbase(path: Path, base: Path) -> Path:
    """The path relative to base; '.' when both are the same."""
    try:
        return path.relative_to(base)
    except ValueError as exc:
        raise ConfigError(f"Could not remove base {base} from {path}") from exc


def _with_extension(path: Path, ext: str) -> Path:
    return path.with_suffix(f".{ext}" if ext else "")


@dataclass(frozen=True)
class CargoTarget:
    """A build target of a cargo package."""

    name: str
    kind: tuple[str, ...] = ()
    crate_types: tuple[str, ...] = ()

    def is_bin(self) -> bool:
        return "bin" in self.kind

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> CargoTarget:
        return cls(
            name=data["name"],
            kind=tuple(data.get("kind") or ()),
            crate_types=tuple(data.get("crate_types") or ()),
        )


@dataclass(frozen=True)
class CargoPackage:
    """A package as reported by cargo metadata."""

    name: str
    id: str
    manifest_path: Path
    targets: tuple[CargoTarget, ...] = ()
    source: str | None = None
    dependencies: tuple[Mapping[str, Any], ...] = ()
    metadata: Any = None

    @property
    def manifest_dir(self) -> Path:
        return self.manifest_path.parent

    def has_bin_target(self) -> bool:
        return any(t.is_bin() for t in self.targets)

    def cdylib_target(self) -> CargoTarget | None:
        return next(
            (t for t in self.targets if "cdylib" in t.kind or "cdylib" in t.crate_types),
            None,
        )

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> CargoPackage:
        return cls(
            name=data["name"],
            id=data["id"],
            manifest_path=Path(data["manifest_path"]),
            targets=tuple(CargoTarget.from_json(t) for t in data.get("targets") or ()),
            source=data.get("source"),
            dependencies=tuple(data.get("dependencies") or ()),
            metadata=data.get("metadata"),
        )


@dataclass
class CargoMetadata:
    """The parts of `cargo metadata` output used to resolve projects."""

    workspace_root: Path
    target_directory: Path
    packages: list[CargoPackage] = field(default_factory=list)
    workspace_members: list[str] = field(default_factory=list)
    workspace_metadata: Any = None

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> CargoMetadata:
        return cls(
            workspace_root=Path(data["workspace_root"]),
            target_directory=Path(data["target_directory"]),
            packages=[CargoPackage.from_json(p) for p in data.get("packages") or ()],
            workspace_members=list(data.get("workspace_members") or ()),
            workspace_metadata=data.get("metadata"),
        )

    @classmethod
    def load(cls, manifest_path: str | os.PathLike[str]) -> CargoMetadata:
        """Run `cargo metadata` for the manifest and read its output."""
        cmd = [
            "cargo",
            "metadata",
            "--format-version",
            "1",
            "--manifest-path",
            str(manifest_path),
        ]
        try:
            result = subprocess.run(cmd, capture_output=True, text=True, check=False)
        except OSError as exc:
            raise ConfigError(f"Could not run cargo metadata: {exc}") from exc
        if result.returncode != 0:
            raise ConfigError(
                f"cargo metadata failed for {manifest_path}: {result.stderr.strip()}"
            )
        try:
            data = json.loads(result.stdout)
        except json.JSONDecodeError as exc:
            raise ConfigError(f"Invalid cargo metadata output: {exc}") from exc
        return cls.from_json(data)

    def workspace_packages(self) -> list[CargoPackage]:
        members = set(self.workspace_members)
        return [p for p in self.packages if p.id in members]

    def rel_target_dir(self) -> Path:
        """The target directory relative to the workspace root, when it lies inside."""
        try:
            return self.target_directory.relative_to(self.workspace_root)
        except ValueError:
            return self.target_directory

    def src_path_dependencies(self, package_id: str) -> list[Path]:
        """The src directories of the local path dependencies, relative to the workspace."""
        by_id = {p.id: p for p in self.packages}
        by_dir = {p.manifest_dir: p for p in self.packages}
        found: list[Path] = []
        seen: set[str] = {package_id}
        pending = [by_id[package_id]] if package_id in by_id else []
        while pending:
            package = pending.pop(0)
            for dep in package.dependencies:
                dep_path = dep.get("path")
                if not dep_path:
                    continue
                dep_pkg = by_dir.get(Path(dep_path))
                if dep_pkg is None or dep_pkg.id in seen:
                    continue
                seen.add(dep_pkg.id)
                try:
                    rel = dep_pkg.manifest_dir.relative_to(self.workspace_root)
                except ValueError:
                    rel = dep_pkg.manifest_dir
                found.append(rel / "src")
                pending.append(dep_pkg)
        return found


def _features(cli_specific: list[str], conf_specific: list[str], conf: list[str], cli: list[str]) -> list[str]:
    chosen = list(cli_specific) if cli_specific else list(conf_specific)
    return chosen + list(conf) + list(cli)


def _src_paths(metadata: CargoMetadata, package: CargoPackage, rel_dir: Path) -> list[Path]:
    paths = metadata.src_path_dependencies(package.id)
    paths.append(Path("src") if rel_dir == Path(".") else rel_dir / "src")
    return paths


@dataclass
class LibPackage:
    """The package that is compiled to WASM for the front end."""

    name: str
    abs_dir: Path
    rel_dir: Path
    wasm_file: SourcedSiteFile
    js_file: SiteFile
    features: list[str]
    default_features: bool
    output_name: str
    src_paths: list[Path]
    front_target_path: Path
    profile: Profile
    cargo_args: list[str] | None

    @classmethod
    def resolve(
        cls, cli: Opts, metadata: CargoMetadata, project: Any, config: ProjectConfig
    ) -> LibPackage:
        name: str = project.lib_package
        output_name = config.output_name or name.replace("-", "_")

        package = next((p for p in metadata.workspace_packages() if p.name == name), None)
        if package is None:
            raise ConfigError(f'Could not find the project lib-package "{name}"')

        features = _features(cli.lib_features, config.lib_features, config.features, cli.features)
        abs_dir = package.manifest_dir
        rel_dir = _unbase(abs_dir, metadata.workspace_root)
        profile = Profile.from_options(
            cli.release, config.lib_profile_release, config.lib_profile_dev
        )

        wasm_source = _with_extension(
            metadata.rel_target_dir()
            / "front"
            / "wasm32-unknown-unknown"
            / str(profile)
            / name.replace("-", "_"),
            "wasm",
        )
        wasm_site = _with_extension(config.site_pkg_dir / output_name, "wasm")
        wasm_file = SourcedSiteFile(
            source=wasm_source, dest=config.site_root / wasm_site, site=wasm_site
        )
        js_site = _with_extension(config.site_pkg_dir / output_name, "js")
        js_file = SiteFile(dest=config.site_root / js_site, site=js_site)

        cargo_args = cli.lib_cargo_args if cli.lib_cargo_args is not None else config.lib_cargo_args

        return cls(
            name=name,
            abs_dir=abs_dir,
            rel_dir=rel_dir,
            wasm_file=wasm_file,
            js_file=js_file,
            features=features,
            default_features=config.lib_default_features,
            output_name=output_name,
            src_paths=_src_paths(metadata, package, rel_dir),
            front_target_path=metadata.target_directory / "front",
            profile=profile,
            cargo_args=list(cargo_args) if cargo_args is not None else None,
        )


def _exe_extension(triple: str | None) -> str:
    if sys.platform == "win32" and (triple is None or "-pc-windows-" in triple):
        return "exe"
    if triple is not None and triple.startswith("wasm32-"):
        return "wasm"
    return ""


@dataclass
class BinPackage:
    """The package that builds the server binary."""

    name: str
    abs_dir: Path
    rel_dir: Path
    exe_file: Path
    target: str
    features: list[str]
    default_features: bool
    src_paths: list[Path]
    profile: Profile
    target_triple: str | None
    target_dir: str | None
    cargo_command: str | None
    cargo_args: list[str] | None
    bin_args: list[str] | None

    @classmethod
    def resolve(
        cls,
        cli: Opts,
        metadata: CargoMetadata,
        project: Any,
        config: ProjectConfig,
        bin_args: Sequence[str] | None,
    ) -> BinPackage:
        features = _features(cli.bin_features, config.bin_features, config.features, cli.features)

        name: str = project.bin_package
        package = next(
            (p for p in metadata.workspace_packages() if p.name == name and p.has_bin_target()),
            None,
        )
        if package is None:
            raise ConfigError(f'Could not find the project bin-package "{name}"')

        targets = [t for t in package.targets if t.is_bin()]
        if config.bin_target:
            target = next((t for t in targets if t.name == config.bin_target), None)
            if target is None:
                raise ConfigError(
                    "Could not find the target specified: [[workspace.metadata.leptos]] "
                    f'bin-target = "{config.bin_target}"'
                )
        elif len(targets) == 1:
            target = targets[0]
        elif not targets:
            raise ConfigError(f"No bin targets found for member {name}")
        else:
            raise ConfigError(
                f'Several bin targets found for member "{name}", please specify which one '
                'to use with: [[workspace.metadata.leptos]] bin-target = "name"'
            )

        abs_dir = package.manifest_dir
        rel_dir = _unbase(abs_dir, metadata.workspace_root)
        profile = Profile.from_options(
            cli.release, config.bin_profile_release, config.bin_profile_dev
        )

        base = (
            Path(config.bin_target_dir)
            if config.bin_target_dir is not None
            else metadata.rel_target_dir()
        )
        if config.bin_target_triple is not None:
            base = base / config.bin_target_triple
        exe_name = config.bin_exe_name if config.bin_exe_name is not None else name
        exe_file = _with_extension(
            base / str(profile) / exe_name, _exe_extension(config.bin_target_triple)
        )

        cargo_args = cli.bin_cargo_args if cli.bin_cargo_args is not None else config.bin_cargo_args

        log.debug("BEFORE BIN %r", config.bin_cargo_command)
        return cls(
            name=name,
            abs_dir=abs_dir,
            rel_dir=rel_dir,
            exe_file=exe_file,
            target=target.name,
            features=features,
            default_features=config.bin_default_features,
            src_paths=_src_paths(metadata, package, rel_dir),
            profile=profile,
            target_triple=config.bin_target_triple,
            target_dir=config.bin_target_dir,
            cargo_command=config.bin_cargo_command,
            cargo_args=list(cargo_args) if cargo_args is not None else None,
            bin_args=list(bin_args) if bin_args is not None else None,
        )