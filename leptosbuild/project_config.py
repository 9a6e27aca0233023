"""Per-project configuration read from cargo metadata, .env files and the environment."""

from __future__ import annotations

import ipaddress
import logging
import os
import re
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from dotenv import dotenv_values

from .versions import ENV_VAR_LEPTOS_SASS_VERSION, ENV_VAR_LEPTOS_TAILWIND_VERSION

log = logging.getLogger(__name__)

CARGO_TARGET_DIR_MARKER = "CARGO_TARGET_DIR"
"""A site root starting with this marker is placed in the cargo target directory."""
CARGO_BUILD_TARGET_DIR_MARKER = "CARGO_BUILD_TARGET_DIR"
"""A site root starting with this marker is placed in the cargo target directory."""

_UNSIGNED = re.compile(r"\+?[0-9]+")


class ConfigError(Exception):
    """The project configuration is invalid."""


def _parse_u16(text: str) -> int:
    if not _UNSIGNED.fullmatch(text):
        raise ValueError(f"invalid port number {text!r}")
    value = int(text)
    if value > 0xFFFF:
        raise ValueError(f"port number {text!r} is too large")
    return value


def _parse_bool(text: str) -> bool:
    if text == "true":
        return True
    if text == "false":
        return False
    raise ValueError(f"provided string was not `true` or `false`: {text!r}")


def _parse_socket_addr(text: str) -> str:
    """Validate an `ip:port` address and return it in normal form."""
    if text.startswith("["):
        host, sep, port = text[1:].partition("]:")
        if not sep:
            raise ValueError(f"invalid socket address syntax: {text!r}")
        ip = ipaddress.IPv6Address(host)
        return f"[{ip}]:{_parse_u16(port)}"
    host, sep, port = text.rpartition(":")
    if not sep:
        raise ValueError(f"invalid socket address syntax: {text!r}")
    ip4 = ipaddress.IPv4Address(host)
    return f"{ip4}:{_parse_u16(port)}"


def _type_error(key: str, expected: str) -> ConfigError:
    return ConfigError(f"invalid type for `{key}`: expected {expected}")


def _to_str(key: str, value: Any) -> str:
    if not isinstance(value, str):
        raise _type_error(key, "a string")
    return value


def _to_bool(key: str, value: Any) -> bool:
    if not isinstance(value, bool):
        raise _type_error(key, "a boolean")
    return value


def _to_path(key: str, value: Any) -> Path:
    return Path(_to_str(key, value))


def _to_u16(key: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= 0xFFFF:
        raise _type_error(key, "an integer between 0 and 65535")
    return value


def _to_addr(key: str, value: Any) -> str:
    try:
        return _parse_socket_addr(_to_str(key, value))
    except ValueError as exc:
        raise ConfigError(f"invalid `{key}`: {exc}") from exc


def _to_str_list(key: str, value: Any) -> list[str]:
    if not isinstance(value, list):
        raise _type_error(key, "a list of strings")
    return [_to_str(key, item) for item in value]


def _to_path_list(key: str, value: Any) -> list[Path]:
    return [Path(item) for item in _to_str_list(key, value)]


def _optional(convert: Callable[[str, Any], Any]) -> Callable[[str, Any], Any]:
    def inner(key: str, value: Any) -> Any:
        return None if value is None else convert(key, value)

    return inner


_FIELDS: dict[str, Callable[[str, Any], Any]] = {
    "output_name": _to_str,
    "site_addr": _to_addr,
    "site_root": _to_path,
    "site_pkg_dir": _to_path,
    "style_file": _optional(_to_path),
    "hash_file_name": _optional(_to_path),
    "hash_files": _to_bool,
    "tailwind_input_file": _optional(_to_path),
    "tailwind_config_file": _optional(_to_path),
    "assets_dir": _optional(_to_path),
    "js_dir": _optional(_to_path),
    "js_minify": _to_bool,
    "watch_additional_files": _optional(_to_path_list),
    "reload_port": _to_u16,
    "end2end_cmd": _optional(_to_str),
    "end2end_dir": _optional(_to_path),
    "browserquery": _to_str,
    "bin_target": _to_str,
    "bin_target_triple": _optional(_to_str),
    "bin_target_dir": _optional(_to_str),
    "bin_cargo_command": _optional(_to_str),
    "bin_cargo_args": _optional(_to_str_list),
    "bin_exe_name": _optional(_to_str),
    "features": _to_str_list,
    "lib_features": _to_str_list,
    "lib_default_features": _to_bool,
    "lib_cargo_args": _optional(_to_str_list),
    "bin_features": _to_str_list,
    "bin_default_features": _to_bool,
    "server_fn_prefix": _optional(_to_str),
    "disable_server_fn_hash": _to_bool,
    "server_fn_mod_path": _to_bool,
    "separate_front_target_dir": _optional(_to_bool),
    "lib_profile_dev": _optional(_to_str),
    "lib_profile_release": _optional(_to_str),
    "bin_profile_dev": _optional(_to_str),
    "bin_profile_release": _optional(_to_str),
}


@dataclass
class ProjectConfig:
    """The `leptos` metadata section of a project, with defaults filled in."""

    output_name: str = ""
    site_addr: str = "127.0.0.1:3000"
    site_root: Path = field(default_factory=lambda: Path(CARGO_TARGET_DIR_MARKER) / "site")
    site_pkg_dir: Path = field(default_factory=lambda: Path("pkg"))
    style_file: Path | None = None
    hash_file_name: Path | None = None
    hash_files: bool = False
    tailwind_input_file: Path | None = None
    tailwind_config_file: Path | None = None
    assets_dir: Path | None = None
    js_dir: Path | None = None
    js_minify: bool = True
    watch_additional_files: list[Path] | None = None
    reload_port: int = 3001
    end2end_cmd: str | None = None
    end2end_dir: Path | None = None
    browserquery: str = "defaults"
    bin_target: str = ""
    bin_target_triple: str | None = None
    bin_target_dir: str | None = None
    bin_cargo_command: str | None = None
    bin_cargo_args: list[str] | None = None
    bin_exe_name: str | None = None
    features: list[str] = field(default_factory=list)
    lib_features: list[str] = field(default_factory=list)
    lib_default_features: bool = False
    lib_cargo_args: list[str] | None = None
    bin_features: list[str] = field(default_factory=list)
    bin_default_features: bool = False
    server_fn_prefix: str | None = None
    disable_server_fn_hash: bool = False
    server_fn_mod_path: bool = False
    config_dir: Path = field(default_factory=Path)
    tmp_dir: Path = field(default_factory=Path)
    separate_front_target_dir: bool | None = None
    lib_profile_dev: str | None = None
    lib_profile_release: str | None = None
    bin_profile_dev: str | None = None
    bin_profile_release: str | None = None

    @property
    def site_port(self) -> int:
        """The port part of the site address."""
        return int(self.site_addr.rpartition(":")[2])

    @classmethod
    def from_metadata(
        cls,
        config_dir: str | os.PathLike[str],
        metadata: Mapping[str, Any],
        target_directory: str | os.PathLike[str],
        environ: Mapping[str, str] | None = None,
    ) -> ProjectConfig:
        """Read a metadata section, overlay .env and environment values and validate."""
        if not isinstance(metadata, Mapping):
            raise ConfigError("the leptos metadata section must be a table")
        values = {
            attr: convert(attr.replace("_", "-"), metadata[attr.replace("_", "-")])
            for attr, convert in _FIELDS.items()
            if attr.replace("_", "-") in metadata
        }
        conf = cls(**values)
        conf.config_dir = Path(config_dir)
        conf.tmp_dir = Path(target_directory) / "tmp"
        overlay_env(conf, load_dotenvs(conf.config_dir), environ)
        conf._finish(Path(target_directory))
        return conf

    def _finish(self, target_directory: Path) -> None:
        forbidden = {
            Path("/"),
            Path("."),
            Path(CARGO_TARGET_DIR_MARKER),
            Path(CARGO_BUILD_TARGET_DIR_MARKER),
        }
        if self.site_root in forbidden:
            raise ConfigError(
                f"site-root cannot be '{self.site_root}'. "
                "All the content is erased when building the site."
            )
        for marker in (CARGO_TARGET_DIR_MARKER, CARGO_BUILD_TARGET_DIR_MARKER):
            parts = self.site_root.parts
            if parts and parts[0] == marker:
                self.site_root = target_directory.joinpath(*parts[1:])
        if self.site_port == self.reload_port:
            raise ConfigError(
                f"The site-addr port and reload-port cannot be the same: {self.reload_port}"
            )
        if self.separate_front_target_dir is not None:
            log.warning(
                "Deprecated: the `separate-front-target-dir` option is deprecated since 0.2.3"
            )
            log.warning("It is now unconditionally enabled; you can remove it from your Cargo.toml")


def load_dotenvs(directory: str | os.PathLike[str]) -> list[tuple[str, str]] | None:
    """Read the nearest .env file in the directory or its ancestors."""
    current = Path(directory)
    while True:
        candidate = current / ".env"
        if candidate.is_file():
            return [
                (key, value)
                for key, value in dotenv_values(candidate).items()
                if value is not None
            ]
        parent = current.parent
        if parent == current:
            return None
        current = parent


def _setter(attr: str, parse: Callable[[str], Any]) -> Callable[[ProjectConfig, str], None]:
    def apply(conf: ProjectConfig, value: str) -> None:
        setattr(conf, attr, parse(value))

    return apply


_ENV_KEYS: dict[str, Callable[[ProjectConfig, str], None]] = {
    "LEPTOS_OUTPUT_NAME": _setter("output_name", str),
    "LEPTOS_SITE_ROOT": _setter("site_root", Path),
    "LEPTOS_SITE_PKG_DIR": _setter("site_pkg_dir", Path),
    "LEPTOS_STYLE_FILE": _setter("style_file", Path),
    "LEPTOS_ASSETS_DIR": _setter("assets_dir", Path),
    "LEPTOS_SITE_ADDR": _setter("site_addr", _parse_socket_addr),
    "LEPTOS_RELOAD_PORT": _setter("reload_port", _parse_u16),
    "LEPTOS_END2END_CMD": _setter("end2end_cmd", str),
    "LEPTOS_END2END_DIR": _setter("end2end_dir", Path),
    "LEPTOS_HASH_FILES": _setter("hash_files", _parse_bool),
    "LEPTOS_HASH_FILE_NAME": _setter("hash_file_name", Path),
    "LEPTOS_BROWSERQUERY": _setter("browserquery", str),
    "LEPTOS_BIN_EXE_NAME": _setter("bin_exe_name", str),
    "LEPTOS_BIN_TARGET": _setter("bin_target", str),
    "LEPTOS_BIN_TARGET_TRIPLE": _setter("bin_target_triple", str),
    "LEPTOS_BIN_TARGET_DIR": _setter("bin_target_dir", str),
    "LEPTOS_BIN_CARGO_COMMAND": _setter("bin_cargo_command", str),
    "LEPTOS_JS_MINIFY": _setter("js_minify", _parse_bool),
    "SERVER_FN_PREFIX": _setter("server_fn_prefix", str),
    "DISABLE_SERVER_FN_HASH": _setter("disable_server_fn_hash", lambda _value: True),
}

_KNOWN_UNUSED = {ENV_VAR_LEPTOS_TAILWIND_VERSION, ENV_VAR_LEPTOS_SASS_VERSION}


def _overlay(conf: ProjectConfig, envs: Iterable[tuple[str, str]]) -> None:
    for key, value in envs:
        apply = _ENV_KEYS.get(key)
        if apply is not None:
            try:
                apply(conf, value)
            except ValueError as exc:
                raise ConfigError(f"invalid value for {key}: {exc}") from exc
        elif key in _KNOWN_UNUSED:
            continue
        elif key.startswith("LEPTOS_"):
            log.warning("Env %s is not used by leptosbuild", key)


def overlay_env(
    conf: ProjectConfig,
    dotenvs: Iterable[tuple[str, str]] | None,
    environ: Mapping[str, str] | None = None,
) -> None:
    """Apply .env values, then environment values, on top of the configuration."""
    if dotenvs is not None:
        _overlay(conf, dotenvs)
    _overlay(conf, (os.environ if environ is None else environ).items())