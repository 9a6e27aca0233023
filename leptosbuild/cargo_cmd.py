"""Cargo command lines for building and testing the server and front-end packages."""

from __future__ import annotations

import logging
import os
import shlex
import subprocess
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

log = logging.getLogger(__name__)

_WASM_TARGET = "wasm32-unknown-unknown"


def build_cargo_command_string(args: Iterable[str]) -> str:
    """A printable cargo command line; arguments holding spaces are quoted."""
    return " ".join(["cargo", *(f"'{arg}'" if " " in arg else arg for arg in args)])


def _envs_string(envs: Iterable[tuple[str, str]]) -> str:
    return " ".join(f"{name}={value}" for name, value in envs)


@dataclass
class CargoCommand:
    """A cargo invocation: program, arguments, extra environment and display line."""

    program: str
    args: list[str] = field(default_factory=list)
    envs: list[tuple[str, str]] = field(default_factory=list)
    line: str = ""

    @property
    def envs_str(self) -> str:
        """The extra environment as space separated NAME=value pairs."""
        return _envs_string(self.envs)

    @property
    def argv(self) -> list[str]:
        return [self.program, *self.args]

    def spawn(self) -> subprocess.Popen[Any]:
        """Start the command with the extra environment added to the current one."""
        env = {**os.environ, **dict(self.envs)}
        return subprocess.Popen(self.argv, env=env)


def _server_program(proj: Any) -> tuple[str, list[str]]:
    raw = proj.bin.cargo_command if proj.bin.cargo_command is not None else "cargo"
    try:
        parts = shlex.split(raw)
    except ValueError as exc:
        raise ValueError(f"bin-cargo-command could not be parsed: {exc}") from exc
    if not parts:
        raise ValueError("bin-cargo-command is empty; it should default to cargo")
    return parts[0], parts[1:]


def build_cargo_server_cmd(cmd: str, proj: Any) -> CargoCommand:
    """The cargo command that runs `cmd` for the server (bin) package."""
    program, prefix = _server_program(proj)
    bin_pkg = proj.bin

    args = [cmd, f"--package={bin_pkg.name}"]

    # A wasm server is built as a lib so a wasm runtime can run it.
    server_is_wasm = bin_pkg.target_triple is not None and "wasm" in bin_pkg.target_triple
    if cmd != "test":
        args.append("--lib" if server_is_wasm else f"--bin={bin_pkg.target}")

    if bin_pkg.target_dir is not None:
        args.append(f"--target-dir={bin_pkg.target_dir}")
    if bin_pkg.target_triple is not None:
        args.append(f"--target={bin_pkg.target_triple}")
    if not bin_pkg.default_features:
        args.append("--no-default-features")
    if bin_pkg.features:
        args.append(f"--features={','.join(bin_pkg.features)}")

    log.debug("BIN CARGO ARGS: %r", bin_pkg.cargo_args)
    if bin_pkg.cargo_args is not None:
        args.extend(bin_pkg.cargo_args)
    args.extend(bin_pkg.profile.cargo_args())

    return CargoCommand(
        program=program,
        args=[*prefix, *args],
        envs=proj.to_envs(),
        line=build_cargo_command_string(args),
    )


def build_cargo_front_cmd(cmd: str, wasm: bool, proj: Any) -> CargoCommand:
    """The cargo command that runs `cmd` for the front-end (lib) package."""
    lib = proj.lib
    args = [
        cmd,
        f"--package={lib.name}",
        "--lib",
        f"--target-dir={lib.front_target_path}",
    ]
    if wasm:
        args.append(f"--target={_WASM_TARGET}")
    if not lib.default_features:
        args.append("--no-default-features")
    if lib.features:
        args.append(f"--features={','.join(lib.features)}")
    if lib.cargo_args is not None:
        args.extend(lib.cargo_args)
    args.extend(lib.profile.cargo_args())

    return CargoCommand(
        program="cargo",
        args=args,
        envs=proj.to_envs(),
        line=build_cargo_command_string(args),
    )


def server_cargo_process(cmd: str, proj: Any) -> tuple[str, str, subprocess.Popen[Any]]:
    """Start cargo for the server package; returns the envs, the line and the process."""
    command = build_cargo_server_cmd(cmd, proj)
    log.debug("CARGO SERVER COMMAND: %r", command.argv)
    return command.envs_str, command.line, command.spawn()


def front_cargo_process(
    cmd: str, wasm: bool, proj: Any
) -> tuple[str, str, subprocess.Popen[Any]]:
    """Start cargo for the front-end package; returns the envs, the line and the process."""
    command = build_cargo_front_cmd(cmd, wasm, proj)
    return command.envs_str, command.line, command.spawn()