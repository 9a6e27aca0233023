"""Command-line options and their parsing."""

from __future__ import annotations

import argparse
import copy
import sys
from dataclasses import dataclass, field
from enum import Enum
from importlib import metadata

_STARTER_BASE = "https://github.com/leptos-rs"

_STARTERS = {
    "start-trunk": "start-trunk",
    "leptos-rs/start-trunk": "start-trunk",
    "start-actix": "start",
    "leptos-rs/start": "start",
    "leptos-rs/start-actix": "start",
    "start-axum": "start-axum",
    "leptos-rs/start-axum": "start-axum",
    "start-axum-workspace": "start-axum-workspace",
    "leptos-rs/start-axum-workspace": "start-axum-workspace",
    "start-aws": "start-aws",
    "leptos-rs/start-aws": "start-aws",
    "start-spin": "start-spin",
    "leptos-rs/start-spin": "start-spin",
}

_TRUE_WORDS = {"y", "yes", "t", "true", "on", "1"}
_FALSE_WORDS = {"n", "no", "f", "false", "off", "0"}

_OPTS_COMMANDS = ("build", "test", "end-to-end")
_BIN_COMMANDS = ("serve", "watch")


class LogTarget(Enum):
    """Dependencies whose logs can be shown."""

    WASM = "wasm"
    """WASM build (wasm, wasm-opt, walrus)."""
    SERVER = "server"
    """Internal reload and csr server."""


@dataclass
class Opts:
    """Build options shared by the build-like commands."""

    release: bool = False
    precompress: bool = False
    hot_reload: bool = False
    project: str | None = None
    features: list[str] = field(default_factory=list)
    lib_features: list[str] = field(default_factory=list)
    lib_cargo_args: list[str] | None = None
    bin_features: list[str] = field(default_factory=list)
    bin_cargo_args: list[str] | None = None
    wasm_debug: bool = False
    verbose: int = 0
    js_minify: bool = False


@dataclass
class NewCommand:
    """Options for generating a new project from a template."""

    git: str | None = None
    branch: str | None = None
    tag: str | None = None
    path: str | None = None
    name: str | None = None
    force: bool = False
    verbose: bool = False
    init: bool = False


@dataclass
class Cli:
    """The parsed command line."""

    command: str
    manifest_path: str | None = None
    log: list[LogTarget] = field(default_factory=list)
    options: Opts | None = None
    extra_args: list[str] = field(default_factory=list)
    new: NewCommand | None = None

    def opts(self) -> Opts | None:
        """A copy of the build options, or None for the `new` command."""
        if self.command == "new" or self.options is None:
            return None
        return copy.deepcopy(self.options)

    def bin_args(self) -> list[str] | None:
        """Arguments for the server binary, for `serve` and `watch` only."""
        if self.command in _BIN_COMMANDS:
            return list(self.extra_args)
        return None


def absolute_git_url(url: str | None) -> str | None:
    """Expand a built-in starter template shortcut to its full git URL."""
    if url is None:
        return None
    repo = _STARTERS.get(url)
    return f"{_STARTER_BASE}/{repo}" if repo is not None else url


def _boolish(value: str) -> bool:
    low = value.lower()
    if low in _TRUE_WORDS:
        return True
    if low in _FALSE_WORDS:
        return False
    raise argparse.ArgumentTypeError(f"invalid boolean value {value!r}")


def _program_version() -> str:
    try:
        return metadata.version("leptosbuild")
    except metadata.PackageNotFoundError:
        return "0.0.0"


def _add_opts(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("-r", "--release", action="store_true",
                        help="Build artifacts in release mode, with optimizations.")
    parser.add_argument("-P", "--precompress", action="store_true",
                        help="Precompress static assets with gzip and brotli.")
    parser.add_argument("--hot-reload", action="store_true",
                        help="Turn on partial hot-reloading.")
    parser.add_argument("-p", "--project",
                        help="Which project to use, from a workspace.")
    parser.add_argument("--features", action="append",
                        help="Features to use when compiling all targets.")
    parser.add_argument("--lib-features", action="append",
                        help="Features to use when compiling the lib target.")
    parser.add_argument("--lib-cargo-args", action="append",
                        help="Cargo flags for compiling the lib target.")
    parser.add_argument("--bin-features", action="append",
                        help="Features to use when compiling the bin target.")
    parser.add_argument("--bin-cargo-args", action="append",
                        help="Cargo flags for compiling the bin target.")
    parser.add_argument("--wasm-debug", action="store_true",
                        help="Include debug information in Wasm output.")
    parser.add_argument("-v", dest="verbose", action="count", default=0,
                        help="Verbosity (-v: verbose, -vv: very verbose).")
    parser.add_argument("--js-minify", type=_boolish, default=True,
                        metavar="BOOL", help="Minify javascript assets.")


def _build_parser() -> tuple[argparse.ArgumentParser, argparse.ArgumentParser]:
    parser = argparse.ArgumentParser(prog="leptosbuild", description="Build tool for Leptos.")
    parser.add_argument("-V", "--version", action="version",
                        version=f"%(prog)s {_program_version()}")
    parser.add_argument("--manifest-path", help="Path to Cargo.toml.")
    parser.add_argument("--log", action="append", type=LogTarget,
                        choices=list(LogTarget), metavar="{wasm,server}",
                        help="Output logs from dependencies.")
    subs = parser.add_subparsers(dest="command", required=True, metavar="COMMAND")

    helps = {
        "build": "Build the server (feature ssr) and the client (wasm with feature hydrate).",
        "test": "Run the cargo tests for app, client and server.",
        "end-to-end": "Start the server and end-2-end tests.",
        "serve": "Serve. Defaults to hydrate mode.",
        "watch": "Serve and automatically reload when files change.",
    }
    for name in _OPTS_COMMANDS:
        _add_opts(subs.add_parser(name, help=helps[name]))
    for name in _BIN_COMMANDS:
        sub = subs.add_parser(name, help=helps[name])
        _add_opts(sub)
        sub.add_argument("bin_args", nargs=argparse.REMAINDER)

    new = subs.add_parser("new", help="Start a wizard for creating a new project.")
    source = new.add_mutually_exclusive_group()
    source.add_argument("-g", "--git", help="Git repository to clone the template from.")
    source.add_argument("-p", "--path", help="Local path to copy the template from.")
    ref = new.add_mutually_exclusive_group()
    ref.add_argument("-b", "--branch", help="Branch to use when installing from git.")
    ref.add_argument("-t", "--tag", help="Tag to use when installing from git.")
    new.add_argument("-n", "--name", help="Directory to create / project name.")
    new.add_argument("-f", "--force", action="store_true",
                     help="Don't convert the project name to kebab-case.")
    new.add_argument("-v", "--verbose", action="store_true",
                     help="Enables more verbose output.")
    new.add_argument("--init", action="store_true",
                     help="Generate the template directly into the current dir.")
    return parser, new


def _opts_from(ns: argparse.Namespace) -> Opts:
    return Opts(
        release=ns.release,
        precompress=ns.precompress,
        hot_reload=ns.hot_reload,
        project=ns.project,
        features=ns.features or [],
        lib_features=ns.lib_features or [],
        lib_cargo_args=ns.lib_cargo_args,
        bin_features=ns.bin_features or [],
        bin_cargo_args=ns.bin_cargo_args,
        wasm_debug=ns.wasm_debug,
        verbose=ns.verbose,
        js_minify=ns.js_minify,
    )


def parse_cli(argv: list[str] | None = None) -> Cli:
    """Parse the command line; exits with status 2 on invalid input."""
    args = list(sys.argv[1:] if argv is None else argv)
    parser, new_parser = _build_parser()
    ns = parser.parse_args(args)
    cli = Cli(command=ns.command, manifest_path=ns.manifest_path, log=ns.log or [])

    if ns.command == "new":
        command = NewCommand(
            git=ns.git,
            branch=ns.branch,
            tag=ns.tag,
            path=ns.path,
            name=ns.name,
            force=ns.force,
            verbose=ns.verbose,
            init=ns.init,
        )
        if command == NewCommand():
            new_parser.print_help(sys.stderr)
            raise SystemExit(2)
        cli.new = command
        return cli

    cli.options = _opts_from(ns)
    if ns.command in _BIN_COMMANDS:
        extra = list(ns.bin_args)
        if extra and extra[0] == "--":
            extra = extra[1:]
        cli.extra_args = extra
    return cli