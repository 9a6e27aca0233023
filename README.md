# leptosbuild

A library for working with Leptos web applications in a Cargo workspace. It
reads the `[package.metadata.leptos]` and `[[workspace.metadata.leptos]]`
sections, resolves them into projects, and assembles the cargo command lines,
environment variables and site file layout that a build needs. It also adds
content hashes to generated front-end files and mirrors an assets directory
into the site root.

Install with `pip install .`; the tests need the `test` extra
(`pip install .[test]`) and run with `pytest`.

## Modules

- `leptosbuild.project` – `Config.load(cli, cwd, manifest_path, watch, bin_args)`
  runs `cargo metadata --format-version 1` on a manifest (cargo must be on
  `PATH`) and resolves every Leptos project in it. `Config.from_metadata` does
  the same for a `CargoMetadata` you already have. `Config.current_project()`
  returns the only project or raises when there are several. When exactly one
  project lies under `cwd`, only that one is kept. `Project.to_envs()` gives the
  `LEPTOS_*` and server function environment variables for external commands.
- `leptosbuild.project_config` – `ProjectConfig.from_metadata` reads one
  metadata section and fills in defaults (site address `127.0.0.1:3000`, reload
  port `3001`, site root `CARGO_TARGET_DIR/site`, pkg dir `pkg`). Values are
  then overlaid from the nearest `.env` file (`load_dotenvs`) and from the
  environment (`overlay_env`), in that order. Invalid settings, a site root of
  `/`, `.` or a bare target-directory marker, and equal site and reload ports
  raise `ConfigError`.
- `leptosbuild.packages` – `CargoMetadata` (from JSON or by running
  `cargo metadata`), and `LibPackage` / `BinPackage`, which pick features,
  profile, target, output files and source paths for the front-end and server
  packages.
- `leptosbuild.subconfigs` – `SiteFile`, `SourcedSiteFile`, `AssetsConfig`,
  `End2EndConfig`, `TailwindConfig`, `StyleConfig` and `HashFile`, each with a
  `resolve` class method.
- `leptosbuild.cargo_cmd` – `build_cargo_server_cmd(cmd, proj)` and
  `build_cargo_front_cmd(cmd, wasm, proj)` return a `CargoCommand` with
  `program`, `args`, `envs`, `envs_str`, `argv` and a printable `line`.
  `CargoCommand.spawn()` starts it with a `subprocess.Popen`;
  `server_cargo_process` and `front_cargo_process` build, start and return
  `(envs_str, line, process)`.
- `leptosbuild.changes` – `Change` and `ChangeSet`, which tell whether the
  server, front end, style or assets need rebuilding.
- `leptosbuild.profile` – `Profile.from_options(is_release, release, debug)`
  and `Profile.cargo_args()` (`[]`, `["--release"]` or `["--profile=NAME"]`).
- `leptosbuild.versions` – `VersionConfig.TAILWIND` and `VersionConfig.SASS`:
  default tool versions, overridable with `LEPTOS_TAILWIND_VERSION` and
  `LEPTOS_SASS_VERSION`.
- `leptosbuild.cli` – `parse_cli(argv)` parses the subcommands `build`, `test`,
  `end-to-end`, `serve`, `watch` and `new` into a `Cli`; `Cli.opts()` gives
  the build `Opts` and `Cli.bin_args()` the arguments after `serve`/`watch`.
  `absolute_git_url` expands starter template shortcuts such as `start-axum`.
- `leptosbuild.hashing` – `add_hashes_to_site(proj)` renames the generated JS,
  WASM and CSS files to `<stem>.<hash>.<ext>` (URL-safe base64 of the MD5
  digest), rewrites references in the JS file and writes the hash file.
  `compute_file_hashes`, `rename_files` and `replace_in_file` are the steps.
- `leptosbuild.asset_sync` – `resync(src, dest, pkg_dir)` empties the site root
  except the pkg directory and `index.html`, then copies the assets in;
  `clean_dest`, `mirror` and `reserved` are the steps.

## Usage

```python
from pathlib import Path

from leptosbuild.cli import parse_cli
from leptosbuild.project import Config
from leptosbuild.cargo_cmd import build_cargo_server_cmd, build_cargo_front_cmd

cli = parse_cli(["build", "--release"])
config = Config.load(cli.opts(), Path.cwd(), Path("Cargo.toml"), False, None)
project = config.current_project()

server = build_cargo_server_cmd("build", project)
print(server.line)       # e.g. cargo build --package=example --bin=example --release
print(server.envs_str)   # LEPTOS_OUTPUT_NAME=example LEPTOS_SITE_ROOT=... 

front = build_cargo_front_cmd("build", True, project)
print(front.line)
```

Checking whether a change calls for a rebuild:

```python
from leptosbuild.changes import Change, ChangeSet

changes = ChangeSet()
changes.add(Change.STYLE)
changes.need_style_build(True, False)   # True
changes.need_server_build()             # False
```

## What it does not do

This package is a library; it installs no command. `parse_cli` only parses a
command line, and nothing in the package carries out the parsed commands. It
does not run wasm-bindgen, optimise or minify output, compile Sass or Tailwind
styles, precompress files, serve the site, watch files for changes, reload the
browser, run end-to-end tests, or generate new projects from templates. It
prepares configuration, command lines and site files; running the builds is up
to the caller.