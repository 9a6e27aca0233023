import pytest

from leptosbuild.cli import (
    Cli,
    LogTarget,
    NewCommand,
    Opts,
    absolute_git_url,
    parse_cli,
)


@pytest.mark.parametrize(
    "shortcut, repo",
    [
        ("start-trunk", "start-trunk"),
        ("leptos-rs/start-trunk", "start-trunk"),
        ("start-actix", "start"),
        ("leptos-rs/start", "start"),
        ("leptos-rs/start-actix", "start"),
        ("start-axum", "start-axum"),
        ("leptos-rs/start-axum-workspace", "start-axum-workspace"),
        ("start-aws", "start-aws"),
        ("leptos-rs/start-spin", "start-spin"),
    ],
)
def test_absolute_git_url_shortcuts(shortcut, repo):
    assert absolute_git_url(shortcut) == f"https://github.com/leptos-rs/{repo}"


def test_absolute_git_url_passthrough():
    assert absolute_git_url("https://git.example.com/x/y") == "https://git.example.com/x/y"
    assert absolute_git_url(None) is None


def test_build_defaults():
    cli = parse_cli(["build"])
    assert cli.command == "build"
    opts = cli.opts()
    assert opts == Opts(js_minify=True)
    assert cli.bin_args() is None


def test_build_flags():
    cli = parse_cli(
        [
            "--manifest-path", "ws/Cargo.toml",
            "--log", "wasm", "--log", "server",
            "build", "-r", "-P", "--hot-reload", "-p", "proj",
            "--features", "a", "--features", "b",
            "--lib-features", "hydrate", "--bin-features", "ssr",
            "--lib-cargo-args", "-j", "--lib-cargo-args", "8",
            "--wasm-debug", "-vv", "--js-minify", "off",
        ]
    )
    assert cli.manifest_path == "ws/Cargo.toml"
    assert cli.log == [LogTarget.WASM, LogTarget.SERVER]
    opts = cli.opts()
    assert opts.release and opts.precompress and opts.hot_reload and opts.wasm_debug
    assert opts.project == "proj"
    assert opts.features == ["a", "b"]
    assert opts.lib_features == ["hydrate"]
    assert opts.bin_features == ["ssr"]
    assert opts.lib_cargo_args == ["-j", "8"]
    assert opts.bin_cargo_args is None
    assert opts.verbose == 2
    assert opts.js_minify is False


def test_opts_returns_copy():
    cli = parse_cli(["test", "--features", "x"])
    first = cli.opts()
    first.features.append("y")
    assert cli.opts().features == ["x"]


def test_invalid_boolish_rejected():
    with pytest.raises(SystemExit):
        parse_cli(["build", "--js-minify", "maybe"])


def test_invalid_log_rejected():
    with pytest.raises(SystemExit):
        parse_cli(["--log", "nope", "build"])


def test_missing_command_rejected():
    with pytest.raises(SystemExit):
        parse_cli([])


def test_end_to_end_command():
    cli = parse_cli(["end-to-end", "--release"])
    assert cli.command == "end-to-end"
    assert cli.opts().release
    assert cli.bin_args() is None


def test_serve_bin_args_after_separator():
    cli = parse_cli(["watch", "-r", "--", "--foo", "bar"])
    assert cli.opts().release
    assert cli.bin_args() == ["--foo", "bar"]


def test_serve_without_bin_args():
    cli = parse_cli(["serve", "--release"])
    assert cli.opts().release
    assert cli.bin_args() == []


def test_new_command():
    cli = parse_cli(["new", "--git", "leptos-rs/start", "-n", "site", "--init"])
    assert cli.opts() is None
    assert cli.bin_args() is None
    assert cli.new == NewCommand(git="leptos-rs/start", name="site", init=True)


def test_new_requires_arguments():
    with pytest.raises(SystemExit):
        parse_cli(["new"])


@pytest.mark.parametrize(
    "argv",
    [
        ["new", "--git", "a", "--path", "b"],
        ["new", "--git", "a", "--branch", "x", "--tag", "y"],
    ],
)
def test_new_conflicts(argv):
    with pytest.raises(SystemExit):
        parse_cli(argv)


def test_cli_opts_none_for_new_instance():
    cli = Cli(command="new", new=NewCommand(path="tpl"))
    assert cli.opts() is None
    assert cli.new.path == "tpl"
    assert cli.bin_args() is None