from leptosbuild.versions import (
    ENV_VAR_LEPTOS_SASS_VERSION,
    ENV_VAR_LEPTOS_TAILWIND_VERSION,
    VersionConfig,
)


def test_default_versions():
    assert VersionConfig.TAILWIND.default_version() == "v4.0.6"
    assert VersionConfig.SASS.default_version() == "1.83.4"


def test_env_var_names():
    assert VersionConfig.TAILWIND.env_var_name() == ENV_VAR_LEPTOS_TAILWIND_VERSION
    assert VersionConfig.SASS.env_var_name() == ENV_VAR_LEPTOS_SASS_VERSION
    assert ENV_VAR_LEPTOS_TAILWIND_VERSION == "LEPTOS_TAILWIND_VERSION"


def test_version_falls_back_to_default(monkeypatch):
    monkeypatch.delenv(ENV_VAR_LEPTOS_TAILWIND_VERSION, raising=False)
    monkeypatch.delenv(ENV_VAR_LEPTOS_SASS_VERSION, raising=False)
    assert VersionConfig.TAILWIND.version() == VersionConfig.TAILWIND.default_version()
    assert VersionConfig.SASS.version() == VersionConfig.SASS.default_version()


def test_version_from_environment(monkeypatch):
    monkeypatch.setenv(ENV_VAR_LEPTOS_SASS_VERSION, "9.9.9")
    monkeypatch.delenv(ENV_VAR_LEPTOS_TAILWIND_VERSION, raising=False)
    assert VersionConfig.SASS.version() == "9.9.9"
    assert VersionConfig.TAILWIND.version() == "v4.0.6"