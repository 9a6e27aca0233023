import pytest

from leptosbuild.profile import Profile


def test_default_debug():
    profile = Profile.from_options(False, None, None)
    assert str(profile) == "debug"
    assert profile.cargo_args() == []


def test_default_release():
    profile = Profile.from_options(True, None, None)
    assert str(profile) == "release"
    assert profile.cargo_args() == ["--release"]


def test_named_release():
    profile = Profile.from_options(True, "fast", "slow")
    assert str(profile) == "fast"
    assert profile.cargo_args() == ["--profile=fast"]


def test_named_debug():
    profile = Profile.from_options(False, "fast", "slow")
    assert str(profile) == "slow"
    assert profile.cargo_args() == ["--profile=slow"]


@pytest.mark.parametrize("is_release", [True, False])
def test_named_profile_is_not_builtin(is_release):
    profile = Profile.from_options(is_release, "release", "release")
    assert profile.named
    assert profile.cargo_args() == ["--profile=release"]


def test_equality():
    assert Profile.from_options(True, None, None) == Profile("release")
    assert Profile.from_options(False, None, None) != Profile("release")