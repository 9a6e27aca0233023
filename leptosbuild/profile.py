"""Cargo build profiles."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Profile:
    """A cargo profile: the built-in debug or release one, or a named one."""

    name: str
    named: bool = False

    @classmethod
    def from_options(
        cls, is_release: bool, release: str | None, debug: str | None
    ) -> Profile:
        """Pick the profile for a build mode, preferring a configured name."""
        if is_release:
            return cls(release, named=True) if release is not None else cls("release")
        return cls(debug, named=True) if debug is not None else cls("debug")

    def __str__(self) -> str:
        return self.name

    def cargo_args(self) -> list[str]:
        """The cargo arguments that select this profile."""
        if self.named:
            return [f"--profile={self.name}"]
        if self.name == "release":
            return ["--release"]
        return []