"""Project configuration, cargo command assembly and site file tooling for Leptos applications."""

__version__ = "0.2.28"