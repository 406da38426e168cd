"""Podman secrets provider - declarative management of Podman secrets."""

__version__ = "0.1.0"
