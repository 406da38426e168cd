"""Testing utilities for the Podman provider."""

from podman_provider.testing.fixtures import FakeSecretClient

__all__ = [
    "FakeSecretClient",
]
