"""Shared fixtures for provider tests."""

import pytest

from podman_provider.core.context import ProviderContext
from podman_provider.core.models import SecretConfig
from podman_provider.observability.logging import disable_structured_logging
from podman_provider.resources.secret import SecretResource
from podman_provider.testing import FakeSecretClient


@pytest.fixture
def fake_client():
    return FakeSecretClient()


@pytest.fixture
def context(fake_client):
    return ProviderContext(client=fake_client, endpoint="unix:///run/user/1000/podman/podman.sock")


@pytest.fixture
def resource(context):
    return SecretResource(context)


@pytest.fixture
def secret_config():
    return SecretConfig(name="db-password", secret="hunter2")


@pytest.fixture(autouse=True)
def _structured_logging_off():
    yield
    disable_structured_logging()
