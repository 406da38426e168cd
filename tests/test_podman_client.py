"""Tests for the podman-py secret client adapter."""

import json
import pytest
from unittest.mock import MagicMock
from podman.errors import APIError, NotFound

from podman_provider.clients.podman_secrets import PodmanSecretClient
from podman_provider.contracts.secret_client import SecretRecord
from podman_provider.core.exceptions import RemoteOperationError, SecretNotFoundError


@pytest.fixture
def podman():
    return MagicMock()


@pytest.fixture
def client(podman):
    return PodmanSecretClient(podman)


def _secret(attrs):
    secret = MagicMock()
    secret.attrs = attrs
    return secret


class TestCreate:
    def test_minimal_create(self, client, podman):
        podman.api.post.return_value.json.return_value = {"ID": "abc123"}

        secret_id = client.create("db-password", b"hunter2")

        assert secret_id == "abc123"
        podman.api.post.assert_called_once_with(
            "/secrets/create", params={"name": "db-password"}, data=b"hunter2"
        )
        podman.api.post.return_value.raise_for_status.assert_called_once()

    def test_options_are_json_encoded(self, client, podman):
        podman.api.post.return_value.json.return_value = {"ID": "abc123"}

        client.create(
            "db-password",
            b"hunter2",
            driver="shell",
            driver_opts={"store": "/usr/bin/store"},
            labels={"app": "db"},
        )

        params = podman.api.post.call_args[1]["params"]
        assert params["driver"] == "shell"
        assert json.loads(params["driveropts"]) == {"store": "/usr/bin/store"}
        assert json.loads(params["labels"]) == {"app": "db"}

    def test_api_error(self, client, podman):
        podman.api.post.return_value.raise_for_status.side_effect = APIError("secret name in use")

        with pytest.raises(RemoteOperationError, match="secret name in use") as exc_info:
            client.create("db-password", b"hunter2")

        assert exc_info.value.operation == "create secret"

    def test_unexpected_response(self, client, podman):
        podman.api.post.return_value.json.return_value = {}

        with pytest.raises(RemoteOperationError, match="unexpected response"):
            client.create("db-password", b"hunter2")


class TestList:
    def test_maps_libpod_json(self, client, podman):
        podman.secrets.list.return_value = [
            _secret({
                "ID": "abc123",
                "Spec": {
                    "Name": "db-password",
                    "Driver": {"Name": "file", "Options": {"path": "/var/lib/secrets"}},
                    "Labels": {"app": "db"},
                },
            })
        ]

        records = client.list(filters={"id": ["abc123"]})

        podman.secrets.list.assert_called_once_with(filters={"id": ["abc123"]})
        assert records == [
            SecretRecord(
                id="abc123",
                name="db-password",
                driver="file",
                driver_options={"path": "/var/lib/secrets"},
                labels={"app": "db"},
            )
        ]

    def test_null_maps_become_empty(self, client, podman):
        podman.secrets.list.return_value = [
            _secret({"ID": "abc123", "Spec": {"Name": "db", "Driver": {"Name": "file", "Options": None}, "Labels": None}})
        ]

        record = client.list()[0]

        assert record.driver_options == {}
        assert record.labels == {}
        assert record.secret_data.get_secret_value() == ""

    def test_secret_data_is_masked_in_repr(self, client, podman):
        podman.secrets.list.return_value = [
            _secret({"ID": "abc123", "Spec": {"Name": "db"}, "SecretData": "hunter2"})
        ]

        record = client.list()[0]

        assert record.secret_data.get_secret_value() == "hunter2"
        assert "hunter2" not in repr(record)

    def test_api_error(self, client, podman):
        podman.secrets.list.side_effect = APIError("service unavailable")

        with pytest.raises(RemoteOperationError, match="service unavailable"):
            client.list()


class TestRemove:
    def test_remove(self, client, podman):
        client.remove("abc123")
        podman.secrets.remove.assert_called_once_with("abc123")

    def test_not_found(self, client, podman):
        podman.secrets.remove.side_effect = NotFound("no such secret")

        with pytest.raises(SecretNotFoundError, match="no such secret"):
            client.remove("abc123")

    def test_other_error(self, client, podman):
        podman.secrets.remove.side_effect = APIError("secret is in use")

        with pytest.raises(RemoteOperationError, match="in use") as exc_info:
            client.remove("abc123")

        assert not isinstance(exc_info.value, SecretNotFoundError)
