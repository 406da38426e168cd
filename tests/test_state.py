"""Tests for the JSON state store."""

import json
import os
import stat
import pytest

from podman_provider.core.exceptions import StateFileError
from podman_provider.core.state import StateEntry, StateStore, default_state_path


@pytest.fixture
def state_path(tmp_path):
    return tmp_path / "state" / "podman-provider.state.json"


def _entry(secret_id="abc123"):
    return StateEntry("podman_secret", 1, {"id": secret_id, "name": "db-password", "secret": "hunter2"})


class TestStateStore:
    def test_missing_file_is_empty(self, state_path):
        assert StateStore(state_path).addresses() == []

    def test_set_persists(self, state_path):
        StateStore(state_path).set("db_password", _entry())

        reloaded = StateStore(state_path).get("db_password")

        assert reloaded.type == "podman_secret"
        assert reloaded.schema_version == 1
        assert reloaded.attributes["id"] == "abc123"

    def test_file_format(self, state_path):
        StateStore(state_path).set("db_password", _entry())

        data = json.loads(state_path.read_text())

        assert data["format_version"] == 1
        assert data["resources"]["db_password"]["type"] == "podman_secret"

    def test_file_is_owner_only(self, state_path):
        StateStore(state_path).set("db_password", _entry())

        mode = stat.S_IMODE(os.stat(state_path).st_mode)
        assert mode == 0o600

    def test_remove(self, state_path):
        store = StateStore(state_path)
        store.set("a", _entry("a1"))
        store.set("b", _entry("b1"))

        store.remove("a")

        assert StateStore(state_path).addresses() == ["b"]

    def test_remove_unknown_address_is_noop(self, state_path):
        store = StateStore(state_path)
        store.remove("nothing")
        assert not state_path.exists()

    def test_missing_schema_version_defaults_to_zero(self, state_path):
        state_path.parent.mkdir(parents=True)
        state_path.write_text(json.dumps({
            "format_version": 1,
            "resources": {"db_password": {"type": "podman_secret", "attributes": {"id": "abc123"}}},
        }))

        assert StateStore(state_path).get("db_password").schema_version == 0

    def test_corrupt_file(self, state_path):
        state_path.parent.mkdir(parents=True)
        state_path.write_text("{not json")

        with pytest.raises(StateFileError, match="Cannot read"):
            StateStore(state_path).load()

    def test_unknown_format_version(self, state_path):
        state_path.parent.mkdir(parents=True)
        state_path.write_text(json.dumps({"format_version": 99, "resources": {}}))

        with pytest.raises(StateFileError, match="Unsupported state format"):
            StateStore(state_path).load()


class TestDefaultStatePath:
    def test_env_override(self, monkeypatch, tmp_path):
        monkeypatch.setenv("PODMAN_PROVIDER_STATE", str(tmp_path / "custom.json"))
        assert default_state_path() == tmp_path / "custom.json"

    def test_default(self, monkeypatch):
        monkeypatch.delenv("PODMAN_PROVIDER_STATE", raising=False)
        assert default_state_path().name == "podman-provider.state.json"
