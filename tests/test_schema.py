"""Tests for schema declarations and state upgrades."""

import pytest
from pydantic import ValidationError

from podman_provider.core.models import SecretConfig
from podman_provider.core.schema import (
    PROVIDER_SCHEMA,
    SECRET_SCHEMA,
    SECRET_SCHEMA_VERSION,
    parse_legacy_labels,
    upgrade_secret_attributes,
)


class TestSecretSchema:
    def test_attributes(self):
        names = [a.name for a in SECRET_SCHEMA.attributes]
        assert names == ["name", "driver", "driver_opts", "labels", "secret", "id"]

    def test_labels_are_a_map(self):
        assert SECRET_SCHEMA.get("labels").type == "map"

    def test_driver_is_optional_and_computed(self):
        driver = SECRET_SCHEMA.get("driver")
        assert driver.optional and driver.computed and not driver.required

    def test_unknown_attribute(self):
        assert SECRET_SCHEMA.get("nope") is None

    def test_provider_endpoint_is_optional(self):
        endpoint = PROVIDER_SCHEMA.attributes[0]
        assert endpoint.name == "endpoint"
        assert endpoint.optional and not endpoint.required


class TestConfigValidation:
    def test_name_required(self):
        with pytest.raises(ValidationError):
            SecretConfig(secret="hunter2")

    def test_secret_required(self):
        with pytest.raises(ValidationError):
            SecretConfig(name="db-password")

    def test_empty_name_rejected(self):
        with pytest.raises(ValidationError):
            SecretConfig(name="", secret="hunter2")

    def test_unknown_field_rejected(self):
        with pytest.raises(ValidationError):
            SecretConfig(name="db-password", secret="hunter2", label={"a": "b"})

    def test_validation_error_does_not_echo_secret(self):
        with pytest.raises(ValidationError) as exc_info:
            SecretConfig(name="", secret="hunter2")
        assert "hunter2" not in str(exc_info.value)


class TestLegacyLabels:
    def test_pairs(self):
        assert parse_legacy_labels("app=db,tier=backend") == {"app": "db", "tier": "backend"}

    def test_bare_key(self):
        assert parse_legacy_labels("app=db, critical") == {"app": "db", "critical": ""}

    def test_empty(self):
        assert parse_legacy_labels("") is None
        assert parse_legacy_labels(None) is None
        assert parse_legacy_labels(" , ") is None

    def test_value_containing_equals(self):
        assert parse_legacy_labels("expr=a=b") == {"expr": "a=b"}


class TestUpgrade:
    def test_version_zero_string_labels(self):
        upgraded = upgrade_secret_attributes({"id": "abc123", "labels": "app=db"}, 0)
        assert upgraded == {"id": "abc123", "labels": {"app": "db"}}

    def test_version_zero_map_labels_untouched(self):
        upgraded = upgrade_secret_attributes({"id": "abc123", "labels": {"app": "db"}}, 0)
        assert upgraded["labels"] == {"app": "db"}

    def test_current_version_untouched(self):
        attributes = {"id": "abc123", "labels": None}
        assert upgrade_secret_attributes(attributes, SECRET_SCHEMA_VERSION) == attributes

    def test_newer_version_rejected(self):
        with pytest.raises(ValueError, match="schema version"):
            upgrade_secret_attributes({"id": "abc123"}, SECRET_SCHEMA_VERSION + 1)
