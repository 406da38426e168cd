"""Podman secret resource - reconciles SecretConfig with remote secrets.

Podman secrets are immutable: there is no rename and no in-place update of the
payload or metadata. Every change to a remote-backed attribute is therefore a
replacement (delete + create), and ``update()`` only re-applies configuration
into state without calling Podman.
"""

import logging
from typing import Any, Optional

from podman_provider.contracts.resource import ResourcePlugin
from podman_provider.core.diff import Plan, plan
from podman_provider.core.exceptions import (
    InconsistentStateError,
    RemoteOperationError,
    SecretNotFoundError,
)
from podman_provider.core.models import DEFAULT_DRIVER, SecretConfig, SecretState
from podman_provider.core.schema import SECRET_SCHEMA, ResourceSchema, upgrade_secret_attributes
from podman_provider.observability.logging import get_logger

logger = logging.getLogger(__name__)

RESOURCE_TYPE = "podman_secret"


class SecretResource(ResourcePlugin):
    """Lifecycle implementation for ``podman_secret``.

    Holds nothing but the shared provider context, so one instance may serve
    any number of resource instances concurrently.

    Example:
        >>> resource = SecretResource(context)
        >>> state = resource.create(SecretConfig(name="db-password", secret="hunter2"))
        >>> state.driver
        'file'
    """

    type_suffix = "secret"

    @property
    def client(self):
        return self.context.client

    @classmethod
    def schema(cls) -> ResourceSchema:
        return SECRET_SCHEMA

    def create(self, config: SecretConfig) -> SecretState:
        """Create the secret in Podman.

        Driver, driver options and labels are only forwarded when set. The
        remote service does not deduplicate by name, so each call creates a
        new secret.

        Raises:
            RemoteOperationError: If Podman rejects the secret
        """
        try:
            secret_id = self.client.create(
                config.name,
                config.secret.get_secret_value().encode("utf-8"),
                driver=config.driver,
                driver_opts=config.driver_opts,
                labels=config.labels,
            )
        except RemoteOperationError as e:
            self._failed("create", e)
            raise

        logger.info(f"Created secret '{config.name}' ({secret_id})")
        get_logger().log_resource_created(RESOURCE_TYPE, secret_id, name=config.name)

        return SecretState(
            id=secret_id,
            name=config.name,
            driver=config.driver or DEFAULT_DRIVER,
            driver_opts=config.driver_opts,
            labels=config.labels,
            secret=config.secret,
        )

    def read(self, prior: SecretState) -> Optional[SecretState]:
        """Refresh state from Podman.

        Returns:
            Refreshed state, or None when no secret with ``prior.id`` exists

        Raises:
            InconsistentStateError: If Podman reports several secrets with the same id
            RemoteOperationError: If listing secrets fails
        """
        try:
            records = self.client.list(filters={"id": [prior.id]})
        except RemoteOperationError as e:
            self._failed("read", e, prior.id)
            raise

        # The id filter may match on prefix; only an exact id identifies the secret.
        matches = [record for record in records if record.id == prior.id]

        if not matches:
            logger.warning(f"Secret {prior.id} no longer exists, removing it from state")
            get_logger().log_resource_absent(RESOURCE_TYPE, prior.id)
            return None

        if len(matches) > 1:
            raise InconsistentStateError(
                f"Podman returned {len(matches)} secrets with id {prior.id}"
            )

        record = matches[0]

        secret = prior.secret
        if record.secret_data.get_secret_value():
            secret = record.secret_data
        elif prior.secret is not None:
            logger.debug(f"Podman returned no data for secret {prior.id}, keeping the known value")

        state = SecretState(
            id=record.id,
            name=record.name,
            driver=record.driver or prior.driver,
            driver_opts=_observed_map(record.driver_options, prior.driver_opts),
            labels=_observed_map(record.labels, prior.labels),
            secret=secret,
        )

        get_logger().log_resource_read(RESOURCE_TYPE, state.id, name=state.name)
        return state

    def update(self, config: SecretConfig, prior: SecretState) -> SecretState:
        """Re-apply configuration into state without touching Podman.

        Reached only for changes that do not require replacement, such as
        recording the payload of a freshly imported secret.
        """
        state = SecretState(
            id=prior.id,
            name=config.name,
            driver=config.driver or prior.driver or DEFAULT_DRIVER,
            driver_opts=config.driver_opts if config.driver_opts is not None else prior.driver_opts,
            labels=config.labels if config.labels is not None else prior.labels,
            secret=config.secret,
        )

        changed = [change.name for change in self.plan(config, prior).changes]
        logger.info(f"Updated secret '{config.name}' ({prior.id}) in state")
        get_logger().log_resource_updated(RESOURCE_TYPE, prior.id, changed)
        return state

    def delete(self, prior: SecretState) -> None:
        """Remove the secret from Podman; an already removed secret is not an error.

        Raises:
            RemoteOperationError: If Podman fails to remove an existing secret
        """
        try:
            self.client.remove(prior.id)
        except SecretNotFoundError:
            logger.warning(f"Secret {prior.id} was already removed")
            get_logger().log_resource_deleted(RESOURCE_TYPE, prior.id, already_absent=True)
            return
        except RemoteOperationError as e:
            self._failed("delete", e, prior.id)
            raise

        logger.info(f"Deleted secret {prior.id}")
        get_logger().log_resource_deleted(RESOURCE_TYPE, prior.id)

    def import_state(self, resource_id: str) -> SecretState:
        return SecretState(id=resource_id)

    def plan(self, config: Optional[SecretConfig], prior: Optional[SecretState]) -> Plan:
        return plan(config, prior, SECRET_SCHEMA)

    def parse_config(self, raw: dict[str, Any]) -> SecretConfig:
        return SecretConfig.model_validate(raw)

    def parse_state(self, attributes: dict[str, Any]) -> SecretState:
        return SecretState.from_attributes(attributes)

    def dump_state(self, state: SecretState) -> dict[str, Any]:
        return state.to_attributes()

    def upgrade_state(self, attributes: dict[str, Any], from_version: int) -> dict[str, Any]:
        return upgrade_secret_attributes(attributes, from_version)

    def _failed(self, operation: str, error: Exception, resource_id: Optional[str] = None):
        logger.error(f"Secret {operation} failed: {error}")
        get_logger().log_operation_failed(RESOURCE_TYPE, operation, str(error), resource_id=resource_id)


def _observed_map(observed: dict[str, str], prior: Optional[dict[str, str]]) -> Optional[dict[str, str]]:
    """Keep an unset map unset when Podman reports it empty."""
    if not observed and prior is None:
        return None
    return dict(observed)
