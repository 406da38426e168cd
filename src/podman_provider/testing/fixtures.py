"""Test fixtures for exercising resources without a Podman service.

Provides:
- FakeSecretClient: In-memory secret backend that behaves like libpod
"""

import itertools
from typing import Optional

from pydantic import SecretStr

from podman_provider.contracts.secret_client import SecretClientPlugin, SecretRecord
from podman_provider.core.exceptions import RemoteOperationError, SecretNotFoundError
from podman_provider.core.models import DEFAULT_DRIVER


class FakeSecretClient(SecretClientPlugin):
    """In-memory secret client.

    Mirrors the libpod behaviour the reconciler depends on:
    - names are not deduplicated, every create yields a new id
    - the id filter matches on prefix
    - secret data is only returned when ``reveal_data`` is set
    - removing an unknown id raises SecretNotFoundError

    Example:
        >>> client = FakeSecretClient(ids=["abc123"])
        >>> client.create("foo", b"bar")
        'abc123'
        >>> client.removed
        []
    """

    def __init__(self, ids: Optional[list[str]] = None, reveal_data: bool = False):
        self.records: dict[str, SecretRecord] = {}
        self.reveal_data = reveal_data
        self.created: list[dict] = []
        self.removed: list[str] = []
        self.fail_next: Optional[str] = None
        self._ids = iter(ids) if ids is not None else (f"{n:025x}" for n in itertools.count(1))

    def _maybe_fail(self, operation: str):
        if self.fail_next is not None:
            message, self.fail_next = self.fail_next, None
            raise RemoteOperationError(operation, message)

    def create(
        self,
        name: str,
        payload: bytes,
        driver: Optional[str] = None,
        driver_opts: Optional[dict[str, str]] = None,
        labels: Optional[dict[str, str]] = None,
    ) -> str:
        self._maybe_fail("create secret")

        secret_id = next(self._ids)
        self.created.append(
            {"name": name, "driver": driver, "driver_opts": driver_opts, "labels": labels}
        )
        self.records[secret_id] = SecretRecord(
            id=secret_id,
            name=name,
            driver=driver or DEFAULT_DRIVER,
            driver_options=driver_opts or {},
            labels=labels or {},
            secret_data=SecretStr(payload.decode("utf-8")),
        )
        return secret_id

    def list(self, filters: Optional[dict[str, list[str]]] = None) -> list[SecretRecord]:
        self._maybe_fail("list secrets")

        prefixes = (filters or {}).get("id")
        matches = [
            record for secret_id, record in self.records.items()
            if prefixes is None or any(secret_id.startswith(p) for p in prefixes)
        ]

        if self.reveal_data:
            return [record.model_copy() for record in matches]
        return [record.model_copy(update={"secret_data": SecretStr("")}) for record in matches]

    def remove(self, secret_id: str) -> None:
        self._maybe_fail("remove secret")

        self.removed.append(secret_id)
        if secret_id not in self.records:
            raise SecretNotFoundError("remove secret", f"no secret with ID {secret_id}: no such secret")
        del self.records[secret_id]
