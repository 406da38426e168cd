"""Remote secret client contract.

A secret client is the thin seam between the reconciler and the container
engine's API. The production implementation wraps podman-py; tests use the
in-memory client from ``podman_provider.testing``.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional

from pydantic import BaseModel, Field, SecretStr


class SecretRecord(BaseModel):
    """A secret as reported by the remote service."""

    id: str
    name: str
    driver: str = ""
    driver_options: dict[str, str] = Field(default_factory=dict)
    labels: dict[str, str] = Field(default_factory=dict)
    secret_data: SecretStr = Field(SecretStr(""), repr=False)

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "SecretRecord":
        """Build a record from libpod secret JSON.

        Example:
            >>> SecretRecord.from_api({"ID": "abc", "Spec": {"Name": "db", "Driver": {"Name": "file"}}})
            SecretRecord(id='abc', name='db', driver='file', driver_options={}, labels={})
        """
        spec = data.get("Spec") or {}
        driver = spec.get("Driver") or {}
        return cls(
            id=data.get("ID", ""),
            name=spec.get("Name", ""),
            driver=driver.get("Name") or "",
            driver_options=driver.get("Options") or {},
            labels=spec.get("Labels") or {},
            secret_data=SecretStr(data.get("SecretData") or ""),
        )


class SecretClientPlugin(ABC):
    """Interface for remote secret backends."""

    @abstractmethod
    def create(
        self,
        name: str,
        payload: bytes,
        driver: Optional[str] = None,
        driver_opts: Optional[dict[str, str]] = None,
        labels: Optional[dict[str, str]] = None,
    ) -> str:
        """Create a secret and return its id.

        Optional arguments left as None are not sent to the remote service.

        Raises:
            RemoteOperationError: If the remote call fails
        """
        ...

    @abstractmethod
    def list(self, filters: Optional[dict[str, list[str]]] = None) -> list[SecretRecord]:
        """List secrets matching the given filters.

        Raises:
            RemoteOperationError: If the remote call fails
        """
        ...

    @abstractmethod
    def remove(self, secret_id: str) -> None:
        """Remove a secret by id.

        Raises:
            SecretNotFoundError: If no secret with this id exists
            RemoteOperationError: If the remote call fails otherwise
        """
        ...
