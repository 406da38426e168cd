"""Typed models for desired configuration and observed state of a Podman secret.

The secret payload is held as ``pydantic.SecretStr`` in every model so that
repr(), str() and JSON dumps render it masked. Plaintext is only produced on
purpose: for the remote payload and for the persisted state attributes.
"""

from typing import Any, Optional
from pydantic import BaseModel, Field, SecretStr

DEFAULT_DRIVER = "file"


class ProviderConfig(BaseModel):
    """Provider configuration block."""

    endpoint: Optional[str] = Field(None, description="Podman API endpoint, e.g. unix:///run/podman/podman.sock")
    timeout: Optional[int] = Field(None, description="Timeout in seconds for API calls")

    class Config:
        extra = "forbid"


class SecretConfig(BaseModel):
    """Desired configuration of a secret, supplied per operation by the host."""

    name: str = Field(..., min_length=1, description="Secret name")
    driver: Optional[str] = Field(None, description="Secret driver (default: file)")
    driver_opts: Optional[dict[str, str]] = Field(None, description="Driver options")
    labels: Optional[dict[str, str]] = Field(None, description="Secret labels")
    secret: SecretStr = Field(..., description="Secret payload")

    class Config:
        extra = "forbid"


class SecretState(BaseModel):
    """Observed state of a secret as persisted by the host.

    Only ``id`` is guaranteed; an imported secret carries nothing else until
    the next read.
    """

    id: str = Field(..., description="Secret id assigned by Podman")
    name: Optional[str] = None
    driver: Optional[str] = None
    driver_opts: Optional[dict[str, str]] = None
    labels: Optional[dict[str, str]] = None
    secret: Optional[SecretStr] = None

    class Config:
        extra = "forbid"

    def to_attributes(self) -> dict[str, Any]:
        """Flat attribute dict for persistence, secret in plaintext."""
        attributes = self.model_dump(exclude={"secret"})
        attributes["secret"] = self.secret.get_secret_value() if self.secret is not None else None
        return attributes

    @classmethod
    def from_attributes(cls, attributes: dict[str, Any]) -> "SecretState":
        return cls.model_validate(attributes)
