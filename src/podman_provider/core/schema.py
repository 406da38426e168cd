"""Schema declarations - Pydantic models describing provider and resource attributes.

Schemas are versioned so persisted state written by an older release can be
upgraded instead of silently misread.
"""

from typing import Literal, Optional
from pydantic import BaseModel, Field


class Attribute(BaseModel):
    """A single attribute of a provider or resource schema."""

    name: str = Field(..., description="Attribute name as seen by the host")
    type: Literal["string", "map"] = Field("string", description="Value type (maps are string -> string)")
    description: str = Field("", description="Human readable description")
    required: bool = Field(False, description="Must be set in configuration")
    optional: bool = Field(False, description="May be set in configuration")
    computed: bool = Field(False, description="Filled in by the provider when not configured")
    sensitive: bool = Field(False, description="Value must never be displayed or logged")
    requires_replace: bool = Field(False, description="Changing the value replaces the remote object")

    @property
    def configurable(self) -> bool:
        return self.required or self.optional


class ResourceSchema(BaseModel):
    """Complete schema of a resource type."""

    version: int = Field(..., description="Schema version for state upgrades")
    description: str = Field("", description="Resource description")
    attributes: list[Attribute] = Field(default_factory=list)

    def get(self, name: str) -> Optional[Attribute]:
        for attribute in self.attributes:
            if attribute.name == name:
                return attribute
        return None

    def configurable(self) -> list[Attribute]:
        return [a for a in self.attributes if a.configurable]


class ProviderSchema(BaseModel):
    """Schema of the provider configuration block."""

    attributes: list[Attribute] = Field(default_factory=list)


# =============================================================================
# Secret Resource
# =============================================================================


SECRET_SCHEMA_VERSION = 1

SECRET_SCHEMA = ResourceSchema(
    version=SECRET_SCHEMA_VERSION,
    description="Podman secret",
    attributes=[
        Attribute(
            name="name",
            required=True,
            requires_replace=True,
            description="Secret name; Podman has no rename so changes replace the secret",
        ),
        Attribute(
            name="driver",
            optional=True,
            computed=True,
            requires_replace=True,
            description="Secret driver (defaults to 'file')",
        ),
        Attribute(
            name="driver_opts",
            type="map",
            optional=True,
            requires_replace=True,
            description="Driver specific options",
        ),
        Attribute(
            name="labels",
            type="map",
            optional=True,
            requires_replace=True,
            description="Labels attached to the secret",
        ),
        Attribute(
            name="secret",
            required=True,
            sensitive=True,
            requires_replace=True,
            description="Secret payload",
        ),
        Attribute(
            name="id",
            computed=True,
            description="Secret id assigned by Podman; stable once set",
        ),
    ],
)


PROVIDER_SCHEMA = ProviderSchema(
    attributes=[
        Attribute(
            name="endpoint",
            optional=True,
            description="Podman API endpoint (defaults to $XDG_RUNTIME_DIR/podman/podman.sock)",
        ),
    ],
)


def parse_legacy_labels(value: Optional[str]) -> Optional[dict[str, str]]:
    """Parse labels stored as a single string by schema version 0.

    Accepts ``"k=v,k2=v2"``; a bare token becomes a key with an empty value.

    Example:
        >>> parse_legacy_labels("app=db,tier")
        {'app': 'db', 'tier': ''}
    """
    if not value:
        return None

    labels = {}
    for item in value.split(","):
        item = item.strip()
        if not item:
            continue
        key, _, label_value = item.partition("=")
        labels[key.strip()] = label_value.strip()

    return labels or None


def upgrade_secret_attributes(attributes: dict, from_version: int) -> dict:
    """Upgrade persisted secret attributes to the current schema version.

    Args:
        attributes: Attribute dict as stored by the host
        from_version: Schema version the attributes were written with

    Returns:
        Attribute dict valid for SECRET_SCHEMA_VERSION

    Raises:
        ValueError: If the stored version is newer than this release understands
    """
    if from_version > SECRET_SCHEMA_VERSION:
        raise ValueError(
            f"State was written with secret schema version {from_version}, "
            f"this release supports up to {SECRET_SCHEMA_VERSION}"
        )

    upgraded = dict(attributes)

    if from_version < 1:
        labels = upgraded.get("labels")
        if labels is None or isinstance(labels, str):
            upgraded["labels"] = parse_legacy_labels(labels)

    return upgraded
