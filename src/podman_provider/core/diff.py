"""Drift detection - compare desired configuration with observed state.

Comparison rules:
- An optional attribute left unset in configuration matches whatever the
  remote currently holds (unset is not the same as empty).
- An empty map in configuration matches a map that is unset in state.
- Sensitive attributes are compared by value but never rendered.
- A sensitive value with no known prior value (e.g. right after an import)
  is adopted in place instead of forcing a replacement.
"""

from typing import Any, Literal, Optional

from pydantic import BaseModel, Field, SecretStr

from podman_provider.core.models import SecretConfig, SecretState
from podman_provider.core.schema import SECRET_SCHEMA, ResourceSchema

SENSITIVE_PLACEHOLDER = "(sensitive value)"

Action = Literal["noop", "create", "update", "replace", "delete"]


class AttributeChange(BaseModel):
    """A single attribute whose desired value differs from state."""

    name: str
    before: Any = None
    after: Any = None
    requires_replace: bool = False


class Plan(BaseModel):
    """Action required to move a resource from its state to its configuration."""

    action: Action
    changes: list[AttributeChange] = Field(default_factory=list)

    @property
    def requires_replace(self) -> bool:
        return any(change.requires_replace for change in self.changes)


def _reveal(value: Any) -> Any:
    if isinstance(value, SecretStr):
        return value.get_secret_value()
    return value


def diff(
    config: SecretConfig,
    state: SecretState,
    schema: ResourceSchema = SECRET_SCHEMA,
) -> list[AttributeChange]:
    """List configurable attributes whose desired value differs from state."""
    changes = []

    for attribute in schema.configurable():
        desired = getattr(config, attribute.name)
        observed = getattr(state, attribute.name)

        if desired is None and not attribute.required:
            continue

        if attribute.sensitive and observed is None:
            changes.append(
                AttributeChange(
                    name=attribute.name,
                    before=None,
                    after=SENSITIVE_PLACEHOLDER,
                    requires_replace=False,
                )
            )
            continue

        if attribute.type == "map" and observed is None:
            # Podman reports a missing map as empty
            observed = {}

        if _reveal(desired) == _reveal(observed):
            continue

        if attribute.sensitive:
            before = after = SENSITIVE_PLACEHOLDER
        else:
            before, after = observed, desired

        changes.append(
            AttributeChange(
                name=attribute.name,
                before=before,
                after=after,
                requires_replace=attribute.requires_replace,
            )
        )

    return changes


def plan(
    config: Optional[SecretConfig],
    state: Optional[SecretState],
    schema: ResourceSchema = SECRET_SCHEMA,
) -> Plan:
    """Decide which lifecycle operation reconciles state with configuration.

    Example:
        >>> plan(SecretConfig(name="db", secret="x"), None).action
        'create'
    """
    if config is None:
        return Plan(action="noop" if state is None else "delete")

    if state is None:
        return Plan(action="create")

    changes = diff(config, state, schema)
    if not changes:
        return Plan(action="noop")

    if any(change.requires_replace for change in changes):
        return Plan(action="replace", changes=changes)
    return Plan(action="update", changes=changes)
