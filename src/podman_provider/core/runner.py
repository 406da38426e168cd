"""Runner - drives the resource lifecycle for a manifest against a state store.

The runner:
1. Refreshes every resource in state (read), dropping resources whose remote
   object is gone
2. Plans each address: create, update, replace, delete or noop. Planning on
   its own refreshes in memory and leaves the state file untouched
3. Executes the plans one address at a time, persisting state after every
   successful operation
4. Collects per-address results

A failed address keeps its previous state and does not stop the others.
"""

import logging
import time
from datetime import datetime, timezone
from typing import Any, Optional

from podman_provider.config.manifest import Manifest
from podman_provider.contracts.resource import ResourcePlugin
from podman_provider.core.context import ProviderContext
from podman_provider.core.diff import Plan
from podman_provider.core.exceptions import ProviderError, StateFileError
from podman_provider.core.state import StateEntry, StateStore

logger = logging.getLogger(__name__)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


class RunResults:
    """Results of a runner invocation."""

    def __init__(self, command: str):
        self.command = command
        self.started_at = _now()
        self.completed_at: Optional[str] = None
        self.status = "running"
        self.resources: dict[str, dict] = {}

    def record(self, address: str, action: str, status: str, duration: float, error: Optional[str] = None):
        result = {"action": action, "status": status, "duration_seconds": duration}
        if error is not None:
            result["error"] = error
        self.resources[address] = result

    def finish(self):
        self.completed_at = _now()
        failed = [a for a, r in self.resources.items() if r["status"] == "failed"]
        self.status = "failed" if failed else "success"

    def raise_for_status(self):
        """Raise ProviderError listing the failed addresses, if any."""
        failed = {a: r["error"] for a, r in self.resources.items() if r["status"] == "failed"}
        if failed:
            raise ProviderError(f"{self.command.capitalize()} failed: {failed}")

    def to_dict(self) -> dict:
        return {
            "command": self.command,
            "started_at": self.started_at,
            "completed_at": self.completed_at,
            "status": self.status,
            "resources": self.resources,
        }


class Runner:
    """Applies manifests through a provider's resources.

    Example:
        >>> provider = PodmanProvider()
        >>> context = provider.configure(manifest.provider)
        >>> runner = Runner(provider, context, StateStore(Path("podman-provider.state.json")))
        >>> results = runner.apply(manifest)
    """

    def __init__(self, provider: Any, context: ProviderContext, store: StateStore):
        self.provider = provider
        self.context = context
        self.store = store
        self._resources: dict[str, ResourcePlugin] = {}

    def _resource(self, type_name: str) -> ResourcePlugin:
        if type_name not in self._resources:
            self._resources[type_name] = self.provider.resource(type_name, self.context)
        return self._resources[type_name]

    def _load_state(self, address: str, persist: bool = True) -> Optional[tuple[ResourcePlugin, Any]]:
        """Resource and parsed state for an address, upgrading old schema versions.

        The upgraded attributes are only written back when ``persist`` is set.
        """
        entry = self.store.get(address)
        if entry is None:
            return None

        resource = self._resource(entry.type)
        current_version = resource.schema().version
        attributes = entry.attributes

        if entry.schema_version > current_version:
            raise StateFileError(
                f"State of {address} was written with schema version {entry.schema_version}, "
                f"this release supports up to {current_version}"
            )

        if entry.schema_version < current_version:
            logger.info(
                f"Upgrading state of {address} from schema version "
                f"{entry.schema_version} to {current_version}"
            )
            attributes = resource.upgrade_state(attributes, entry.schema_version)
            if persist:
                self.store.set(address, StateEntry(entry.type, current_version, attributes))

        return resource, resource.parse_state(attributes)

    def _save_state(self, address: str, type_name: str, resource: ResourcePlugin, state: Any):
        entry = StateEntry(type_name, resource.schema().version, resource.dump_state(state))
        self.store.set(address, entry)

    def _refresh(self, persist: bool) -> tuple[RunResults, dict[str, tuple[ResourcePlugin, Optional[Any]]]]:
        """Read every stored resource.

        Returns the results and, per readable address, its resource and the
        refreshed state (None when the remote object is gone). Stored state is
        only rewritten when ``persist`` is set.
        """
        results = RunResults("refresh")
        observed = {}

        for address in self.store.addresses():
            start_time = time.time()
            entry = self.store.get(address)
            try:
                resource, prior = self._load_state(address, persist=persist)
                state = resource.read(prior)
                if persist:
                    if state is None:
                        self.store.remove(address)
                    else:
                        self._save_state(address, entry.type, resource, state)
            except (ProviderError, ValueError) as e:
                logger.error(f"Refresh of {address} failed: {e}")
                results.record(address, "read", "failed", time.time() - start_time, error=str(e))
                continue

            observed[address] = (resource, state)
            status = "absent" if state is None else "success"
            results.record(address, "read", status, time.time() - start_time)

        results.finish()
        return results, observed

    def refresh(self) -> RunResults:
        """Read every stored resource and update or drop its state."""
        results, _ = self._refresh(persist=True)
        return results

    def plan(self, manifest: Manifest, refresh: bool = True) -> dict[str, Plan]:
        """Plan every address in the manifest and in state.

        Planning never writes the state file: refreshed and upgraded state is
        only used in memory.

        Raises:
            pydantic.ValidationError: If a resource configuration is invalid
            ProviderError: If refreshing state fails
        """
        if refresh:
            refreshed, observed = self._refresh(persist=False)
            refreshed.raise_for_status()
        else:
            observed = {
                address: self._load_state(address, persist=False)
                for address in self.store.addresses()
            }

        plans = {}
        for address in manifest.resources:
            type_name = manifest.resource_type(address)
            resource = self._resource(type_name)
            config = resource.parse_config(manifest.resource_config(address))

            prior = None
            if address in observed:
                state_resource, prior = observed[address]
                if prior is not None and state_resource is not resource:
                    # Resource type changed: the old object must go first.
                    plans[address] = Plan(action="replace")
                    continue

            plans[address] = resource.plan(config, prior)

        for address, (_, state) in observed.items():
            if address not in manifest.resources and state is not None:
                plans[address] = Plan(action="delete")

        return plans

    def apply(self, manifest: Manifest, plans: Optional[dict[str, Plan]] = None) -> RunResults:
        """Execute plans for the manifest.

        Without ``plans`` the stored state is refreshed and saved first, then
        planned. Callers passing their own plans are expected to have called
        ``refresh()`` beforehand.

        Raises:
            ProviderError: If the refresh before planning fails
        """
        if plans is None:
            self.refresh().raise_for_status()
            plans = self.plan(manifest, refresh=False)
        results = RunResults("apply")

        for address, resource_plan in plans.items():
            start_time = time.time()
            try:
                self._execute(address, resource_plan, manifest)
                status = "unchanged" if resource_plan.action == "noop" else "success"
                results.record(address, resource_plan.action, status, time.time() - start_time)
            except ProviderError as e:
                logger.error(f"{resource_plan.action} of {address} failed: {e}")
                results.record(address, resource_plan.action, "failed", time.time() - start_time, error=str(e))

        results.finish()
        return results

    def _execute(self, address: str, resource_plan: Plan, manifest: Manifest):
        action = resource_plan.action
        if action == "noop":
            return

        if action in ("delete", "replace"):
            resource, prior = self._load_state(address)
            resource.delete(prior)
            self.store.remove(address)
            if action == "delete":
                return

        type_name = manifest.resource_type(address)
        resource = self._resource(type_name)
        config = resource.parse_config(manifest.resource_config(address))

        if action == "update":
            _, prior = self._load_state(address)
            state = resource.update(config, prior)
        else:
            state = resource.create(config)

        self._save_state(address, type_name, resource, state)

    def destroy(self) -> RunResults:
        """Delete every resource in state."""
        results = RunResults("destroy")

        for address in self.store.addresses():
            start_time = time.time()
            try:
                resource, prior = self._load_state(address)
                resource.delete(prior)
                self.store.remove(address)
                results.record(address, "delete", "success", time.time() - start_time)
            except ProviderError as e:
                logger.error(f"Delete of {address} failed: {e}")
                results.record(address, "delete", "failed", time.time() - start_time, error=str(e))

        results.finish()
        return results

    def import_resource(self, address: str, type_name: str, resource_id: str) -> Any:
        """Import an existing remote object into state under ``address``.

        Raises:
            ProviderError: If the address is already managed or the object does not exist
        """
        if self.store.get(address) is not None:
            raise ProviderError(f"Address {address} is already present in state")

        resource = self._resource(type_name)
        state = resource.read(resource.import_state(resource_id))
        if state is None:
            raise ProviderError(f"Cannot import {address}: no {type_name} with id {resource_id}")

        self._save_state(address, type_name, resource, state)
        return state
