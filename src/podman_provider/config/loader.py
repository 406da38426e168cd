"""Configuration loader with Jinja2 templating support.

Supports template functions in manifest YAML:
- {{ env_var('KEY') }} - Read from environment variable
- {{ var('KEY') }} - Read from runtime variables (--vars)

Secret payloads are usually injected with ``env_var()`` so they never have to
be written into the manifest itself.
"""

import os
from jinja2 import Environment, StrictUndefined


class ConfigLoader:
    """Loads and renders configuration with Jinja2 templating."""

    def __init__(self, runtime_vars: dict[str, str] | None = None):
        """Initialize config loader.

        Args:
            runtime_vars: Variables passed via CLI (--vars key=value)
        """
        self.runtime_vars = runtime_vars or {}

        self.jinja_env = Environment(
            undefined=StrictUndefined,  # Error on undefined variables
            autoescape=False,  # Don't escape for YAML
        )

        self.jinja_env.globals['env_var'] = self._env_var
        self.jinja_env.globals['var'] = self._var

    def render_string(self, template_string: str) -> str:
        """Render a template string with Jinja2.

        Example:
            >>> loader = ConfigLoader(runtime_vars={"app": "billing"})
            >>> loader.render_string("{{ var('app') }}-db-password")
            'billing-db-password'
        """
        template = self.jinja_env.from_string(template_string)
        return template.render()

    def render_dict(self, config_dict: dict) -> dict:
        """Recursively render all string values in a dictionary."""
        result = {}
        for key, value in config_dict.items():
            if isinstance(value, str):
                result[key] = self.render_string(value)
            elif isinstance(value, dict):
                result[key] = self.render_dict(value)
            elif isinstance(value, list):
                result[key] = self._render_list(value)
            else:
                result[key] = value
        return result

    def _render_list(self, config_list: list) -> list:
        result = []
        for item in config_list:
            if isinstance(item, str):
                result.append(self.render_string(item))
            elif isinstance(item, dict):
                result.append(self.render_dict(item))
            elif isinstance(item, list):
                result.append(self._render_list(item))
            else:
                result.append(item)
        return result

    def _env_var(self, key: str, default: str | None = None) -> str:
        """Template function: Read from environment variable.

        Usage in YAML:
            secret: "{{ env_var('DB_PASSWORD') }}"
            endpoint: "{{ env_var('PODMAN_ENDPOINT', 'unix:///run/podman/podman.sock') }}"

        Raises:
            KeyError: If variable not set and no default provided
        """
        value = os.environ.get(key)
        if value is None:
            if default is not None:
                return default
            raise KeyError(f"Environment variable '{key}' not set and no default provided")
        return value

    def _var(self, key: str, default: str | None = None) -> str:
        """Template function: Read from runtime variables.

        Runtime variables are passed via CLI:
            podman-provider apply secrets.yaml --vars env=prod

        Raises:
            KeyError: If variable not set and no default provided
        """
        value = self.runtime_vars.get(key)
        if value is None:
            if default is not None:
                return default
            raise KeyError(
                f"Runtime variable '{key}' not set and no default provided. "
                f"Pass via: --vars {key}=<value>"
            )
        return value
