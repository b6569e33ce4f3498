"""Configuration loader for dbprovisioner."""

import json
import os
import re
from dataclasses import replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from dbprovisioner.constants import (
    DEFAULT_DB_HOST,
    DEFAULT_DB_NAME,
    DEFAULT_DB_PASSWORD,
    DEFAULT_DB_PORT,
    DEFAULT_DB_USER,
)
from dbprovisioner.errors import ProvisionerError
from dbprovisioner.models import DatabaseConfig

_IDENTIFIER_RE = re.compile(r"^[A-Za-z0-9_]+$")


class ConfigLoader:
    """Resolves the database configuration: defaults, then file, then environment."""

    SUPPORTED_KEYS = {"name", "user", "password", "host", "port"}
    YAML_SUFFIXES = {".yml", ".yaml"}

    ENV_VARS = {
        "name": "DB_NAME",
        "user": "DB_USER",
        "password": "DB_PASSWORD",
        "host": "DB_HOST",
        "port": "DB_PORT",
    }

    def __init__(self, logger, console=None):
        self.logger = logger
        self.console = console

    @staticmethod
    def defaults() -> DatabaseConfig:
        return DatabaseConfig(
            name=DEFAULT_DB_NAME,
            user=DEFAULT_DB_USER,
            password=DEFAULT_DB_PASSWORD,
            host=DEFAULT_DB_HOST,
            port=DEFAULT_DB_PORT,
        )

    def _warn(self, message: str):
        if self.console is not None:
            self.console.print(f"[yellow]{message}[/yellow]")
        self.logger.warning(message)

    def load_file(self, config_path: Optional[str]) -> Dict[str, Any]:
        """Reads a JSON (or YAML) config file. Problems are reported and yield no overrides."""
        if not config_path:
            return {}

        path = Path(config_path)
        if not path.exists():
            self.logger.debug("Config file not found, using defaults: %s", config_path)
            return {}

        try:
            text = path.read_text(encoding="utf-8")
            if path.suffix.lower() in self.YAML_SUFFIXES:
                parsed = yaml.safe_load(text)
            else:
                parsed = json.loads(text)
        except (json.JSONDecodeError, yaml.YAMLError, OSError, UnicodeDecodeError) as exc:
            self._warn(f"Failed to load config file, using defaults: {exc}")
            return {}

        if parsed is None:
            return {}
        if not isinstance(parsed, dict):
            self._warn("Failed to load config file, using defaults: root must be an object.")
            return {}

        unknown = sorted(str(key) for key in set(parsed.keys()) - self.SUPPORTED_KEYS)
        if unknown:
            self._warn(f"Ignoring unknown configuration keys: {', '.join(unknown)}")

        values: Dict[str, Any] = {}
        for key, value in parsed.items():
            if key not in self.SUPPORTED_KEYS:
                continue
            if value is None:
                self._warn(f"Ignoring null value for '{key}'")
                continue
            values[key] = value

        self.logger.info("Loaded configuration from %s", config_path)
        return values

    def load_environment(self, environ: Mapping[str, str]) -> Dict[str, Any]:
        overrides: Dict[str, Any] = {}
        for key, env_name in self.ENV_VARS.items():
            value = environ.get(env_name)
            if value:
                overrides[key] = value
        return overrides

    def resolve(
        self,
        config_path: Optional[str],
        environ: Optional[Mapping[str, str]] = None,
    ) -> DatabaseConfig:
        if environ is None:
            environ = os.environ

        config = self.defaults()

        file_values = self.load_file(config_path)
        if file_values:
            config = self._apply(config, file_values, source=str(config_path))

        env_values = self.load_environment(environ)
        if env_values:
            config = self._apply(config, env_values, source="environment")

        self.validate(config)
        return config

    def _apply(self, config: DatabaseConfig, values: Dict[str, Any], source: str) -> DatabaseConfig:
        changes: Dict[str, Any] = {}
        for key, value in values.items():
            if key == "port":
                changes[key] = self._parse_port(value, source)
            else:
                changes[key] = str(value)
        return replace(config, **changes)

    @staticmethod
    def _parse_port(value: Any, source: str) -> int:
        try:
            port = int(str(value).strip())
        except (TypeError, ValueError) as exc:
            raise ProvisionerError(f"Invalid database port '{value}' from {source}.") from exc

        if not 0 < port < 65536:
            raise ProvisionerError(f"Database port {port} from {source} is out of range.")
        return port

    @staticmethod
    def validate(config: DatabaseConfig):
        """Database and user names are interpolated into SQL, so only plain identifiers pass."""
        for label, value in (("database name", config.name), ("database user", config.user)):
            if not _IDENTIFIER_RE.match(value):
                raise ProvisionerError(
                    f"Invalid {label} '{value}'. Use letters, digits and underscores only."
                )
        if not config.host.strip():
            raise ProvisionerError("Database host must not be empty.")
