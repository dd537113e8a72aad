"""Configuration loader for data sources, regions and access control."""

import yaml
from pathlib import Path
from typing import Any

DEFAULT_MAX_RESULTS = 3650


class Config:
    """Configuration manager that loads from YAML files."""

    def __init__(self, config_path: str | Path | None = None):
        if config_path is None:
            config_path = Path(__file__).parent.parent / "config" / "sources.yaml"

        self._config_path = Path(config_path)
        self._config: dict[str, Any] = {}
        self._load()

    def _load(self) -> None:
        """Load configuration from YAML file."""
        if not self._config_path.exists():
            raise FileNotFoundError(f"Config file not found: {self._config_path}")

        with open(self._config_path) as f:
            self._config = yaml.safe_load(f) or {}

    def get_source_config(self, source_name: str) -> dict[str, Any]:
        """Get configuration for a specific data source."""
        sources = self._config.get('sources', {})
        if source_name not in sources:
            raise KeyError(f"Source '{source_name}' not found in configuration")
        return sources[source_name] or {}

    def get_enabled_sources(self) -> list[str]:
        """Get list of enabled data source names."""
        sources = self._config.get('sources', {})
        return [name for name, cfg in sources.items() if (cfg or {}).get('enabled', False)]

    def get_global_config(self) -> dict[str, Any]:
        """Get global configuration settings."""
        return self._config.get('global', {})

    def get_regions_config(self) -> dict[str, Any]:
        """Get the aggregate region definitions."""
        return self._config.get('regions', {})

    def get_auth_config(self) -> dict[str, Any]:
        """Get the credential names and limits used for access control."""
        return self._config.get('auth', {})

    def get_max_results(self) -> int:
        """Get the maximum number of rows a single request may return."""
        return int(self.get_global_config().get('max_results', DEFAULT_MAX_RESULTS))

    def get_retired_sources(self) -> dict[str, str]:
        """Get retired source names mapped to the source that replaced them."""
        return self._config.get('retired_sources', {})
