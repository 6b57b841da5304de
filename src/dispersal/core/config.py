"""Hierarchical YAML configuration system using OmegaConf."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from omegaconf import DictConfig, OmegaConf


class DispersalConfig:
    """Loads and merges YAML configuration files.

    A base config is merged with any ``overrides/*.yaml`` files found next
    to it (sorted by name), then with dot-path overrides from the CLI.
    """

    def __init__(self, config_path: str | Path = "config/default.yaml"):
        self._config_path = Path(config_path)
        self._config: DictConfig | None = None

    def load(self, validate: bool = False) -> DictConfig:
        """Load base config and merge override files.

        Args:
            validate: If True, validate the merged config against the
                pydantic schema and raise ``pydantic.ValidationError``
                on invalid values.
        """
        if not self._config_path.exists():
            raise FileNotFoundError(f"Config not found: {self._config_path}")

        base = OmegaConf.load(self._config_path)
        assert isinstance(base, DictConfig)

        override_dir = self._config_path.parent / "overrides"
        if override_dir.is_dir():
            for yaml_file in sorted(override_dir.glob("*.yaml")):
                base = OmegaConf.merge(base, OmegaConf.load(yaml_file))

        if validate or OmegaConf.select(base, "dispersal.system.validate_config", default=False):
            from dispersal.core.config_schema import validate_config

            validate_config(OmegaConf.to_container(base, resolve=True))

        self._config = base
        return self._config

    def override(self, dotpath: str, value: Any) -> None:
        """Override a config value using dot notation.

        Example: config.override("dispersal.distribution.strategy", "cluster")
        """
        if self._config is None:
            raise RuntimeError("Config not loaded yet. Call load() first.")
        OmegaConf.update(self._config, dotpath, value)

    def resolve_path(self, relative: str) -> Path:
        """Resolve a path from the config relative to the config file's project root."""
        path = Path(relative)
        if path.is_absolute() or path.exists():
            return path
        return self._config_path.parent.parent / path

    @property
    def cfg(self) -> DictConfig:
        if self._config is None:
            raise RuntimeError("Config not loaded yet. Call load() first.")
        return self._config
