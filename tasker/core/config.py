"""
FILE: tasker/core/config.py
PURPOSE: Load, create and save the workspace configuration (config.json)
EXPORTS:
  - ConfigStore: cached config access for one workspace root
  - default_config() -> Config
DEPENDENCIES:
  - json, pathlib (stdlib)
  - loguru (logging)
  - tasker.core.atomic (atomic_write)
  - tasker.core.models (Config, Column)
NOTES:
  - load() never fails: a missing or unreadable file yields in-memory
    defaults (not persisted), so read-only commands work before init
  - The loaded config is cached for the lifetime of the store
"""

import json
from pathlib import Path
from typing import Optional

from loguru import logger

from .atomic import atomic_write
from .constants import CONFIG_FILENAME, PROJECTS_DIRNAME, SCHEMA_VERSION
from .models import Column, Config, default_columns


def default_config() -> Config:
    """Config with the six canonical columns and no agent defaults."""
    return Config(schema=SCHEMA_VERSION, columns=default_columns())


def _normalize(cfg: Config) -> Config:
    if not cfg.schema:
        cfg.schema = SCHEMA_VERSION
    if not cfg.columns:
        cfg.columns = default_columns()
    return cfg


class ConfigStore:
    """Config access bound to a workspace root."""

    def __init__(self, root: Path):
        self.root = Path(root)
        self._cached: Optional[Config] = None

    @property
    def path(self) -> Path:
        return self.root / CONFIG_FILENAME

    def exists(self) -> bool:
        return self.path.is_file()

    def load(self) -> Config:
        """
        Return the workspace config, reading it once per store.

        Returns:
            Parsed config, or built-in defaults when the file is missing or
            cannot be parsed
        """
        if self._cached is None:
            self._cached = self._read()
        return self._cached

    def _read(self) -> Config:
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return default_config()
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Ignoring unreadable config {}: {}", self.path, e)
            return default_config()
        if not isinstance(data, dict):
            logger.warning("Ignoring config {}: expected a JSON object", self.path)
            return default_config()
        try:
            return _normalize(Config.from_dict(data))
        except (TypeError, ValueError) as e:
            logger.warning("Ignoring invalid config {}: {}", self.path, e)
            return default_config()

    def save(self, cfg: Config) -> Config:
        """Normalize, persist atomically and replace the cached config."""
        cfg = _normalize(cfg)
        atomic_write(self.path, cfg.to_json() + "\n")
        self._cached = cfg
        logger.info("Saved config {}", self.path)
        return cfg

    def ensure(self) -> Config:
        """
        Create the root tree and write default config if none exists.

        Safe to call multiple times; an existing config is loaded, never
        overwritten.
        """
        self.root.mkdir(parents=True, exist_ok=True)
        (self.root / PROJECTS_DIRNAME).mkdir(parents=True, exist_ok=True)
        if self.exists():
            self._cached = None
            return self.load()
        return self.save(default_config())

    def column_by_id(self, column_id: str) -> Optional[Column]:
        column_id = (column_id or "").strip().lower()
        return next((c for c in self.load().columns if c.id == column_id), None)

    def column_by_dir(self, dirname: str) -> Optional[Column]:
        dirname = (dirname or "").strip()
        return next((c for c in self.load().columns if c.dir == dirname), None)
