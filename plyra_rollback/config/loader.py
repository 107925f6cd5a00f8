"""
Configuration Loader
~~~~~~~~~~~~~~~~~~~~

Loads and validates rollback.yaml, merging with defaults, and checks
that the configured project root is the one we are standing in.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

import yaml

from plyra_rollback.config.defaults import DEFAULT_CONFIG
from plyra_rollback.config.schema import RollbackConfig
from plyra_rollback.exceptions import (
    ConfigFileNotFoundError,
    ConfigValidationError,
    ProjectRootError,
)

__all__ = ["load_config", "load_config_from_dict", "ensure_project_root"]

logger = logging.getLogger(__name__)


def _deep_merge(base: dict, override: dict) -> dict:
    """Deep merge two dicts, with override taking precedence."""
    result = dict(base)
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def load_config(path: str | os.PathLike[str]) -> RollbackConfig:
    """
    Load configuration from a YAML file.

    Merges user config with defaults and validates via Pydantic. A
    relative ``project.root`` is taken relative to the file's directory.

    Args:
        path: Path to the YAML configuration file.

    Returns:
        Validated RollbackConfig instance.

    Raises:
        ConfigFileNotFoundError: If the file doesn't exist.
        ConfigValidationError: If the config fails validation.
    """
    if not os.path.exists(path):
        raise ConfigFileNotFoundError(f"Configuration file not found: {path}")

    try:
        with open(path, encoding="utf-8") as f:
            user_config = yaml.safe_load(f) or {}
    except yaml.YAMLError as exc:
        raise ConfigValidationError(
            f"Invalid YAML in configuration file: {exc}"
        ) from exc

    if not isinstance(user_config, dict):
        raise ConfigValidationError(
            f"Configuration file must contain a mapping: {path}"
        )

    config = load_config_from_dict(user_config)
    root = Path(config.project.root).expanduser()
    if not root.is_absolute():
        config.project.root = str(Path(path).resolve().parent / root)
    logger.debug("Loaded configuration from %s", path)
    return config


def load_config_from_dict(data: dict[str, Any]) -> RollbackConfig:
    """
    Load configuration from a dictionary, merging with defaults.

    Args:
        data: Configuration dictionary.

    Returns:
        Validated RollbackConfig instance.

    Raises:
        ConfigValidationError: If validation fails.
    """
    merged = _deep_merge(DEFAULT_CONFIG, data)

    try:
        return RollbackConfig(**merged)
    except Exception as exc:
        raise ConfigValidationError(f"Configuration validation failed: {exc}") from exc


def ensure_project_root(config: RollbackConfig, cwd: str | os.PathLike[str] | None = None) -> Path:
    """
    Verify that ``cwd`` is the configured project root.

    The root must be the working directory and contain every marker
    listed in ``project.markers``.

    Raises:
        ProjectRootError: If either check fails.
    """
    here = Path(cwd or os.getcwd()).resolve()
    root = config.root
    if here != root:
        raise ProjectRootError(
            f"must be run from the project root {root} (current directory: {here})",
            details={"root": str(root), "cwd": str(here)},
        )
    missing = [m for m in config.project.markers if not (root / m).exists()]
    if missing:
        raise ProjectRootError(
            f"{root} does not look like the project root (missing: {', '.join(missing)})",
            details={"root": str(root), "missing": missing},
        )
    return root
