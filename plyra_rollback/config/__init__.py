"""plyra-rollback configuration: loading and validation."""

from plyra_rollback.config.defaults import DEFAULT_CONFIG, DEFAULT_CONFIG_FILENAME
from plyra_rollback.config.loader import (
    ensure_project_root,
    load_config,
    load_config_from_dict,
)
from plyra_rollback.config.schema import RollbackConfig

__all__ = [
    "load_config",
    "load_config_from_dict",
    "ensure_project_root",
    "RollbackConfig",
    "DEFAULT_CONFIG",
    "DEFAULT_CONFIG_FILENAME",
]
