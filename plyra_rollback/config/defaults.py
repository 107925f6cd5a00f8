"""
Default Configuration
~~~~~~~~~~~~~~~~~~~~~

Sensible defaults for plyra-rollback when no config file is provided.
"""

from __future__ import annotations

__all__ = ["DEFAULT_CONFIG", "DEFAULT_CONFIG_FILENAME"]

DEFAULT_CONFIG_FILENAME = "rollback.yaml"

DEFAULT_CONFIG: dict = {
    "version": "1.0",
    "project": {
        "root": ".",
        "markers": [".git"],
    },
    "passport": {
        "path": ".rollback/passport.json",
    },
    "backup": {
        "dir": ".rollback/backups",
        "globs": [
            "package.json",
            "package-lock.json",
            "*.config.js",
            ".env*",
            "src/**/*",
        ],
    },
    "revert": {
        "command": ["git", "reset", "--hard"],
        "timeout_seconds": 120,
    },
    "verification": {
        "command": ["npm", "test"],
        "timeout_seconds": 1800,
    },
    "lock": {
        "path": ".rollback/rollback.lock",
        "timeout_seconds": 2.0,
    },
    "logging": {
        "file": ".rollback/rollback.log",
        "level": "INFO",
    },
}
