"""plyra-rollback observability: the leveled run log."""

from plyra_rollback.observability.run_log import (
    SUCCESS,
    ConsoleFormatter,
    RunLogFormatter,
    configure_run_logging,
    log_success,
)

__all__ = [
    "SUCCESS",
    "RunLogFormatter",
    "ConsoleFormatter",
    "configure_run_logging",
    "log_success",
]
