"""
plyra-rollback CLI
~~~~~~~~~~~~~~~~~~

Command-line interface for plyra-rollback.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from plyra_rollback.config.defaults import DEFAULT_CONFIG_FILENAME
from plyra_rollback.config.loader import (
    ensure_project_root,
    load_config,
    load_config_from_dict,
)
from plyra_rollback.config.schema import RollbackConfig
from plyra_rollback.core.models import RollbackPoint
from plyra_rollback.core.orchestrator import DEFAULT_REASON, RecoveryOrchestrator
from plyra_rollback.exceptions import RollbackToolError
from plyra_rollback.observability.run_log import configure_run_logging
from plyra_rollback.rollback.registry import LATEST

logger = logging.getLogger("plyra_rollback.cli")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="plyra-rollback",
        description=(
            "Roll the project back to a recorded rollback point: back up, "
            "revert, verify, and record the result."
        ),
    )
    parser.add_argument(
        "target",
        nargs="?",
        default=LATEST,
        help="Rollback point id, description fragment, or 'latest' (default: latest)",
    )
    parser.add_argument(
        "--force",
        action="store_true",
        help="Skip the confirmation prompt",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Resolve and report the target without changing anything",
    )
    parser.add_argument(
        "--reason",
        type=str,
        default=DEFAULT_REASON,
        help=f"Reason stored in the rollback history (default: {DEFAULT_REASON!r})",
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help=f"Path to the YAML config (default: ./{DEFAULT_CONFIG_FILENAME} if present)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log debug output",
    )
    parser.add_argument(
        "--version",
        action="store_true",
        help="Show version and exit",
    )

    modes = parser.add_mutually_exclusive_group()
    modes.add_argument(
        "--list",
        action="store_true",
        help="List known rollback points and exit",
    )
    modes.add_argument(
        "--history",
        action="store_true",
        help="Show past rollbacks and exit",
    )
    modes.add_argument(
        "--checkpoint",
        metavar="DESCRIPTION",
        type=str,
        default=None,
        help="Record the current commit as a new rollback point and exit",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point. Returns the process exit code."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.version:
        from plyra_rollback import __version__

        print(f"plyra-rollback {__version__}")
        return 0

    level = "DEBUG" if args.verbose else "INFO"
    configure_run_logging(level=level)

    try:
        config = _load_config(args.config)
        ensure_project_root(config)
    except RollbackToolError as exc:
        logger.error("%s", exc)
        return 1

    configure_run_logging(
        log_file=config.log_path,
        level=level if args.verbose else config.logging.level,
    )

    confirm = None if args.force else _prompt_confirm
    orchestrator = RecoveryOrchestrator.from_config(config, confirm=confirm)

    if args.list:
        return _run_list(orchestrator)
    if args.history:
        return _run_history(orchestrator)
    if args.checkpoint is not None:
        return _run_checkpoint(orchestrator, args.checkpoint)

    result = orchestrator.run(
        args.target,
        force=args.force,
        dry_run=args.dry_run,
        reason=args.reason,
    )
    return result.exit_code


def _load_config(path: str | None) -> RollbackConfig:
    """Load the config from ``path``, the default file, or built-in defaults."""
    if path:
        return load_config(path)
    if Path(DEFAULT_CONFIG_FILENAME).is_file():
        return load_config(DEFAULT_CONFIG_FILENAME)
    return load_config_from_dict({})


def _prompt_confirm(point: RollbackPoint) -> bool:
    """Interactive confirmation; anything but y/yes declines."""
    print(f"About to roll back to {point.summary()}.")
    print("Configured files are backed up first; uncommitted changes will be lost.")
    try:
        answer = input("Proceed? [y/N] ")
    except (EOFError, KeyboardInterrupt):
        print()
        return False
    return answer.strip().lower() in ("y", "yes")


def _run_list(orchestrator: RecoveryOrchestrator) -> int:
    """Run the --list command."""
    try:
        points = orchestrator.registry.load()
    except RollbackToolError as exc:
        logger.error("%s", exc)
        return 1

    if not points:
        print("No rollback points recorded.")
        return 0
    for index, point in enumerate(points):
        marker = " (latest)" if index == 0 else ""
        print(
            f"  {point.id:<12}  {point.created_at.isoformat(timespec='seconds')}  "
            f"{point.description}{marker}"
        )
    return 0


def _run_history(orchestrator: RecoveryOrchestrator) -> int:
    """Run the --history command."""
    try:
        history = orchestrator.ledger.history()
    except RollbackToolError as exc:
        logger.error("%s", exc)
        return 1

    if not history:
        print("No rollbacks recorded.")
        return 0
    for record in history:
        print(
            f"  {record.rollback_time.isoformat(timespec='seconds')}  "
            f"{record.target_point_id:<12}  {record.reason}  ({record.backup_location})"
        )
    return 0


def _run_checkpoint(orchestrator: RecoveryOrchestrator, description: str) -> int:
    """Run the --checkpoint command."""
    try:
        orchestrator.checkpoint(description)
    except RollbackToolError as exc:
        logger.error("%s", exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
