#!/usr/bin/env python
"""
Operator tasks for soft-deleted data.

    python scripts/manage_deleted.py purge --days 30
    python scripts/manage_deleted.py delete-user 7
    python scripts/manage_deleted.py restore-user 7
    python scripts/manage_deleted.py restore-experience 42
"""

import argparse
import sys
from datetime import datetime, timedelta, timezone

from experience_hub.components.soft_delete.controller import SoftDeleteController
from experience_hub.core.config import SOFT_DELETE_RETENTION_DAYS
from experience_hub.core.exceptions import NotFoundException, ValidationException
from experience_hub.core.log import configure_logging, logger
from experience_hub.database.session import db_session


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Manage soft-deleted data")
    commands = parser.add_subparsers(dest="command", required=True)

    purge = commands.add_parser(
        "purge", help="Hard delete rows soft deleted longer ago than the retention"
    )
    purge.add_argument(
        "--days",
        type=int,
        default=SOFT_DELETE_RETENTION_DAYS,
        help=f"Retention in days (default {SOFT_DELETE_RETENTION_DAYS})",
    )

    for name in ("delete-user", "restore-user"):
        command = commands.add_parser(name)
        command.add_argument("user_id", type=int)

    restore_experience = commands.add_parser("restore-experience")
    restore_experience.add_argument("experience_id", type=int)

    args = parser.parse_args(argv)
    if args.command == "purge" and args.days < 0:
        parser.error("--days must not be negative")

    return args


def run(controller: SoftDeleteController, args) -> None:
    if args.command == "purge":
        cutoff = datetime.now(timezone.utc) - timedelta(days=args.days)
        purged = controller.purge_deleted(cutoff)
        logger.info(f"Purge complete: {purged}")

    elif args.command == "delete-user":
        user = controller.users_crud.get_by_id(args.user_id)
        if not user:
            raise NotFoundException("User not found")
        controller.delete_user(user)

    elif args.command == "restore-user":
        controller.restore_user(args.user_id)

    elif args.command == "restore-experience":
        controller.restore_experience(args.experience_id)


def main(argv=None) -> int:
    configure_logging()
    args = parse_args(argv)

    try:
        with db_session() as db:
            run(SoftDeleteController(db), args)
    except (NotFoundException, ValidationException) as e:
        logger.error(f"{args.command} failed: {e.message}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
