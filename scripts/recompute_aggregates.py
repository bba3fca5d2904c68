#!/usr/bin/env python
"""
Rebuild every derived rating and count field from the live rows.

Run after restoring data or editing rows by hand:

    python scripts/recompute_aggregates.py
    python scripts/recompute_aggregates.py --experience-id 42
"""

import argparse
import sys

from experience_hub.components.aggregation.controller import AggregationController
from experience_hub.core.exceptions import NotFoundException
from experience_hub.core.log import configure_logging, logger
from experience_hub.database.session import db_session


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Recompute derived aggregates")
    parser.add_argument(
        "--experience-id",
        type=int,
        help="Only recompute one experience and its prompts",
    )
    return parser.parse_args(argv)


def recompute_experience(controller: AggregationController, experience_id: int):
    experience = controller.get_active_experience(experience_id)
    for prompt in controller.prompts_crud.get_active_for_experience(experience.id):
        controller.recompute_prompt_rating(prompt)
    controller.recompute_experience_rollup(experience.id)
    controller.recompute_user_received_rating(experience.user_id)
    logger.info(f"Recomputed aggregates for experience {experience.id}")


def main(argv=None) -> int:
    configure_logging()
    args = parse_args(argv)

    try:
        with db_session() as db:
            controller = AggregationController(db)

            if args.experience_id is not None:
                recompute_experience(controller, args.experience_id)
            else:
                counts = controller.rebuild_all()
                logger.info(f"Recomputed aggregates: {counts}")
    except NotFoundException as e:
        logger.error(f"Experience {args.experience_id}: {e.message}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
