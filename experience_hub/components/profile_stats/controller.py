from collections import Counter
from typing import Any, Dict, List

from sqlalchemy import func
from sqlalchemy.orm import Session

from experience_hub.components.aggregation.controller import received_rating_average
from experience_hub.components.experiences.crud import ExperiencesCRUD
from experience_hub.components.experiences.models import Experiences, Prompts
from experience_hub.components.interactions.models import (
    Comments,
    PromptRatings,
    Reactions,
)
from experience_hub.components.users.crud import UsersCRUD
from experience_hub.components.users.models import Users
from experience_hub.core.exceptions import NotFoundException

TOP_TAGS_LIMIT = 10
RECENT_EXPERIENCES_LIMIT = 5


class ProfileStatsController:
    """Read-only rollups over a user's live experiences and interactions"""

    def __init__(self, db: Session):
        self.db = db
        self.users_crud = UsersCRUD(db)
        self.experiences_crud = ExperiencesCRUD(db)

    def get_profile_stats(self, user_id: int) -> Dict[str, Any]:
        user = self._get_active_user(user_id)
        experiences = self.experiences_crud.get_active_for_user(user.id)

        return {
            "user": user,
            "experiences": experiences,
            "stats": self.compute_stats(user, experiences),
        }

    def get_own_profile(self, user_id: int) -> Dict[str, Any]:
        """Profile stats plus the caller-only fields shown on /users/me"""
        profile = self.get_profile_stats(user_id)
        user = profile["user"]

        profile["stats"]["average_rating_given"] = self.average_rating_given(user.id)
        profile["stats"]["average_prompt_rating_received"] = received_rating_average(
            user.total_rating, user.rating_count
        )
        profile["recent_experiences"] = profile["experiences"][
            :RECENT_EXPERIENCES_LIMIT
        ]

        return profile

    def compute_stats(
        self, user: Users, experiences: List[Experiences]
    ) -> Dict[str, Any]:
        experience_ids = [experience.id for experience in experiences]

        return {
            "experience_count": len(experiences),
            "prompt_count": self._count_live_prompts(experience_ids),
            "total_reactions_received": self._count_reactions_received(experience_ids),
            "total_comments_received": self._count_comments_received(experience_ids),
            "comments_given": self._count_comments_given(user.id),
            "reactions_given": self._count_reactions_given(user.id),
            "ratings_given": self._count_ratings_given(user.id),
            "average_rating_received": self.average_rating_received(experiences),
            "ai_assistant_distribution": self.ai_assistant_distribution(experiences),
            "top_tags": self.top_tags(experiences),
        }

    @staticmethod
    def average_rating_received(experiences: List[Experiences]) -> float:
        if not experiences:
            return 0.0

        total = sum(experience.average_rating or 0.0 for experience in experiences)
        return total / len(experiences)

    @staticmethod
    def ai_assistant_distribution(experiences: List[Experiences]) -> Dict[str, int]:
        return dict(Counter(experience.ai_assistant_type for experience in experiences))

    @staticmethod
    def top_tags(
        experiences: List[Experiences], limit: int = TOP_TAGS_LIMIT
    ) -> List[Dict[str, Any]]:
        """
        Most used tags across the given experiences.

        Counter keeps insertion order and sorted() is stable, so tags with
        equal counts stay in the order they were first seen while walking
        the experiences newest first.
        """
        counts = Counter()
        for experience in experiences:
            counts.update(experience.tag_list)

        ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)

        return [{"tag": tag, "count": count} for tag, count in ranked[:limit]]

    def average_rating_given(self, user_id: int) -> float:
        average = (
            self.db.query(func.avg(PromptRatings.rating))
            .filter(PromptRatings.user_id == user_id)
            .scalar()
        )
        return float(average or 0.0)

    def _get_active_user(self, user_id: int) -> Users:
        user = self.users_crud.get_active_by_id(user_id)
        if not user:
            raise NotFoundException("User not found")
        return user

    def _count_live_prompts(self, experience_ids: List[int]) -> int:
        if not experience_ids:
            return 0

        return (
            self.db.query(func.count(Prompts.id))
            .filter(
                Prompts.experience_id.in_(experience_ids),
                Prompts.deleted_at.is_(None),
            )
            .scalar()
        )

    def _count_reactions_received(self, experience_ids: List[int]) -> int:
        if not experience_ids:
            return 0

        return (
            self.db.query(func.count(Reactions.id))
            .filter(Reactions.experience_id.in_(experience_ids))
            .scalar()
        )

    def _count_comments_received(self, experience_ids: List[int]) -> int:
        if not experience_ids:
            return 0

        return (
            self.db.query(func.count(Comments.id))
            .filter(
                Comments.experience_id.in_(experience_ids),
                Comments.deleted_at.is_(None),
            )
            .scalar()
        )

    def _count_comments_given(self, user_id: int) -> int:
        return (
            self.db.query(func.count(Comments.id))
            .filter(Comments.user_id == user_id, Comments.deleted_at.is_(None))
            .scalar()
        )

    def _count_reactions_given(self, user_id: int) -> int:
        return (
            self.db.query(func.count(Reactions.id))
            .filter(Reactions.user_id == user_id)
            .scalar()
        )

    def _count_ratings_given(self, user_id: int) -> int:
        return (
            self.db.query(func.count(PromptRatings.id))
            .filter(PromptRatings.user_id == user_id)
            .scalar()
        )
