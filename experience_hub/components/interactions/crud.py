from datetime import datetime
from typing import Dict, List, Optional
from sqlalchemy import func
from sqlalchemy.orm import Session

from experience_hub.components.interactions.models import (
    Comments,
    PromptRatings,
    Reactions,
)
from experience_hub.core.base_crud import BaseCRUD


class CommentsCRUD(BaseCRUD):
    """CRUD operations for Comments"""

    def __init__(self, db: Session):
        super().__init__(Comments, db)

    def get_active_comment(self, id: int, experience_id: int) -> Optional[Comments]:
        return (
            self.db.query(Comments)
            .filter(
                Comments.id == id,
                Comments.experience_id == experience_id,
                Comments.deleted_at.is_(None),
            )
            .first()
        )

    def count_active_for_experience(self, experience_id: int) -> int:
        return (
            self.db.query(func.count(Comments.id))
            .filter(
                Comments.experience_id == experience_id,
                Comments.deleted_at.is_(None),
            )
            .scalar()
        )

    def soft_delete_for_experience(self, experience_id: int, deleted_at: datetime) -> int:
        return (
            self.db.query(Comments)
            .filter(
                Comments.experience_id == experience_id,
                Comments.deleted_at.is_(None),
            )
            .update({Comments.deleted_at: deleted_at}, synchronize_session="fetch")
        )

    def restore_for_experience(self, experience_id: int, deleted_at: datetime) -> int:
        return (
            self.db.query(Comments)
            .filter(
                Comments.experience_id == experience_id,
                Comments.deleted_at == deleted_at,
            )
            .update({Comments.deleted_at: None}, synchronize_session="fetch")
        )

    def soft_delete_for_user(self, user_id: int, deleted_at: datetime) -> List[int]:
        """Soft delete a user's live comments, returning the experiences they were on"""
        experience_ids = self._experience_ids_for_user(user_id, None)

        self.db.query(Comments).filter(
            Comments.user_id == user_id,
            Comments.deleted_at.is_(None),
        ).update({Comments.deleted_at: deleted_at}, synchronize_session="fetch")

        return experience_ids

    def restore_for_user(self, user_id: int, deleted_at: datetime) -> List[int]:
        """Restore the comments removed together with their author"""
        experience_ids = self._experience_ids_for_user(user_id, deleted_at)

        self.db.query(Comments).filter(
            Comments.user_id == user_id,
            Comments.deleted_at == deleted_at,
        ).update({Comments.deleted_at: None}, synchronize_session="fetch")

        return experience_ids

    def _experience_ids_for_user(
        self, user_id: int, deleted_at: datetime | None
    ) -> List[int]:
        rows = (
            self.db.query(Comments.experience_id)
            .filter(
                Comments.user_id == user_id,
                Comments.deleted_at.is_(None)
                if deleted_at is None
                else Comments.deleted_at == deleted_at,
            )
            .distinct()
            .all()
        )
        return [row.experience_id for row in rows]


class ReactionsCRUD(BaseCRUD):
    """CRUD operations for Reactions"""

    def __init__(self, db: Session):
        super().__init__(Reactions, db)

    def get_by_key(
        self, user_id: int, experience_id: int, reaction_type: str
    ) -> Optional[Reactions]:
        return (
            self.db.query(Reactions)
            .filter(
                Reactions.user_id == user_id,
                Reactions.experience_id == experience_id,
                Reactions.reaction_type == reaction_type,
            )
            .first()
        )

    def count_for_experience(self, experience_id: int) -> int:
        return (
            self.db.query(func.count(Reactions.id))
            .filter(Reactions.experience_id == experience_id)
            .scalar()
        )

    def counts_by_type(self, experience_id: int) -> Dict[str, int]:
        rows = (
            self.db.query(Reactions.reaction_type, func.count(Reactions.id))
            .filter(Reactions.experience_id == experience_id)
            .group_by(Reactions.reaction_type)
            .order_by(Reactions.reaction_type)
            .all()
        )
        return {reaction_type: count for reaction_type, count in rows}

    def delete_for_experience(self, experience_id: int) -> int:
        """Reactions carry no delete marker, so a cascade removes them"""
        return (
            self.db.query(Reactions)
            .filter(Reactions.experience_id == experience_id)
            .delete(synchronize_session="fetch")
        )


class PromptRatingsCRUD(BaseCRUD):
    """CRUD operations for PromptRatings"""

    def __init__(self, db: Session):
        super().__init__(PromptRatings, db)

    def get_by_user_and_prompt(
        self, user_id: int, prompt_id: int
    ) -> Optional[PromptRatings]:
        return (
            self.db.query(PromptRatings)
            .filter(
                PromptRatings.user_id == user_id,
                PromptRatings.prompt_id == prompt_id,
            )
            .first()
        )

    def stats_for_prompt(self, prompt_id: int) -> tuple[float, int]:
        """Mean and count of the current rating rows of a prompt"""
        average, count = (
            self.db.query(func.avg(PromptRatings.rating), func.count(PromptRatings.id))
            .filter(PromptRatings.prompt_id == prompt_id)
            .one()
        )
        return float(average or 0.0), int(count or 0)
