from sqlalchemy.orm import Session

from experience_hub.components.aggregation.controller import AggregationController
from experience_hub.components.interactions.crud import CommentsCRUD
from experience_hub.components.interactions.models import (
    Comments,
    PromptRatings,
    Reactions,
)
from experience_hub.components.users.models import Users
from experience_hub.core.config import INTERACTION_DUPLICATE_POLICY
from experience_hub.core.enums import DuplicatePolicy
from experience_hub.core.exceptions import AuthorizationException, NotFoundException
from experience_hub.core.log import logger


class InteractionFlow:
    """Comments, reactions and ratings left by a verified user"""

    def __init__(self, db: Session, duplicate_policy: str | None = None):
        self.db = db
        self.aggregation = AggregationController(db)
        self.comments_crud = CommentsCRUD(db)
        self.duplicate_policy = DuplicatePolicy(
            duplicate_policy or INTERACTION_DUPLICATE_POLICY
        )

    def rate_prompt(
        self, user: Users, prompt_id: int, rating
    ) -> tuple[PromptRatings, bool]:
        return self.aggregation.record_rating(
            prompt_id, user.id, rating, on_duplicate=self.duplicate_policy
        )

    def react(
        self, user: Users, experience_id: int, reaction_type
    ) -> tuple[Reactions, bool]:
        reaction, created = self.aggregation.record_reaction(
            experience_id, user.id, reaction_type, on_duplicate=self.duplicate_policy
        )

        if created:
            logger.info(
                f"User {user.id} reacted '{reaction.reaction_type}' "
                f"to experience {experience_id}"
            )

        return reaction, created

    def reaction_counts(self, experience_id: int) -> dict[str, int]:
        return self.aggregation.reaction_counts(experience_id)

    def comment(self, user: Users, experience_id: int, content) -> Comments:
        comment = self.aggregation.record_comment(experience_id, user.id, content)

        logger.info(f"User {user.id} commented on experience {experience_id}")

        return comment

    def delete_comment(self, user: Users, experience_id: int, comment_id: int) -> None:
        # The experience must still be live
        self.aggregation.get_active_experience(experience_id)

        comment = self.comments_crud.get_active_comment(comment_id, experience_id)
        if not comment:
            raise NotFoundException("Comment not found")

        if comment.user_id != user.id:
            logger.warning(
                f"User {user.id} attempted to delete comment {comment_id} "
                f"owned by user {comment.user_id}"
            )
            raise AuthorizationException("You can only delete your own comments")

        self.aggregation.remove_comment(comment)
