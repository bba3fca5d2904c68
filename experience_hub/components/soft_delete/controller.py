from datetime import datetime, timezone

from sqlalchemy import or_
from sqlalchemy.orm import Session

from experience_hub.components.aggregation.controller import AggregationController
from experience_hub.components.experiences.crud import ExperiencesCRUD, PromptsCRUD
from experience_hub.components.experiences.models import Experiences, Prompts
from experience_hub.components.interactions.crud import CommentsCRUD, ReactionsCRUD
from experience_hub.components.interactions.models import (
    Comments,
    PromptRatings,
    Reactions,
)
from experience_hub.components.users.crud import UsersCRUD
from experience_hub.components.users.models import Users
from experience_hub.core.exceptions import NotFoundException, ValidationException
from experience_hub.core.log import logger


class SoftDeleteController:
    """
    Cascading soft delete, restore and purge for users and experiences.

    A cascade stamps every child with its parent's deleted_at, so a restore
    brings back exactly the rows that cascade removed and leaves rows that
    were deleted on their own. Reactions have no delete marker and are
    removed outright. Users are never hard deleted.
    """

    def __init__(self, db: Session):
        self.db = db
        self.aggregation = AggregationController(db)
        self.users_crud = UsersCRUD(db)
        self.experiences_crud = ExperiencesCRUD(db)
        self.prompts_crud = PromptsCRUD(db)
        self.comments_crud = CommentsCRUD(db)
        self.reactions_crud = ReactionsCRUD(db)

    def delete_experience(
        self, experience: Experiences, deleted_at: datetime | None = None
    ) -> dict[str, int]:
        deleted_at = deleted_at or datetime.now(timezone.utc)

        removed = {
            "prompts": self.prompts_crud.soft_delete_for_experience(
                experience.id, deleted_at
            ),
            "comments": self.comments_crud.soft_delete_for_experience(
                experience.id, deleted_at
            ),
            "reactions": self.reactions_crud.delete_for_experience(experience.id),
        }
        self.experiences_crud.soft_delete(experience, deleted_at)

        self.aggregation.recompute_experience_rollup(experience.id)
        self.aggregation.recompute_user_received_rating(experience.user_id)
        self.aggregation.recompute_user_experience_count(experience.user_id)

        return removed

    def delete_user(self, user: Users) -> dict[str, int]:
        """
        Soft delete a user with their experiences and every comment they
        left. Ratings and reactions they gave stay attributed to them.
        """
        if user.is_deleted:
            raise ValidationException("User is already deleted")

        deleted_at = datetime.now(timezone.utc)

        experiences = self.experiences_crud.get_active_for_user(user.id)
        for experience in experiences:
            self.delete_experience(experience, deleted_at)

        commented_on = self.comments_crud.soft_delete_for_user(user.id, deleted_at)
        self._recompute_comment_counts(commented_on)

        self.users_crud.soft_delete(user, deleted_at)
        self.aggregation.recompute_user_received_rating(user.id)
        self.aggregation.recompute_user_experience_count(user.id)

        logger.info(
            f"Soft deleted user {user.id} with {len(experiences)} experiences "
            f"and comments on {len(commented_on)} experiences"
        )

        return {"experiences": len(experiences), "commented_on": len(commented_on)}

    def restore_user(self, user_id: int) -> Users:
        user = self.users_crud.get_by_id(user_id)
        if not user:
            raise NotFoundException("User not found")

        if not user.is_deleted:
            raise ValidationException("User is not deleted")

        deleted_at = user.deleted_at
        self.users_crud.update(user, {"deleted_at": None})

        experiences = self.experiences_crud.get_deleted_for_user(user.id, deleted_at)
        for experience in experiences:
            self.restore_experience(experience.id)

        commented_on = self.comments_crud.restore_for_user(user.id, deleted_at)
        self._recompute_comment_counts(commented_on)

        self.aggregation.recompute_user_received_rating(user.id)
        self.aggregation.recompute_user_experience_count(user.id)

        logger.info(f"Restored user {user.id} with {len(experiences)} experiences")

        return user

    def restore_experience(self, experience_id: int) -> Experiences:
        experience = self.experiences_crud.get_by_id(experience_id)
        if not experience:
            raise NotFoundException("Experience not found")

        if not experience.is_deleted:
            raise ValidationException("Experience is not deleted")

        owner = self.users_crud.get_by_id(experience.user_id)
        if owner.is_deleted:
            raise ValidationException("Cannot restore an experience of a deleted user")

        deleted_at = experience.deleted_at
        prompts = self.prompts_crud.restore_for_experience(experience_id, deleted_at)
        comments = self.comments_crud.restore_for_experience(experience_id, deleted_at)
        self.experiences_crud.update(experience, {"deleted_at": None})

        for prompt in self.prompts_crud.get_active_for_experience(experience_id):
            self.aggregation.recompute_prompt_rating(prompt)

        self.aggregation.recompute_experience_rollup(experience_id)
        self.aggregation.recompute_user_received_rating(experience.user_id)
        self.aggregation.recompute_user_experience_count(experience.user_id)

        logger.info(
            f"Restored experience {experience_id} "
            f"({prompts} prompts, {comments} comments)"
        )

        return experience

    def purge_deleted(self, older_than: datetime) -> dict[str, int]:
        """
        Hard delete experiences, prompts and comments soft deleted before
        older_than, along with the rows that hang off them.

        Only rows that no longer count toward any rollup are removed, so no
        derived field changes.
        """
        experience_ids = [
            row.id
            for row in self.db.query(Experiences.id)
            .filter(
                Experiences.deleted_at.is_not(None),
                Experiences.deleted_at < older_than,
            )
            .all()
        ]

        prompt_ids = [
            row.id
            for row in self.db.query(Prompts.id)
            .filter(
                or_(
                    Prompts.experience_id.in_(experience_ids),
                    Prompts.deleted_at < older_than,
                ),
            )
            .all()
        ]

        purged = {
            "ratings": self.db.query(PromptRatings)
            .filter(PromptRatings.prompt_id.in_(prompt_ids))
            .delete(synchronize_session=False),
            "comments": self.db.query(Comments)
            .filter(
                or_(
                    Comments.experience_id.in_(experience_ids),
                    Comments.deleted_at < older_than,
                )
            )
            .delete(synchronize_session=False),
            "reactions": self.db.query(Reactions)
            .filter(Reactions.experience_id.in_(experience_ids))
            .delete(synchronize_session=False),
            "prompts": self.db.query(Prompts)
            .filter(Prompts.id.in_(prompt_ids))
            .delete(synchronize_session=False),
            "experiences": self.db.query(Experiences)
            .filter(Experiences.id.in_(experience_ids))
            .delete(synchronize_session=False),
        }

        self.db.flush()
        self.db.expire_all()

        logger.info(f"Purged rows soft deleted before {older_than.isoformat()}: {purged}")

        return purged

    def _recompute_comment_counts(self, experience_ids: list[int]) -> None:
        for experience_id in experience_ids:
            experience = self.experiences_crud.get_by_id(experience_id)
            self.aggregation.recompute_comment_count(experience)
