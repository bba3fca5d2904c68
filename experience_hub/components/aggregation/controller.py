from sqlalchemy import case, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from experience_hub.components.experiences.crud import ExperiencesCRUD, PromptsCRUD
from experience_hub.components.experiences.models import Experiences, Prompts
from experience_hub.components.interactions.crud import (
    CommentsCRUD,
    PromptRatingsCRUD,
    ReactionsCRUD,
)
from experience_hub.components.interactions.models import (
    Comments,
    PromptRatings,
    Reactions,
)
from experience_hub.components.users.crud import UsersCRUD
from experience_hub.components.users.models import Users
from experience_hub.core.enums import DuplicatePolicy, ReactionType
from experience_hub.core.exceptions import (
    ConflictException,
    NotFoundException,
    ValidationException,
)
from experience_hub.core.log import logger

MIN_RATING = 1
MAX_RATING = 5
MAX_COMMENT_LENGTH = 1000


def received_rating_average(total_rating: float, rating_count: int) -> float:
    """Average of ratings received; zero ratings average to 0"""
    return (total_rating or 0.0) / max(rating_count or 0, 1)


def validate_rating(rating) -> int:
    # bool is an int subclass, and 4.0 is not an integer rating
    if isinstance(rating, bool) or not isinstance(rating, int):
        raise ValidationException("Rating must be a whole number")

    if rating < MIN_RATING or rating > MAX_RATING:
        raise ValidationException(
            f"Rating must be between {MIN_RATING} and {MAX_RATING}"
        )

    return rating


def validate_reaction_type(reaction_type) -> str:
    value = reaction_type.value if isinstance(reaction_type, ReactionType) else reaction_type

    if not isinstance(value, str) or value.strip().lower() not in ReactionType.values():
        raise ValidationException(
            "Invalid reaction type",
            meta_data={"allowed": ReactionType.values()},
        )

    return value.strip().lower()


def validate_comment_content(content) -> str:
    if not isinstance(content, str):
        raise ValidationException("Comment content must be text")

    content = content.strip()

    if len(content) < 1:
        raise ValidationException("Comment must not be empty")

    if len(content) > MAX_COMMENT_LENGTH:
        raise ValidationException(
            f"Comment must not exceed {MAX_COMMENT_LENGTH} characters"
        )

    return content


class AggregationController:
    """
    Sole writer of the derived rating and count fields.

    Every recomputation re-reads the live child rows instead of applying a
    delta, so a recompute always reflects all rows committed before it.
    Methods flush but never commit; the caller owns the transaction.
    """

    def __init__(self, db: Session):
        self.db = db
        self.users_crud = UsersCRUD(db)
        self.experiences_crud = ExperiencesCRUD(db)
        self.prompts_crud = PromptsCRUD(db)
        self.comments_crud = CommentsCRUD(db)
        self.reactions_crud = ReactionsCRUD(db)
        self.ratings_crud = PromptRatingsCRUD(db)

    # Ratings

    def record_rating(
        self,
        prompt_id: int,
        user_id: int,
        rating,
        on_duplicate: DuplicatePolicy = DuplicatePolicy.UPSERT,
    ) -> tuple[PromptRatings, bool]:
        """
        Insert or replace the (user, prompt) rating and refresh every rollup
        that depends on it.

        Returns the rating row and whether it was newly created.
        """
        rating = validate_rating(rating)

        # Row lock serialises concurrent raters of the same prompt
        prompt = self.prompts_crud.get_active_prompt(prompt_id, for_update=True)
        if not prompt:
            raise NotFoundException("Prompt not found")

        existing = self.ratings_crud.get_by_user_and_prompt(user_id, prompt_id)
        created = existing is None

        if existing:
            prompt_rating = self._update_rating(existing, rating, on_duplicate)
        else:
            try:
                with self.db.begin_nested():
                    prompt_rating = PromptRatings(
                        prompt_id=prompt_id, user_id=user_id, rating=rating
                    )
                    self.db.add(prompt_rating)
            except IntegrityError:
                # Lost an insert race with the same user; fall back to update
                created = False
                existing = self.ratings_crud.get_by_user_and_prompt(user_id, prompt_id)
                prompt_rating = self._update_rating(existing, rating, on_duplicate)

        self.db.flush()

        self.recompute_prompt_rating(prompt)
        experience = self.recompute_experience_rollup(prompt.experience_id)
        self.recompute_user_received_rating(experience.user_id)

        self.db.refresh(prompt_rating)

        logger.info(
            f"Rating {'created' if created else 'updated'} for prompt {prompt_id} "
            f"by user {user_id}: {rating}"
        )

        return prompt_rating, created

    def _update_rating(
        self, existing: PromptRatings, rating: int, on_duplicate: DuplicatePolicy
    ) -> PromptRatings:
        if on_duplicate == DuplicatePolicy.REJECT:
            raise ConflictException("You have already rated this prompt")

        existing.rating = rating
        self.db.add(existing)
        return existing

    def recompute_prompt_rating(self, prompt: Prompts) -> Prompts:
        average, count = self.ratings_crud.stats_for_prompt(prompt.id)

        prompt.average_rating = average
        prompt.rating_count = count
        self.db.add(prompt)
        self.db.flush()

        return prompt

    # Reactions

    def record_reaction(
        self,
        experience_id: int,
        user_id: int,
        reaction_type,
        on_duplicate: DuplicatePolicy = DuplicatePolicy.UPSERT,
    ) -> tuple[Reactions, bool]:
        """
        Upsert the (user, experience, type) reaction and refresh reaction_count.

        Submitting the same key twice leaves a single stored row.
        """
        reaction_type = validate_reaction_type(reaction_type)

        experience = self.get_active_experience(experience_id, for_update=True)

        reaction = self.reactions_crud.get_by_key(user_id, experience_id, reaction_type)
        created = reaction is None

        if reaction:
            if on_duplicate == DuplicatePolicy.REJECT:
                raise ConflictException("You have already added this reaction")
        else:
            try:
                with self.db.begin_nested():
                    reaction = Reactions(
                        experience_id=experience_id,
                        user_id=user_id,
                        reaction_type=reaction_type,
                    )
                    self.db.add(reaction)
            except IntegrityError:
                if on_duplicate == DuplicatePolicy.REJECT:
                    raise ConflictException("You have already added this reaction")

                created = False
                reaction = self.reactions_crud.get_by_key(
                    user_id, experience_id, reaction_type
                )

        self.db.flush()
        self.recompute_reaction_count(experience)
        self.db.refresh(reaction)

        return reaction, created

    def recompute_reaction_count(self, experience: Experiences) -> Experiences:
        experience.reaction_count = self.reactions_crud.count_for_experience(
            experience.id
        )
        self.db.add(experience)
        self.db.flush()

        return experience

    def reaction_counts(self, experience_id: int) -> dict[str, int]:
        return self.reactions_crud.counts_by_type(experience_id)

    # Comments

    def record_comment(self, experience_id: int, user_id: int, content) -> Comments:
        """Append a comment and refresh comment_count"""
        content = validate_comment_content(content)

        experience = self.get_active_experience(experience_id, for_update=True)

        comment = self.comments_crud.create(
            {"experience_id": experience_id, "user_id": user_id, "content": content}
        )

        self.recompute_comment_count(experience)

        return comment

    def remove_comment(self, comment: Comments) -> Comments:
        """Soft delete a comment and refresh comment_count"""
        self.comments_crud.soft_delete(comment)

        experience = self.experiences_crud.get_by_id(comment.experience_id)
        self.recompute_comment_count(experience)

        return comment

    def recompute_comment_count(self, experience: Experiences) -> Experiences:
        experience.comment_count = self.comments_crud.count_active_for_experience(
            experience.id
        )
        self.db.add(experience)
        self.db.flush()

        return experience

    # Experience and user rollups

    def recompute_experience_rollup(self, experience_id: int) -> Experiences:
        """
        Refresh average_rating, prompt_count, comment_count and reaction_count.

        average_rating is the mean of the live prompts' averages, counting
        only prompts that have received at least one rating.
        """
        experience = self.experiences_crud.get_by_id(experience_id)
        if not experience:
            raise NotFoundException("Experience not found")

        prompt_count, average = (
            self.db.query(
                func.count(Prompts.id),
                func.avg(
                    case((Prompts.rating_count > 0, Prompts.average_rating))
                ),
            )
            .filter(
                Prompts.experience_id == experience_id,
                Prompts.deleted_at.is_(None),
            )
            .one()
        )

        experience.prompt_count = int(prompt_count or 0)
        experience.average_rating = float(average or 0.0)
        experience.comment_count = self.comments_crud.count_active_for_experience(
            experience_id
        )
        experience.reaction_count = self.reactions_crud.count_for_experience(
            experience_id
        )

        self.db.add(experience)
        self.db.flush()

        return experience

    def recompute_user_received_rating(self, user_id: int) -> float:
        """
        Refresh a user's received-rating totals from ratings on their live
        prompts and return totalRating / max(ratingCount, 1).
        """
        user = self.users_crud.get_by_id(user_id)
        if not user:
            raise NotFoundException("User not found")

        total, count = (
            self.db.query(
                func.coalesce(func.sum(PromptRatings.rating), 0),
                func.count(PromptRatings.id),
            )
            .join(Prompts, PromptRatings.prompt_id == Prompts.id)
            .join(Experiences, Prompts.experience_id == Experiences.id)
            .filter(
                Experiences.user_id == user_id,
                Experiences.deleted_at.is_(None),
                Prompts.deleted_at.is_(None),
            )
            .one()
        )

        user.total_rating = float(total or 0.0)
        user.rating_count = int(count or 0)
        self.db.add(user)
        self.db.flush()

        return received_rating_average(user.total_rating, user.rating_count)

    def recompute_user_experience_count(self, user_id: int) -> Users:
        user = self.users_crud.get_by_id(user_id)
        if not user:
            raise NotFoundException("User not found")

        user.experience_count = (
            self.db.query(func.count(Experiences.id))
            .filter(
                Experiences.user_id == user_id,
                Experiences.deleted_at.is_(None),
            )
            .scalar()
        )
        self.db.add(user)
        self.db.flush()

        return user

    def rebuild_all(self) -> dict[str, int]:
        """Recompute every derived field from the live rows"""
        prompts = self.db.query(Prompts).all()
        for prompt in prompts:
            self.recompute_prompt_rating(prompt)

        experience_ids = [row.id for row in self.db.query(Experiences.id).all()]
        for experience_id in experience_ids:
            self.recompute_experience_rollup(experience_id)

        user_ids = [row.id for row in self.db.query(Users.id).all()]
        for user_id in user_ids:
            self.recompute_user_received_rating(user_id)
            self.recompute_user_experience_count(user_id)

        return {
            "prompts": len(prompts),
            "experiences": len(experience_ids),
            "users": len(user_ids),
        }

    def get_active_experience(
        self, experience_id: int, for_update: bool = False
    ) -> Experiences:
        query = self.db.query(Experiences).filter(
            Experiences.id == experience_id,
            Experiences.deleted_at.is_(None),
        )

        if for_update:
            query = query.with_for_update()

        experience = query.first()
        if not experience:
            raise NotFoundException("Experience not found")

        return experience
