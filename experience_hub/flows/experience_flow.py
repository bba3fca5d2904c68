from sqlalchemy.orm import Session

from experience_hub.components.aggregation.controller import AggregationController
from experience_hub.components.experiences.crud import ExperiencesCRUD, PromptsCRUD
from experience_hub.components.experiences.models import Experiences, Prompts
from experience_hub.components.experiences.query_builder import FeedQueryBuilder
from experience_hub.components.experiences.schemas import (
    ExperienceCreate,
    ExperienceUpdate,
    FeedPage,
    FeedQuery,
    PromptCreate,
)
from experience_hub.components.soft_delete.controller import SoftDeleteController
from experience_hub.components.users.models import Users
from experience_hub.core.exceptions import AuthorizationException, NotFoundException
from experience_hub.core.log import logger
from experience_hub.core.utils import serialize_tags


class ExperienceFlow:
    """
    Authoring of experiences and their prompts.

    Ownership is checked before anything is written. Deletes cascade through
    SoftDeleteController rather than database rules, and every structural
    change ends with the owning rollups being recomputed.
    """

    def __init__(self, db: Session):
        self.db = db
        self.aggregation = AggregationController(db)
        self.experiences_crud = ExperiencesCRUD(db)
        self.prompts_crud = PromptsCRUD(db)
        self.soft_delete = SoftDeleteController(db)

    def list_feed(self, feed_query: FeedQuery) -> FeedPage:
        return FeedQueryBuilder(self.db).paginate(feed_query)

    def get_detail(self, experience_id: int) -> Experiences:
        experience = self.experiences_crud.get_with_full_details(experience_id)
        if not experience:
            raise NotFoundException("Experience not found")
        return experience

    def create(self, user: Users, payload: ExperienceCreate) -> Experiences:
        experience = self.experiences_crud.create_experience(
            user_id=user.id,
            title=payload.title,
            description=payload.description,
            ai_assistant_type=payload.ai_assistant_type.value,
            tags=serialize_tags(payload.tags),
            github_urls=payload.github_urls,
            is_news=payload.is_news,
        )

        for order_index, prompt in enumerate(payload.prompts):
            self.prompts_crud.create_prompt(
                experience_id=experience.id,
                content=prompt.content,
                context=prompt.context,
                results_achieved=prompt.results_achieved,
                order_index=order_index,
            )

        self.aggregation.recompute_experience_rollup(experience.id)
        self.aggregation.recompute_user_experience_count(user.id)

        logger.info(
            f"User {user.id} created experience {experience.id} "
            f"with {len(payload.prompts)} prompts"
        )

        return self.get_detail(experience.id)

    def update(
        self, user: Users, experience_id: int, payload: ExperienceUpdate
    ) -> Experiences:
        experience = self._get_owned_experience(user, experience_id)

        changes = payload.model_dump(exclude_unset=True, exclude_none=True)

        if "tags" in changes:
            changes["tags"] = serialize_tags(changes["tags"])

        if "ai_assistant_type" in changes:
            changes["ai_assistant_type"] = payload.ai_assistant_type.value

        if changes:
            self.experiences_crud.update(experience, changes)
            logger.info(
                f"User {user.id} updated experience {experience_id}: "
                f"{sorted(changes.keys())}"
            )

        return self.get_detail(experience_id)

    def delete(self, user: Users, experience_id: int) -> None:
        experience = self._get_owned_experience(user, experience_id)

        removed = self.soft_delete.delete_experience(experience)

        logger.info(
            f"User {user.id} deleted experience {experience_id} "
            f"({removed['prompts']} prompts, {removed['comments']} comments, "
            f"{removed['reactions']} reactions)"
        )

    def add_prompt(
        self, user: Users, experience_id: int, payload: PromptCreate
    ) -> Prompts:
        self._get_owned_experience(user, experience_id)

        prompt = self.prompts_crud.create_prompt(
            experience_id=experience_id,
            content=payload.content,
            context=payload.context,
            results_achieved=payload.results_achieved,
        )

        self.aggregation.recompute_experience_rollup(experience_id)

        return prompt

    def delete_prompt(self, user: Users, prompt_id: int) -> None:
        prompt = self.prompts_crud.get_active_prompt(prompt_id)
        if not prompt:
            raise NotFoundException("Prompt not found")

        experience = self._get_owned_experience(user, prompt.experience_id)

        self.prompts_crud.soft_delete(prompt)

        self.aggregation.recompute_experience_rollup(experience.id)
        self.aggregation.recompute_user_received_rating(experience.user_id)

        logger.info(f"User {user.id} deleted prompt {prompt_id}")

    def _get_owned_experience(self, user: Users, experience_id: int) -> Experiences:
        experience = self.experiences_crud.get_active_by_id(experience_id)
        if not experience:
            raise NotFoundException("Experience not found")

        if experience.user_id != user.id:
            logger.warning(
                f"User {user.id} attempted to modify experience {experience_id} "
                f"owned by user {experience.user_id}"
            )
            raise AuthorizationException("You can only modify your own experiences")

        return experience
