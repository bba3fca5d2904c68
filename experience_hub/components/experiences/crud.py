from datetime import datetime
from typing import Optional, List
from sqlalchemy import desc, func
from sqlalchemy.orm import Session, selectinload

from experience_hub.components.experiences.models import Experiences, Prompts
from experience_hub.components.interactions.models import Comments
from experience_hub.core.base_crud import BaseCRUD


class ExperiencesCRUD(BaseCRUD):
    """CRUD operations for Experiences"""

    def __init__(self, db: Session):
        super().__init__(Experiences, db)

    def get_with_full_details(self, id: int) -> Optional[Experiences]:
        """Get an active experience with author, prompts, comments and reactions loaded"""
        return (
            self.db.query(Experiences)
            .options(
                selectinload(Experiences.user),
                selectinload(Experiences.prompts),
                selectinload(Experiences.comments).selectinload(Comments.user),
                selectinload(Experiences.reactions),
            )
            .filter(Experiences.id == id, Experiences.deleted_at.is_(None))
            .execution_options(populate_existing=True)
            .first()
        )

    def get_active_for_user(self, user_id: int) -> List[Experiences]:
        """Active experiences of a user, newest first"""
        return (
            self.db.query(Experiences)
            .options(selectinload(Experiences.user))
            .filter(
                Experiences.user_id == user_id,
                Experiences.deleted_at.is_(None),
            )
            .order_by(desc(Experiences.created_at), desc(Experiences.id))
            .all()
        )

    def get_deleted_for_user(self, user_id: int, deleted_at: datetime) -> List[Experiences]:
        """Experiences of a user soft deleted in the same cascade as deleted_at"""
        return (
            self.db.query(Experiences)
            .filter(
                Experiences.user_id == user_id,
                Experiences.deleted_at == deleted_at,
            )
            .all()
        )

    def create_experience(
        self,
        user_id: int,
        title: str,
        description: str,
        ai_assistant_type: str,
        tags: str,
        github_urls: List[str],
        is_news: bool = False,
    ) -> Experiences:
        return self.create(
            {
                "user_id": user_id,
                "title": title,
                "description": description,
                "ai_assistant_type": ai_assistant_type,
                "tags": tags,
                "github_urls": github_urls,
                "is_news": is_news,
            }
        )


class PromptsCRUD(BaseCRUD):
    """CRUD operations for Prompts"""

    def __init__(self, db: Session):
        super().__init__(Prompts, db)

    def get_active_prompt(self, id: int, for_update: bool = False) -> Optional[Prompts]:
        """Get a prompt whose own row and parent experience are both live"""
        query = (
            self.db.query(Prompts)
            .join(Experiences, Prompts.experience_id == Experiences.id)
            .filter(
                Prompts.id == id,
                Prompts.deleted_at.is_(None),
                Experiences.deleted_at.is_(None),
            )
        )

        if for_update:
            query = query.with_for_update(of=Prompts)

        return query.first()

    def get_active_for_experience(self, experience_id: int) -> List[Prompts]:
        return (
            self.db.query(Prompts)
            .filter(
                Prompts.experience_id == experience_id,
                Prompts.deleted_at.is_(None),
            )
            .order_by(Prompts.order_index, Prompts.id)
            .all()
        )

    def next_order_index(self, experience_id: int) -> int:
        current = (
            self.db.query(func.max(Prompts.order_index))
            .filter(Prompts.experience_id == experience_id)
            .scalar()
        )
        return 0 if current is None else current + 1

    def create_prompt(
        self,
        experience_id: int,
        content: str,
        context: str | None = None,
        results_achieved: str | None = None,
        order_index: int | None = None,
    ) -> Prompts:
        if order_index is None:
            order_index = self.next_order_index(experience_id)

        return self.create(
            {
                "experience_id": experience_id,
                "content": content,
                "context": context,
                "results_achieved": results_achieved,
                "order_index": order_index,
            }
        )

    def soft_delete_for_experience(self, experience_id: int, deleted_at: datetime) -> int:
        """Soft delete all live prompts of an experience"""
        return (
            self.db.query(Prompts)
            .filter(
                Prompts.experience_id == experience_id,
                Prompts.deleted_at.is_(None),
            )
            .update({Prompts.deleted_at: deleted_at}, synchronize_session="fetch")
        )

    def restore_for_experience(self, experience_id: int, deleted_at: datetime) -> int:
        """Restore the prompts removed in the same cascade as their experience"""
        return (
            self.db.query(Prompts)
            .filter(
                Prompts.experience_id == experience_id,
                Prompts.deleted_at == deleted_at,
            )
            .update({Prompts.deleted_at: None}, synchronize_session="fetch")
        )
