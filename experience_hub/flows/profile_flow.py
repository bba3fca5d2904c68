from typing import Any, Dict

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from experience_hub.components.profile_stats.controller import ProfileStatsController
from experience_hub.components.soft_delete.controller import SoftDeleteController
from experience_hub.components.users.crud import UsersCRUD
from experience_hub.components.users.models import Users
from experience_hub.components.users.schemas import UserUpdate
from experience_hub.core.exceptions import ValidationException
from experience_hub.core.log import logger


class ProfileFlow:
    def __init__(self, db: Session):
        self.db = db
        self.users_crud = UsersCRUD(db)
        self.profile_stats = ProfileStatsController(db)
        self.soft_delete = SoftDeleteController(db)

    def get_profile(self, user_id: int) -> Dict[str, Any]:
        return self.profile_stats.get_profile_stats(user_id)

    def get_me(self, user: Users) -> Dict[str, Any]:
        return self.profile_stats.get_own_profile(user.id)

    def update_me(self, user: Users, payload: UserUpdate) -> Users:
        changes = payload.model_dump(exclude_unset=True, exclude_none=True)

        if "username" in changes and self.users_crud.username_taken(
            changes["username"], exclude_user_id=user.id
        ):
            raise ValidationException("Username already taken")

        if "email" in changes and self.users_crud.email_taken(
            changes["email"], exclude_user_id=user.id
        ):
            raise ValidationException("Email already in use")

        if not changes:
            return user

        try:
            with self.db.begin_nested():
                user = self.users_crud.update(user, changes)
        except IntegrityError:
            # Another account claimed the value between the check and the write
            if "email" in changes and self.users_crud.email_taken(
                changes["email"], exclude_user_id=user.id
            ):
                raise ValidationException("Email already in use")
            raise ValidationException("Username already taken")

        logger.info(f"User {user.id} updated profile: {sorted(changes.keys())}")

        return user

    def delete_me(self, user: Users) -> None:
        """Close the caller's account; their experiences and comments go with it"""
        self.soft_delete.delete_user(user)
