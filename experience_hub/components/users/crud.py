from typing import Optional
from sqlalchemy import func
from sqlalchemy.orm import Session

from experience_hub.components.users.models import Users
from experience_hub.core.base_crud import BaseCRUD


class UsersCRUD(BaseCRUD):
    """CRUD operations for Users"""

    def __init__(self, db: Session):
        super().__init__(Users, db)

    def get_by_github_id(self, github_id: str) -> Optional[Users]:
        """Get user by identity provider ID, including soft-deleted users"""
        return self.db.query(Users).filter(Users.github_id == github_id).first()

    def username_taken(self, username: str, exclude_user_id: int | None = None) -> bool:
        """
        Check whether a user other than exclude_user_id owns the username.

        Soft-deleted users keep their username, so they count as owners.
        """
        query = self.db.query(Users.id).filter(
            func.lower(Users.username) == username.lower()
        )

        if exclude_user_id is not None:
            query = query.filter(Users.id != exclude_user_id)

        return query.first() is not None

    def email_taken(self, email: str, exclude_user_id: int | None = None) -> bool:
        query = self.db.query(Users.id).filter(func.lower(Users.email) == email.lower())

        if exclude_user_id is not None:
            query = query.filter(Users.id != exclude_user_id)

        return query.first() is not None

    def create_user(
        self,
        github_id: str,
        github_username: str,
        username: str,
        email: str | None = None,
        avatar_url: str | None = None,
        bio: str | None = None,
    ) -> Users:
        """Create a user on first identity verification"""
        return self.create(
            {
                "github_id": github_id,
                "github_username": github_username,
                "username": username,
                "email": email,
                "avatar_url": avatar_url,
                "bio": bio,
            }
        )
