from typing import Any, Dict

from sqlalchemy.orm import Session

from experience_hub.components.users.crud import UsersCRUD
from experience_hub.components.users.models import Users
from experience_hub.core.exceptions import AuthenticationException, ConflictException
from experience_hub.core.log import logger
from experience_hub.core.security import create_user_token
from experience_hub.service.github import GitHubIdentityClient, GitHubProfile

MAX_USERNAME_ATTEMPTS = 100


class IdentityFlow:
    """Exchanges a verified GitHub identity for an application access token"""

    def __init__(self, db: Session, github_client: GitHubIdentityClient | None = None):
        self.db = db
        self.users_crud = UsersCRUD(db)
        self.github_client = github_client or GitHubIdentityClient()

    def sign_in(self, provider_access_token: str) -> Dict[str, Any]:
        profile = self.github_client.get_profile(provider_access_token)

        user = self.users_crud.get_by_github_id(str(profile.id))

        if user and user.is_deleted:
            logger.warning(f"Sign-in refused for deleted user {user.id}")
            raise AuthenticationException("User account has been deleted")

        if user:
            user = self._sync_profile(user, profile)
        else:
            user = self._provision_user(profile)

        return {
            "access_token": create_user_token(user.id, user.username),
            "token_type": "bearer",
            "user": user,
        }

    def _provision_user(self, profile: GitHubProfile) -> Users:
        email = profile.email
        if email and self.users_crud.email_taken(email):
            email = None

        user = self.users_crud.create_user(
            github_id=str(profile.id),
            github_username=profile.login,
            username=self._available_username(profile.login),
            email=email,
            avatar_url=profile.avatar_url,
            bio=profile.bio,
        )

        logger.info(f"Provisioned user {user.id} for GitHub account {profile.login}")

        return user

    def _sync_profile(self, user: Users, profile: GitHubProfile) -> Users:
        changes = {}

        if profile.login != user.github_username:
            changes["github_username"] = profile.login

        if profile.avatar_url and profile.avatar_url != user.avatar_url:
            changes["avatar_url"] = profile.avatar_url

        if changes:
            user = self.users_crud.update(user, changes)

        return user

    def _available_username(self, login: str) -> str:
        if not self.users_crud.username_taken(login):
            return login

        for suffix in range(1, MAX_USERNAME_ATTEMPTS + 1):
            candidate = f"{login}{suffix}"
            if not self.users_crud.username_taken(candidate):
                return candidate

        raise ConflictException("Could not allocate a username")
