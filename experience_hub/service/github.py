import requests
from pydantic import BaseModel, ValidationError

from experience_hub.core.config import GITHUB_API_TIMEOUT, GITHUB_API_URL
from experience_hub.core.exceptions import (
    AuthenticationException,
    ExternalAPIException,
)
from experience_hub.core.log import logger


class GitHubProfile(BaseModel):
    """Subset of the GitHub /user payload used to provision accounts"""

    id: int
    login: str
    email: str | None = None
    avatar_url: str | None = None
    bio: str | None = None


class GitHubIdentityClient:
    """
    Resolves a GitHub OAuth access token to the GitHub account behind it.
    """

    def __init__(self, base_url: str | None = None, timeout: int | None = None):
        self.base_url = (base_url or GITHUB_API_URL).rstrip("/")
        self.timeout = timeout or GITHUB_API_TIMEOUT

    def get_profile(self, access_token: str) -> GitHubProfile:
        if not access_token:
            raise AuthenticationException("GitHub access token is required")

        url = f"{self.base_url}/user"
        headers = {
            "Accept": "application/vnd.github+json",
            "Authorization": f"Bearer {access_token}",
        }

        try:
            response = requests.get(url, headers=headers, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            logger.error(f"GitHub API request failed: {type(e).__name__}: {e}")
            raise ExternalAPIException("GitHub is unreachable")

        if response.status_code in (401, 403):
            logger.warning(f"GitHub rejected access token: {response.status_code}")
            raise AuthenticationException("GitHub access token is invalid")

        if response.status_code != 200:
            logger.error(
                f"GitHub API response: {response.status_code} {response.text[:200]}"
            )
            raise ExternalAPIException("GitHub returned an unexpected response")

        try:
            return GitHubProfile.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            logger.error(f"Unreadable GitHub profile payload: {e}")
            raise ExternalAPIException("GitHub returned an unreadable profile")
