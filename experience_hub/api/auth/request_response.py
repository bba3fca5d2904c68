from pydantic import AliasChoices, BaseModel, Field

from experience_hub.api.users.request_response import UserPrivateResponse


class GitHubSignInRequest(BaseModel):
    """GitHub OAuth access token obtained by the client"""

    access_token: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("access_token", "accessToken"),
    )


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int  # seconds until access token expires
    user: UserPrivateResponse
