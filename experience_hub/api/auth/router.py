from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from experience_hub.api.auth.request_response import (
    GitHubSignInRequest,
    TokenResponse,
)
from experience_hub.core.config import ACCESS_TOKEN_EXPIRE_MINUTES
from experience_hub.database.session import get_db
from experience_hub.flows.identity_flow import IdentityFlow

router = APIRouter()


@router.post("/github", response_model=TokenResponse)
async def sign_in_with_github(
    sign_in_data: GitHubSignInRequest, db: Session = Depends(get_db)
):
    """Exchange a GitHub access token for an application access token"""
    result = IdentityFlow(db).sign_in(sign_in_data.access_token)
    db.commit()

    return TokenResponse(
        access_token=result["access_token"],
        token_type=result["token_type"],
        expires_in=ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        user=result["user"],
    )
