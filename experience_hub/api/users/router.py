from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from experience_hub.api.users.request_response import (
    OwnProfileResponse,
    ProfileResponse,
    UserUpdateResponse,
)
from experience_hub.components.auth.dependencies import get_current_user
from experience_hub.components.users.models import Users
from experience_hub.components.users.schemas import UserUpdate
from experience_hub.database.session import get_db
from experience_hub.flows.profile_flow import ProfileFlow

router = APIRouter()


@router.get("/me", response_model=OwnProfileResponse)
async def get_me(
    user: Users = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Current user's profile with private fields and recent experiences"""
    return ProfileFlow(db).get_me(user)


@router.put("/me", response_model=UserUpdateResponse)
async def update_me(
    user_data: UserUpdate,
    user: Users = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    user = ProfileFlow(db).update_me(user, user_data)
    db.commit()

    return {"message": "Profile updated successfully", "user": user}


@router.get("/{user_id}", response_model=ProfileResponse)
async def get_user(
    user_id: int,
    user: Users = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Public profile and statistics of a user"""
    return ProfileFlow(db).get_profile(user_id)


@router.delete("/me", status_code=status.HTTP_204_NO_CONTENT)
async def delete_me(
    user: Users = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    ProfileFlow(db).delete_me(user)
    db.commit()

    return Response(status_code=status.HTTP_204_NO_CONTENT)
