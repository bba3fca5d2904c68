from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from experience_hub.api.experiences.request_response import (
    RatingCreate,
    RatingResponse,
)
from experience_hub.components.auth.dependencies import get_current_user
from experience_hub.components.users.models import Users
from experience_hub.database.session import get_db
from experience_hub.flows.experience_flow import ExperienceFlow
from experience_hub.flows.interaction_flow import InteractionFlow

router = APIRouter()


@router.post(
    "/{prompt_id}/ratings",
    response_model=RatingResponse,
    status_code=status.HTTP_201_CREATED,
)
async def rate_prompt(
    prompt_id: int,
    rating_data: RatingCreate,
    response: Response,
    user: Users = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Rate a prompt 1-5; a repeated rating replaces the previous one"""
    prompt_rating, created = InteractionFlow(db).rate_prompt(
        user, prompt_id, rating_data.rating
    )
    db.commit()

    if not created:
        response.status_code = status.HTTP_200_OK

    return RatingResponse(
        id=prompt_rating.id,
        prompt_id=prompt_rating.prompt_id,
        user_id=prompt_rating.user_id,
        rating=prompt_rating.rating,
        created_at=prompt_rating.created_at,
        modified_at=prompt_rating.modified_at,
        prompt_average_rating=prompt_rating.prompt.average_rating,
        prompt_rating_count=prompt_rating.prompt.rating_count,
    )


@router.delete("/{prompt_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_prompt(
    prompt_id: int,
    user: Users = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    ExperienceFlow(db).delete_prompt(user, prompt_id)
    db.commit()

    return Response(status_code=status.HTTP_204_NO_CONTENT)
