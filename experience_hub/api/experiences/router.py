from typing import List, Optional
from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from experience_hub.api.experiences.request_response import (
    CommentCreate,
    CommentResponse,
    ExperienceDetailResponse,
    FeedResponse,
    PromptResponse,
    ReactionCreate,
    ReactionResponse,
)
from experience_hub.components.auth.dependencies import get_current_user
from experience_hub.components.experiences.schemas import (
    ExperienceCreate,
    ExperienceUpdate,
    FeedQuery,
    PromptCreate,
)
from experience_hub.components.users.models import Users
from experience_hub.database.session import get_db
from experience_hub.flows.experience_flow import ExperienceFlow
from experience_hub.flows.interaction_flow import InteractionFlow

router = APIRouter()


@router.get("/", response_model=FeedResponse)
async def list_experiences(
    page: int = Query(1),
    limit: int = Query(20),
    ai_assistant: Optional[str] = Query(None),
    ai_assistant_legacy: Optional[str] = Query(None, alias="aiAssistant"),
    tags: Optional[List[str]] = Query(None),
    search: Optional[str] = Query(None),
    sort: Optional[str] = Query(None),
    user: Users = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Feed of live experiences, filtered, ordered and paginated"""
    feed_query = FeedQuery.parse(
        page=page,
        limit=limit,
        ai_assistant=ai_assistant or ai_assistant_legacy,
        tags=tags,
        search=search,
        sort=sort,
    )

    return ExperienceFlow(db).list_feed(feed_query)


@router.post(
    "/", response_model=ExperienceDetailResponse, status_code=status.HTTP_201_CREATED
)
async def create_experience(
    experience_data: ExperienceCreate,
    user: Users = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    experience = ExperienceFlow(db).create(user, experience_data)
    db.commit()

    return experience


@router.get("/{experience_id}", response_model=ExperienceDetailResponse)
async def get_experience(
    experience_id: int,
    user: Users = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Get experience by ID with prompts, comments and reaction counts"""
    return ExperienceFlow(db).get_detail(experience_id)


@router.put("/{experience_id}", response_model=ExperienceDetailResponse)
async def update_experience(
    experience_id: int,
    experience_data: ExperienceUpdate,
    user: Users = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    experience = ExperienceFlow(db).update(user, experience_id, experience_data)
    db.commit()

    return experience


@router.delete("/{experience_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_experience(
    experience_id: int,
    user: Users = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    ExperienceFlow(db).delete(user, experience_id)
    db.commit()

    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/{experience_id}/prompts",
    response_model=PromptResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_prompt(
    experience_id: int,
    prompt_data: PromptCreate,
    user: Users = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    prompt = ExperienceFlow(db).add_prompt(user, experience_id, prompt_data)
    db.commit()

    return prompt


@router.post(
    "/{experience_id}/comments",
    response_model=CommentResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_comment(
    experience_id: int,
    comment_data: CommentCreate,
    user: Users = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    comment = InteractionFlow(db).comment(user, experience_id, comment_data.content)
    db.commit()

    return comment


@router.delete(
    "/{experience_id}/comments/{comment_id}",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def delete_comment(
    experience_id: int,
    comment_id: int,
    user: Users = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    InteractionFlow(db).delete_comment(user, experience_id, comment_id)
    db.commit()

    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/{experience_id}/reactions",
    response_model=ReactionResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_reaction(
    experience_id: int,
    reaction_data: ReactionCreate,
    response: Response,
    user: Users = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Add a reaction; repeating the same reaction type is idempotent"""
    interaction_flow = InteractionFlow(db)

    reaction, created = interaction_flow.react(
        user, experience_id, reaction_data.reaction_type
    )

    if not created:
        response.status_code = status.HTTP_200_OK

    counts = interaction_flow.reaction_counts(experience_id)
    db.commit()

    return ReactionResponse(
        id=reaction.id,
        experience_id=reaction.experience_id,
        user_id=reaction.user_id,
        reaction_type=reaction.reaction_type,
        created_at=reaction.created_at,
        reaction_count=sum(counts.values()),
        reaction_counts=counts,
    )
