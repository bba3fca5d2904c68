from datetime import datetime
from typing import Dict, List, Optional
from pydantic import BaseModel, field_validator

from experience_hub.core.utils import parse_tags, round_rating

SUMMARY_DESCRIPTION_LENGTH = 200


class UserPublicResponse(BaseModel):
    id: int
    username: str
    github_username: str
    avatar_url: Optional[str] = None
    bio: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class UserPrivateResponse(UserPublicResponse):
    email: Optional[str] = None
    modified_at: datetime


class TopTagResponse(BaseModel):
    tag: str
    count: int


class ProfileStatsResponse(BaseModel):
    experience_count: int
    prompt_count: int
    total_reactions_received: int
    total_comments_received: int
    comments_given: int
    reactions_given: int
    ratings_given: int
    average_rating_received: float
    ai_assistant_distribution: Dict[str, int]
    top_tags: List[TopTagResponse]

    @field_validator("average_rating_received", mode="before")
    @classmethod
    def round_average(cls, value):
        return round_rating(value)


class OwnProfileStatsResponse(ProfileStatsResponse):
    average_rating_given: float
    average_prompt_rating_received: float

    @field_validator(
        "average_rating_given", "average_prompt_rating_received", mode="before"
    )
    @classmethod
    def round_given(cls, value):
        return round_rating(value)


class ExperienceSummaryResponse(BaseModel):
    id: int
    title: str
    description: str
    ai_assistant_type: str
    tags: List[str]
    github_urls: List[str]
    created_at: datetime
    average_rating: float
    reaction_count: int
    comment_count: int
    prompt_count: int

    class Config:
        from_attributes = True

    @field_validator("description", mode="before")
    @classmethod
    def truncate_description(cls, value):
        if isinstance(value, str) and len(value) > SUMMARY_DESCRIPTION_LENGTH:
            return value[:SUMMARY_DESCRIPTION_LENGTH] + "..."
        return value

    @field_validator("tags", mode="before")
    @classmethod
    def split_tags(cls, value):
        if isinstance(value, str):
            return parse_tags(value)
        return value

    @field_validator("average_rating", mode="before")
    @classmethod
    def round_average(cls, value):
        return round_rating(value)


class ProfileResponse(BaseModel):
    user: UserPublicResponse
    stats: ProfileStatsResponse
    experiences: List[ExperienceSummaryResponse]


class OwnProfileResponse(BaseModel):
    user: UserPrivateResponse
    stats: OwnProfileStatsResponse
    recent_experiences: List[ExperienceSummaryResponse]


class UserUpdateResponse(BaseModel):
    message: str
    user: UserPrivateResponse
