from datetime import datetime
from typing import Dict, List, Optional
from pydantic import AliasChoices, BaseModel, Field, StrictInt, field_validator

from experience_hub.core.utils import parse_tags, round_rating


class AuthorResponse(BaseModel):
    id: int
    username: str
    github_username: str
    avatar_url: Optional[str] = None

    class Config:
        from_attributes = True


class PromptResponse(BaseModel):
    id: int
    content: str
    context: Optional[str] = None
    results_achieved: Optional[str] = None
    order_index: int
    average_rating: float
    rating_count: int
    created_at: datetime

    class Config:
        from_attributes = True

    @field_validator("average_rating", mode="before")
    @classmethod
    def round_average(cls, value):
        return round_rating(value)


class CommentResponse(BaseModel):
    id: int
    content: str
    created_at: datetime
    user: AuthorResponse

    class Config:
        from_attributes = True


class ExperienceResponse(BaseModel):
    id: int
    title: str
    description: str
    ai_assistant_type: str
    tags: List[str]
    github_urls: List[str]
    is_news: bool
    average_rating: float
    reaction_count: int
    comment_count: int
    prompt_count: int
    created_at: datetime
    modified_at: datetime
    user: AuthorResponse

    class Config:
        from_attributes = True

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


class ExperienceDetailResponse(ExperienceResponse):
    prompts: List[PromptResponse] = []
    comments: List[CommentResponse] = []
    reaction_counts: Dict[str, int] = {}

    @field_validator("prompts", "comments", mode="before")
    @classmethod
    def live_only(cls, value):
        return [item for item in value or [] if getattr(item, "deleted_at", None) is None]


class FeedResponse(BaseModel):
    experiences: List[ExperienceResponse]
    total: int
    page: int
    limit: int
    pages: int


class CommentCreate(BaseModel):
    content: str


class ReactionCreate(BaseModel):
    reaction_type: str = Field(
        ...,
        validation_alias=AliasChoices("reaction_type", "reactionType", "type"),
    )


class ReactionResponse(BaseModel):
    id: int
    experience_id: int
    user_id: int
    reaction_type: str
    created_at: datetime
    reaction_count: int
    reaction_counts: Dict[str, int]


class RatingCreate(BaseModel):
    # Strict so 4.0, "4" and true are refused rather than coerced
    rating: StrictInt


class RatingResponse(BaseModel):
    id: int
    prompt_id: int
    user_id: int
    rating: int
    created_at: datetime
    modified_at: datetime
    prompt_average_rating: float
    prompt_rating_count: int

    @field_validator("prompt_average_rating", mode="before")
    @classmethod
    def round_average(cls, value):
        return round_rating(value)
