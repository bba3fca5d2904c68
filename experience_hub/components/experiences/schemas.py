from typing import Any, List, Optional
from pydantic import (
    AliasChoices,
    BaseModel,
    Field,
    ValidationError,
    field_validator,
)

from experience_hub.core.enums import AIAssistantType, FeedSort
from experience_hub.core.exceptions import ValidationException
from experience_hub.core.utils import normalize_github_url, normalize_tags

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 20
MAX_LIMIT = 100
MAX_SEARCH_LENGTH = 100


class FeedQuery(BaseModel):
    page: int = Field(DEFAULT_PAGE, ge=1)
    limit: int = Field(DEFAULT_LIMIT, ge=1, le=MAX_LIMIT)
    ai_assistant: Optional[AIAssistantType] = None
    tags: List[str] = []
    search: Optional[str] = Field(None, max_length=MAX_SEARCH_LENGTH)
    sort: FeedSort = FeedSort.RATING

    @field_validator("tags", mode="before")
    @classmethod
    def validate_tags(cls, value):
        return normalize_tags(value)

    @field_validator("search")
    @classmethod
    def validate_search(cls, value):
        if value is None:
            return None
        return value.strip() or None

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    @classmethod
    def parse(cls, **params: Any) -> "FeedQuery":
        """Build a feed query, raising ValidationException on bad input"""
        params = {key: value for key, value in params.items() if value is not None}

        try:
            return cls(**params)
        except ValidationError as e:
            raise ValidationException(
                "Invalid query parameters",
                meta_data={
                    "errors": [
                        f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
                        for err in e.errors()
                    ]
                },
            )


class FeedPage(BaseModel):
    experiences: List[Any]
    total: int
    page: int
    limit: int
    pages: int


MIN_TITLE_LENGTH = 5
MAX_TITLE_LENGTH = 200
MIN_DESCRIPTION_LENGTH = 20
MAX_DESCRIPTION_LENGTH = 2000
MIN_PROMPT_LENGTH = 10
MAX_PROMPT_LENGTH = 5000
MAX_PROMPT_NOTE_LENGTH = 500
MAX_GITHUB_URLS = 10


def _strip_text(value):
    return value.strip() if isinstance(value, str) else value


def _blank_to_none(value):
    if isinstance(value, str):
        value = value.strip()
        return value or None
    return value


def _validate_github_urls(urls: List[str]) -> List[str]:
    result: List[str] = []
    for url in urls:
        if isinstance(url, str) and not url.strip():
            continue
        normalized = normalize_github_url(url)
        if normalized not in result:
            result.append(normalized)

    if not result:
        raise ValueError("At least one GitHub URL is required")

    if len(result) > MAX_GITHUB_URLS:
        raise ValueError(f"At most {MAX_GITHUB_URLS} GitHub URLs are allowed")

    return result


class PromptCreate(BaseModel):
    content: str = Field(
        ..., min_length=MIN_PROMPT_LENGTH, max_length=MAX_PROMPT_LENGTH
    )
    context: Optional[str] = Field(None, max_length=MAX_PROMPT_NOTE_LENGTH)
    results_achieved: Optional[str] = Field(
        None,
        max_length=MAX_PROMPT_NOTE_LENGTH,
        validation_alias=AliasChoices("results_achieved", "resultsAchieved"),
    )

    @field_validator("content", mode="before")
    @classmethod
    def strip_content(cls, value):
        return _strip_text(value)

    @field_validator("context", "results_achieved", mode="before")
    @classmethod
    def strip_notes(cls, value):
        return _blank_to_none(value)


class ExperienceCreate(BaseModel):
    title: str = Field(..., min_length=MIN_TITLE_LENGTH, max_length=MAX_TITLE_LENGTH)
    description: str = Field(
        ..., min_length=MIN_DESCRIPTION_LENGTH, max_length=MAX_DESCRIPTION_LENGTH
    )
    ai_assistant_type: AIAssistantType = Field(
        ...,
        validation_alias=AliasChoices(
            "ai_assistant_type", "aiAssistantType", "ai_assistant", "aiAssistant"
        ),
    )
    tags: List[str] = []
    github_urls: List[str] = Field(
        ...,
        validation_alias=AliasChoices(
            "github_urls", "githubUrls", "github_url", "githubUrl"
        ),
    )
    is_news: bool = Field(False, validation_alias=AliasChoices("is_news", "isNews"))
    prompts: List[PromptCreate] = []

    @field_validator("title", "description", mode="before")
    @classmethod
    def strip_text(cls, value):
        return _strip_text(value)

    @field_validator("tags", mode="before")
    @classmethod
    def validate_tags(cls, value):
        return normalize_tags(value)

    @field_validator("github_urls", mode="before")
    @classmethod
    def validate_github_urls(cls, value):
        # A single legacy githubUrl string is accepted as a one-item list
        if isinstance(value, str):
            value = [value]
        if not isinstance(value, list):
            raise ValueError("GitHub URLs must be a list")
        return _validate_github_urls(value)


class ExperienceUpdate(BaseModel):
    """Partial update; only fields present in the payload are applied"""

    title: Optional[str] = Field(
        None, min_length=MIN_TITLE_LENGTH, max_length=MAX_TITLE_LENGTH
    )
    description: Optional[str] = Field(
        None, min_length=MIN_DESCRIPTION_LENGTH, max_length=MAX_DESCRIPTION_LENGTH
    )
    ai_assistant_type: Optional[AIAssistantType] = Field(
        None,
        validation_alias=AliasChoices(
            "ai_assistant_type", "aiAssistantType", "ai_assistant", "aiAssistant"
        ),
    )
    tags: Optional[List[str]] = None
    github_urls: Optional[List[str]] = Field(
        None,
        validation_alias=AliasChoices(
            "github_urls", "githubUrls", "github_url", "githubUrl"
        ),
    )
    is_news: Optional[bool] = Field(
        None, validation_alias=AliasChoices("is_news", "isNews")
    )

    @field_validator("title", "description", mode="before")
    @classmethod
    def strip_text(cls, value):
        return _strip_text(value)

    @field_validator("tags", mode="before")
    @classmethod
    def validate_tags(cls, value):
        if value is None:
            return None
        return normalize_tags(value)

    @field_validator("github_urls", mode="before")
    @classmethod
    def validate_github_urls(cls, value):
        if value is None:
            return None
        if isinstance(value, str):
            value = [value]
        if not isinstance(value, list):
            raise ValueError("GitHub URLs must be a list")
        return _validate_github_urls(value)
