from enum import Enum


class AIAssistantType(str, Enum):
    """AI coding assistants an experience can be tagged with"""

    GITHUB_COPILOT = "github-copilot"
    CLAUDE = "claude"
    GPT = "gpt"
    CURSOR = "cursor"
    OTHER = "other"


class ReactionType(str, Enum):
    """Typed endorsements a user can attach to an experience"""

    HELPFUL = "helpful"
    CREATIVE = "creative"
    EDUCATIONAL = "educational"
    INNOVATIVE = "innovative"
    PROBLEMATIC = "problematic"
    LIKE = "like"
    BOOKMARK = "bookmark"

    @classmethod
    def values(cls) -> list[str]:
        return [item.value for item in cls]


class FeedSort(str, Enum):
    RATING = "rating"
    RECENT = "recent"
    POPULAR = "popular"


class DuplicatePolicy(str, Enum):
    """How a repeated rating/reaction from the same user is treated"""

    UPSERT = "upsert"
    REJECT = "reject"
