from typing import Optional
from sqlalchemy import (
    JSON,
    Boolean,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from experience_hub.core.models import BaseSoftDeleteModel
from experience_hub.core.utils import parse_tags
from experience_hub.components.users.models import Users
from experience_hub.components.interactions.models import (
    Comments,
    PromptRatings,
    Reactions,
)


class Experiences(BaseSoftDeleteModel):
    __tablename__ = "experiences"

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    ai_assistant_type: Mapped[str] = mapped_column(String, nullable=False)
    # Comma-delimited, normalised tag list
    tags: Mapped[str] = mapped_column(String, nullable=False, default="")
    github_urls: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    is_news: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False
    )

    # Rollups owned by AggregationController
    average_rating: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    reaction_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    comment_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    prompt_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    __table_args__ = (
        Index("idx_experiences_user_id", "user_id"),
        Index("idx_experiences_ai_assistant_type", "ai_assistant_type"),
        Index("idx_experiences_rating_created", "average_rating", "created_at"),
    )

    # Relationships
    user: Mapped[Users] = relationship(
        "Users", foreign_keys=[user_id], back_populates="experiences"
    )

    prompts: Mapped[list["Prompts"]] = relationship(
        "Prompts",
        foreign_keys="Prompts.experience_id",
        back_populates="experience",
        order_by="Prompts.order_index",
    )

    comments: Mapped[list[Comments]] = relationship(
        "Comments",
        foreign_keys="Comments.experience_id",
        back_populates="experience",
        order_by="Comments.created_at.desc()",
    )

    reactions: Mapped[list[Reactions]] = relationship(
        "Reactions",
        foreign_keys="Reactions.experience_id",
        back_populates="experience",
    )

    @property
    def tag_list(self) -> list[str]:
        return parse_tags(self.tags)

    @property
    def reaction_counts(self) -> dict[str, int]:
        counts: dict[str, int] = {}
        for reaction in sorted(self.reactions, key=lambda r: r.reaction_type):
            counts[reaction.reaction_type] = counts.get(reaction.reaction_type, 0) + 1
        return counts


class Prompts(BaseSoftDeleteModel):
    __tablename__ = "prompts"

    content: Mapped[str] = mapped_column(Text, nullable=False)
    context: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    results_achieved: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    order_index: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    experience_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("experiences.id"), nullable=False
    )

    # Rollups owned by AggregationController
    average_rating: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    rating_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    __table_args__ = (
        Index("idx_prompts_experience_id", "experience_id"),
        Index("idx_prompts_order_index", "experience_id", "order_index"),
    )

    # Relationships
    experience = relationship(
        "Experiences", foreign_keys=[experience_id], back_populates="prompts"
    )

    ratings: Mapped[list[PromptRatings]] = relationship(
        "PromptRatings",
        foreign_keys="PromptRatings.prompt_id",
        back_populates="prompt",
    )
