from typing import Optional
from sqlalchemy import Float, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from experience_hub.core.models import BaseSoftDeleteModel


class Users(BaseSoftDeleteModel):
    __tablename__ = "users"

    github_id: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    github_username: Mapped[str] = mapped_column(String, nullable=False)
    username: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    email: Mapped[Optional[str]] = mapped_column(String, nullable=True, unique=True)
    avatar_url: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    bio: Mapped[Optional[str]] = mapped_column(String, nullable=True)

    # Rollups owned by AggregationController
    experience_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_rating: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    rating_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    __table_args__ = (
        Index("idx_users_github_id", "github_id"),
        Index("idx_users_username", "username"),
    )

    # Relationships
    experiences = relationship(
        "Experiences",
        foreign_keys="Experiences.user_id",
        back_populates="user",
    )

    comments = relationship(
        "Comments",
        foreign_keys="Comments.user_id",
        back_populates="user",
    )

    reactions = relationship(
        "Reactions",
        foreign_keys="Reactions.user_id",
        back_populates="user",
    )

    prompt_ratings = relationship(
        "PromptRatings",
        foreign_keys="PromptRatings.user_id",
        back_populates="user",
    )
