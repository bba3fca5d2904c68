from sqlalchemy import (
    CheckConstraint,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from experience_hub.core.models import BaseModel, BaseSoftDeleteModel


class Comments(BaseSoftDeleteModel):
    __tablename__ = "comments"

    content: Mapped[str] = mapped_column(String(1000), nullable=False)
    experience_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("experiences.id"), nullable=False
    )
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False
    )

    __table_args__ = (
        Index("idx_comments_experience_id", "experience_id"),
        Index("idx_comments_user_id", "user_id"),
    )

    # Relationships
    experience = relationship(
        "Experiences", foreign_keys=[experience_id], back_populates="comments"
    )
    user = relationship("Users", foreign_keys=[user_id], back_populates="comments")


class Reactions(BaseModel):
    __tablename__ = "reactions"

    reaction_type: Mapped[str] = mapped_column(String, nullable=False)
    experience_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("experiences.id"), nullable=False
    )
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False
    )

    __table_args__ = (
        # One reaction of a kind per user per experience
        UniqueConstraint(
            "user_id",
            "experience_id",
            "reaction_type",
            name="uq_reactions_user_experience_type",
        ),
        Index("idx_reactions_experience_id", "experience_id"),
        Index("idx_reactions_user_id", "user_id"),
    )

    # Relationships
    experience = relationship(
        "Experiences", foreign_keys=[experience_id], back_populates="reactions"
    )
    user = relationship("Users", foreign_keys=[user_id], back_populates="reactions")


class PromptRatings(BaseModel):
    __tablename__ = "prompt_ratings"

    rating: Mapped[int] = mapped_column(Integer, nullable=False)
    prompt_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("prompts.id"), nullable=False
    )
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False
    )

    __table_args__ = (
        UniqueConstraint("user_id", "prompt_id", name="uq_prompt_ratings_user_prompt"),
        CheckConstraint("rating >= 1 AND rating <= 5", name="ck_prompt_ratings_range"),
        Index("idx_prompt_ratings_prompt_id", "prompt_id"),
    )

    # Relationships
    prompt = relationship("Prompts", foreign_keys=[prompt_id], back_populates="ratings")
    user = relationship(
        "Users", foreign_keys=[user_id], back_populates="prompt_ratings"
    )
