from datetime import UTC, datetime
from typing import Any, Literal, Optional, get_args

import sqlalchemy
from pydantic import BaseModel, Field
from sqlalchemy import DateTime, Float, ForeignKey, Integer, String, Text, func
from sqlalchemy.inspection import inspect
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

# Types
Voice = Literal["alloy", "echo", "fable", "onyx", "nova", "shimmer"]

VOICES: tuple[str, ...] = get_args(Voice)


# Tables
class Base(DeclarativeBase):
    def to_dict(self) -> dict[str, Any]:
        return {c.key: getattr(self, c.key) for c in inspect(self).mapper.column_attrs}

    def update(self, data_dict, exclude=None):
        exclude = set(exclude) if exclude else set()
        valid_keys = {c.key for c in inspect(self).mapper.column_attrs}

        for key, value in data_dict.items():
            if key in valid_keys and key not in exclude:
                setattr(self, key, value)

    type_annotation_map = {
        Voice: sqlalchemy.Enum(*VOICES, name="voice"),
    }


class User(Base):
    __tablename__ = "user"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    clerk_id: Mapped[str] = mapped_column(String, unique=True, index=True)
    email: Mapped[str] = mapped_column(String, index=True)
    name: Mapped[str] = mapped_column(String)
    image_url: Mapped[str] = mapped_column(String)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(UTC), server_default=func.now()
    )

    # Deleting a user keeps the podcasts; their author fields stay as written.
    podcasts: Mapped[list["Podcast"]] = relationship(
        "Podcast", back_populates="user", passive_deletes=True
    )


class Podcast(Base):
    __tablename__ = "podcast"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)

    title: Mapped[str] = mapped_column(String)
    description: Mapped[str] = mapped_column(Text)

    audio_storage_id: Mapped[str] = mapped_column(String)
    audio_url: Mapped[str] = mapped_column(String)
    image_storage_id: Mapped[str] = mapped_column(String)
    image_url: Mapped[str] = mapped_column(String)

    voice_prompt: Mapped[str] = mapped_column(Text)
    image_prompt: Mapped[str] = mapped_column(Text, default="")
    voice_type: Mapped[Voice] = mapped_column(index=True)

    views: Mapped[int] = mapped_column(Integer, default=0)
    audio_duration: Mapped[float] = mapped_column(Float, default=0.0)

    author: Mapped[str] = mapped_column(String)
    author_id: Mapped[str] = mapped_column(String, index=True)
    author_image_url: Mapped[str] = mapped_column(String)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(UTC), server_default=func.now()
    )

    user_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("user.id", ondelete="SET NULL"),
        index=True,
        nullable=True,
    )

    user: Mapped[Optional["User"]] = relationship("User", back_populates="podcasts")


# Auth
class AuthContext(BaseModel):
    subject: str
    email: str | None = None


# User
class UserCreate(BaseModel):
    clerk_id: str
    email: str
    name: str
    image_url: str


class UserUpdate(BaseModel):
    image_url: str
    email: str


class UserResult(BaseModel):
    id: int
    clerk_id: str
    email: str
    name: str
    image_url: str
    created_at: datetime


# Podcast
class PodcastCreate(BaseModel):
    title: str = Field(min_length=1)
    description: str = Field(min_length=1)

    audio_storage_id: str = Field(min_length=1)
    audio_url: str = Field(min_length=1)
    image_storage_id: str = Field(min_length=1)
    image_url: str = Field(min_length=1)

    voice_prompt: str
    image_prompt: str = ""
    voice_type: Voice

    views: int = Field(default=0, ge=0)
    audio_duration: float = Field(default=0.0, ge=0)


class PodcastGenerate(BaseModel):
    title: str = Field(min_length=1)
    description: str = Field(min_length=1)
    voice_prompt: str = Field(min_length=1)
    voice_type: Voice
    image_prompt: str = Field(min_length=1)


class PodcastResult(PodcastCreate):
    id: int

    author: str
    author_id: str
    author_image_url: str

    created_at: datetime


class PodcastCreateResult(BaseModel):
    id: int


class ViewsResult(BaseModel):
    id: int
    views: int


class AuthorPodcastsResult(BaseModel):
    podcasts: list[PodcastResult]
    listeners: int


class TopAuthorPodcast(BaseModel):
    title: str
    id: int


class TopAuthorResult(UserResult):
    total_podcasts: int
    podcasts: list[TopAuthorPodcast]


# Generation
class AudioGenerate(BaseModel):
    voice_prompt: str = Field(min_length=1)
    voice_type: Voice


class ThumbnailGenerate(BaseModel):
    image_prompt: str = Field(min_length=1)


class AssetResult(BaseModel):
    storage_id: str
    url: str


class AudioResult(AssetResult):
    audio_duration: float


class AssetURLResult(BaseModel):
    url: str
