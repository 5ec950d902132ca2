"""
Session models: one chat session and the list envelope returned by the store.
"""

from datetime import datetime, timezone
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

TITLE_LIMIT = 20


def derive_title(text: str, limit: int = TITLE_LIMIT) -> str:
    """Short label for a session, cut from its first message or its stored title."""
    if len(text) > limit:
        return f"{text[:limit].strip()}..."
    return text


class SessionRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True, validate_assignment=True)

    id: str = Field(frozen=True)
    title: str = ""
    created_at: datetime = Field(frozen=True, alias="createdAt")
    focus_mode: str = Field(default="", frozen=True, alias="focusMode")
    archived: bool = False
    shared: bool = False
    owner_token: Optional[str] = Field(
        default=None,
        frozen=True,
        validation_alias=AliasChoices("token", "ownerToken", "owner_token"),
        repr=False,
    )

    @field_validator("created_at")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        # The store may send naive timestamps; those are UTC.
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @property
    def display_title(self) -> str:
        return derive_title(self.title) if self.title else "Untitled"


class SessionListResponse(BaseModel):
    chats: list[SessionRecord]


class ShareResponse(BaseModel):
    share_url: Optional[str] = Field(default=None, validation_alias=AliasChoices("shareUrl", "share_url", "url"))
