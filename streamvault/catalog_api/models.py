"""Database models for user feedback."""
from __future__ import annotations

from datetime import datetime

from sqlmodel import Field, SQLModel


class ContentRequestRecord(SQLModel, table=True):
    """A deduplicated request for a title to be added to the catalog."""

    __tablename__ = "content_requests"

    id: str = Field(primary_key=True, index=True)
    dedup_key: str = Field(index=True, unique=True)
    content_type: str = Field(index=True)
    title: str
    year: str | None = Field(default=None)
    genre: str | None = Field(default=None)
    description: str | None = Field(default=None)
    reason: str | None = Field(default=None)
    email: str | None = Field(default=None)
    request_count: int = Field(default=1, index=True)
    created_at: datetime = Field(default_factory=datetime.utcnow, nullable=False)
    updated_at: datetime = Field(default_factory=datetime.utcnow, nullable=False)


class IssueReportRecord(SQLModel, table=True):
    """A user-submitted report about a playback or metadata problem."""

    __tablename__ = "issue_reports"

    id: str = Field(primary_key=True, index=True)
    issue_type: str = Field(index=True)
    title: str
    description: str
    url: str | None = Field(default=None)
    email: str | None = Field(default=None)
    status: str = Field(default="open", index=True)
    created_at: datetime = Field(default_factory=datetime.utcnow, index=True)
