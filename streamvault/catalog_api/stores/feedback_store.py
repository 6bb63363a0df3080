"""Database-backed store for content requests and issue reports."""
from __future__ import annotations

from datetime import datetime
from threading import Lock
from typing import Iterable
from uuid import uuid4

from sqlmodel import Session, select

from ..models import ContentRequestRecord, IssueReportRecord
from ..schemas import (
    ContentRequestCreate,
    ContentRequestModel,
    IssueReportCreate,
    IssueReportModel,
)


class FeedbackStore:
    """Append-only feedback records with request-count deduplication."""

    def __init__(self, engine) -> None:
        self._engine = engine
        self._lock = Lock()

    def submit_content_request(self, payload: ContentRequestCreate) -> ContentRequestModel:
        """Store a request, or bump the counter of an earlier one with the same title and type."""

        key = content_request_key(payload.title, payload.content_type)
        now = datetime.utcnow()
        with self._lock, Session(self._engine) as session:
            record = session.exec(
                select(ContentRequestRecord).where(ContentRequestRecord.dedup_key == key)
            ).first()
            if record is None:
                record = ContentRequestRecord(
                    id=uuid4().hex,
                    dedup_key=key,
                    **payload.model_dump(),
                )
            else:
                record.request_count += 1
                record.updated_at = now
            session.add(record)
            session.commit()
            session.refresh(record)
            return _request_to_model(record)

    def top_content_requests(self, limit: int = 5) -> list[ContentRequestModel]:
        """Return the most requested titles, most requested first."""

        statement = (
            select(ContentRequestRecord)
            .order_by(ContentRequestRecord.request_count.desc(), ContentRequestRecord.updated_at.desc())
            .limit(limit)
        )
        with Session(self._engine) as session:
            records: Iterable[ContentRequestRecord] = session.exec(statement)
            return [_request_to_model(record) for record in records]

    def list_content_requests(self, *, limit: int = 100) -> list[ContentRequestModel]:
        statement = (
            select(ContentRequestRecord)
            .order_by(ContentRequestRecord.created_at.desc())
            .limit(limit)
        )
        with Session(self._engine) as session:
            return [_request_to_model(record) for record in session.exec(statement)]

    def create_issue_report(self, payload: IssueReportCreate) -> IssueReportModel:
        record = IssueReportRecord(id=uuid4().hex, **payload.model_dump())
        with Session(self._engine) as session:
            session.add(record)
            session.commit()
            session.refresh(record)
            return _report_to_model(record)

    def list_issue_reports(
        self, *, limit: int = 100, status: str | None = None
    ) -> list[IssueReportModel]:
        statement = select(IssueReportRecord)
        if status:
            statement = statement.where(IssueReportRecord.status == status)
        statement = statement.order_by(IssueReportRecord.created_at.desc()).limit(limit)
        with Session(self._engine) as session:
            return [_report_to_model(record) for record in session.exec(statement)]


def content_request_key(title: str, content_type: str) -> str:
    """Normalized identity of a content request."""

    return f"{content_type.strip().lower()}::{' '.join(title.lower().split())}"


def _request_to_model(record: ContentRequestRecord) -> ContentRequestModel:
    return ContentRequestModel(
        id=record.id,
        content_type=record.content_type,
        title=record.title,
        year=record.year,
        genre=record.genre,
        description=record.description,
        reason=record.reason,
        email=record.email,
        request_count=record.request_count,
        created_at=record.created_at,
        updated_at=record.updated_at,
    )


def _report_to_model(record: IssueReportRecord) -> IssueReportModel:
    return IssueReportModel(
        id=record.id,
        issue_type=record.issue_type,
        title=record.title,
        description=record.description,
        url=record.url,
        email=record.email,
        status=record.status,
        created_at=record.created_at,
    )
