"""User feedback endpoints: issue reports and content requests."""
import logging

from fastapi import APIRouter, BackgroundTasks, Depends

from ..dependencies import get_email_service, get_feedback_store
from ..schemas import (
    ContentRequestCreate,
    ContentRequestModel,
    ContentRequestReceipt,
    IssueReportCreate,
    IssueReportReceipt,
)
from ..services.email_service import EmailService
from ..stores.feedback_store import FeedbackStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["feedback"])


@router.post("/report-issue", response_model=IssueReportReceipt)
def report_issue(
    payload: IssueReportCreate,
    background: BackgroundTasks,
    store: FeedbackStore = Depends(get_feedback_store),
    email: EmailService = Depends(get_email_service),
) -> IssueReportReceipt:
    """Store an issue report and notify the administrator."""

    report = store.create_issue_report(payload)
    logger.info("Issue report %s received: %s", report.id, report.issue_type)
    background.add_task(email.notify_issue_report, report)
    return IssueReportReceipt(report_id=report.id)


@router.post("/request-content", response_model=ContentRequestReceipt)
def request_content(
    payload: ContentRequestCreate,
    background: BackgroundTasks,
    store: FeedbackStore = Depends(get_feedback_store),
    email: EmailService = Depends(get_email_service),
) -> ContentRequestReceipt:
    """Store a content request; repeats of the same title bump its counter."""

    request = store.submit_content_request(payload)
    logger.info("Content request %r now has %d requests", request.title, request.request_count)
    background.add_task(email.notify_content_request, request)
    return ContentRequestReceipt(request_count=request.request_count)


@router.get("/top-requests", response_model=list[ContentRequestModel])
def top_requests(store: FeedbackStore = Depends(get_feedback_store)) -> list[ContentRequestModel]:
    return store.top_content_requests(limit=5)
