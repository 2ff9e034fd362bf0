"""
Discussions API Router

Community forum: threads, posts, and abuse reports. Hidden content (set by
moderators) never shows up here.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime
from typing import List, Literal
from uuid import UUID
import logging

from core.auth import get_current_user
from core.database import get_db
from core.exceptions import NotFoundError
from models import DiscussionPost, DiscussionThread, Report, User

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/discussions", tags=["Discussions"])

THREAD_LIST_LIMIT = 50


class ThreadCreate(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    body: str | None = Field(default=None, max_length=5000)


class PostCreate(BaseModel):
    body: str = Field(min_length=1, max_length=5000)


class ReportCreate(BaseModel):
    target_type: Literal["thread", "post"]
    target_id: UUID
    reason: str = Field(min_length=1, max_length=500)


class ThreadResponse(BaseModel):
    id: UUID
    title: str
    created_by: UUID
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PostResponse(BaseModel):
    id: UUID
    thread_id: UUID
    created_by: UUID
    body: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ThreadDetailResponse(ThreadResponse):
    posts: List[PostResponse] = []


class ReportResponse(BaseModel):
    id: UUID
    target_type: str
    target_id: UUID
    reason: str
    status: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


def _visible_thread(db: Session, thread_id: UUID) -> DiscussionThread:
    thread = db.get(DiscussionThread, thread_id)
    if thread is None or thread.is_hidden:
        raise NotFoundError("Thread", str(thread_id))
    return thread


@router.get("/threads", response_model=List[ThreadResponse])
def list_threads(current_user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return (
        db.query(DiscussionThread)
        .filter(DiscussionThread.is_hidden.is_(False))
        .order_by(DiscussionThread.created_at.desc())
        .limit(THREAD_LIST_LIMIT)
        .all()
    )


@router.post("/threads", response_model=ThreadResponse, status_code=status.HTTP_201_CREATED)
def create_thread(
    request: ThreadCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Optional `body` becomes the thread's first post."""
    thread = DiscussionThread(title=request.title.strip(), created_by=current_user.id)
    db.add(thread)
    db.flush()
    if request.body and request.body.strip():
        db.add(DiscussionPost(thread_id=thread.id, created_by=current_user.id, body=request.body.strip()))
    db.commit()
    return thread


@router.get("/threads/{thread_id}", response_model=ThreadDetailResponse)
def get_thread(
    thread_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    thread = _visible_thread(db, thread_id)
    posts = (
        db.query(DiscussionPost)
        .filter(DiscussionPost.thread_id == thread.id, DiscussionPost.is_hidden.is_(False))
        .order_by(DiscussionPost.created_at.asc())
        .all()
    )
    response = ThreadDetailResponse.model_validate(thread)
    response.posts = [PostResponse.model_validate(p) for p in posts]
    return response


@router.post("/threads/{thread_id}/posts", response_model=PostResponse, status_code=status.HTTP_201_CREATED)
def create_post(
    thread_id: UUID,
    request: PostCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    thread = _visible_thread(db, thread_id)
    post = DiscussionPost(thread_id=thread.id, created_by=current_user.id, body=request.body.strip())
    db.add(post)
    db.commit()
    return post


@router.post("/reports", response_model=ReportResponse, status_code=status.HTTP_201_CREATED)
def create_report(
    request: ReportCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    model = DiscussionThread if request.target_type == "thread" else DiscussionPost
    if db.get(model, request.target_id) is None:
        raise NotFoundError(request.target_type.capitalize(), str(request.target_id))

    report = Report(
        reporter_id=current_user.id,
        target_type=request.target_type,
        target_id=request.target_id,
        reason=request.reason.strip(),
        status="pending",
    )
    db.add(report)
    db.commit()
    logger.info(
        "Content reported",
        extra={"extra_fields": {"report_id": str(report.id), "target_type": report.target_type}},
    )
    return report
