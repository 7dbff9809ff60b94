"""
Unread-comment tracking for issues.

Each issue carries one "last viewed" watermark per viewer role. A comment is
unread for a role when it was written by the other role after that role's
watermark (or when the watermark was never set). Counts are derived on every
read and never stored.
"""
from datetime import datetime
from typing import Iterable, NamedTuple, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.db.base_class import utcnow
from app.models import AuthorType, Comment, Issue


class CommentSummary(NamedTuple):
    unread_admin_comments: int
    unread_reporter_comments: int
    total_comments: int


def _counterpart(viewer: AuthorType) -> AuthorType:
    return AuthorType.REPORTER if viewer == AuthorType.ADMIN else AuthorType.ADMIN


def is_unread(comment: Comment, viewer: AuthorType, watermark: Optional[datetime]) -> bool:
    """A comment is unread for ``viewer`` if the other party wrote it after the watermark."""
    if comment.author_type != _counterpart(viewer):
        return False
    return watermark is None or comment.created_at > watermark


def unread_count(
    comments: Iterable[Comment], viewer: AuthorType, watermark: Optional[datetime]
) -> int:
    return sum(1 for comment in comments if is_unread(comment, viewer, watermark))


def summarize_comments(
    comments: Iterable[Comment],
    last_admin_view: Optional[datetime],
    last_reporter_view: Optional[datetime],
) -> CommentSummary:
    comments = list(comments)
    return CommentSummary(
        unread_admin_comments=unread_count(comments, AuthorType.ADMIN, last_admin_view),
        unread_reporter_comments=unread_count(comments, AuthorType.REPORTER, last_reporter_view),
        total_comments=len(comments),
    )


def summarize_issue(issue: Issue) -> CommentSummary:
    """Badge counters for an issue whose comments are already loaded."""
    return summarize_comments(issue.comments, issue.last_admin_view, issue.last_reporter_view)


def watermark_field(viewer: AuthorType) -> str:
    return "last_admin_view" if viewer == AuthorType.ADMIN else "last_reporter_view"


async def mark_viewed(db: AsyncSession, issue: Issue, viewer: AuthorType) -> Issue:
    """
    Move the viewer's watermark to the server's current time.
    Client-supplied timestamps are never accepted, so the watermark cannot move back.
    """
    setattr(issue, watermark_field(viewer), utcnow())
    db.add(issue)
    await db.commit()
    await db.refresh(issue)
    return issue
