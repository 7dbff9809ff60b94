from typing import List, Optional

from pydantic import EmailStr, Field, field_validator

from app.models.comment import AuthorType
from app.models.issue import IssueCategory, IssueStatus
from app.schemas.base import APIModel, UTCDateTime
from app.schemas.comment import Comment


# Shared properties
class IssueBase(APIModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    category: IssueCategory
    location: str = Field(..., min_length=1, max_length=500)
    reporter_name: Optional[str] = Field(None, max_length=255)
    reporter_email: Optional[EmailStr] = None
    reporter_phone: Optional[str] = Field(None, max_length=50)


# Properties to receive on issue creation
class IssueCreate(IssueBase):
    @field_validator("title", "description", "location")
    @classmethod
    def not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v

    @field_validator("reporter_name", "reporter_email", "reporter_phone", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v


# Properties to receive on status update
class IssueStatusUpdate(APIModel):
    status: IssueStatus


# Properties to receive on mark-viewed
class IssueMarkViewed(APIModel):
    viewer_type: AuthorType


# Properties to return to client
class Issue(IssueBase):
    id: int
    status: IssueStatus
    photo_url: Optional[str] = None
    # Stored values are not re-validated as e-mail addresses on the way out
    reporter_email: Optional[str] = None
    last_admin_view: Optional[UTCDateTime] = None
    last_reporter_view: Optional[UTCDateTime] = None
    created_at: UTCDateTime
    updated_at: UTCDateTime


# Listing entry with the derived notification counters
class IssueWithUnread(Issue):
    unread_admin_comments: int = 0
    unread_reporter_comments: int = 0
    total_comments: int = 0


# Properties to return in a detailed issue
class IssueDetail(Issue):
    comments: List[Comment] = []


class IssueMessage(APIModel):
    message: str
    issue: Issue


class CategoryCount(APIModel):
    category: IssueCategory
    count: int


class IssueStatistics(APIModel):
    total: int
    pending: int
    in_progress: int
    resolved: int
    by_category: List[CategoryCount] = []
