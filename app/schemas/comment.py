from pydantic import Field, field_validator

from app.models.comment import AuthorType
from app.schemas.base import APIModel, UTCDateTime


# Shared properties
class CommentBase(APIModel):
    content: str = Field(..., min_length=1)
    author_name: str = Field(..., min_length=1, max_length=255)
    author_type: AuthorType

    @field_validator("content", "author_name")
    @classmethod
    def not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v


# Properties to receive on comment creation
class CommentCreate(CommentBase):
    pass


# Properties to return to client
class Comment(CommentBase):
    id: int
    issue_id: int
    created_at: UTCDateTime


class CommentMessage(APIModel):
    message: str
    comment: Comment
