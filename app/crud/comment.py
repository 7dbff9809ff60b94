from typing import List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models import Comment
from app.schemas import CommentCreate


async def get_issue_comments(db: AsyncSession, issue_id: int) -> List[Comment]:
    """
    Get all comments of an issue, oldest first.
    """
    result = await db.execute(
        select(Comment)
        .filter(Comment.issue_id == issue_id)
        .order_by(Comment.created_at.asc(), Comment.id.asc())
    )
    return list(result.scalars().all())


async def create_comment(db: AsyncSession, obj_in: CommentCreate, issue_id: int) -> Comment:
    """
    Create a new comment on an issue.
    """
    db_obj = Comment(
        content=obj_in.content,
        author_name=obj_in.author_name,
        author_type=obj_in.author_type,
        issue_id=issue_id,
    )
    db.add(db_obj)
    await db.commit()
    await db.refresh(db_obj)
    return db_obj
