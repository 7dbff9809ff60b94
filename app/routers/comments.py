from typing import Any, List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.logging import get_logger
from app.crud.comment import create_comment, get_issue_comments
from app.crud.issue import get_issue
from app.db.session import get_db
from app.schemas import Comment, CommentCreate, CommentMessage

logger = get_logger("app.comments")

router = APIRouter()


@router.get("/issues/{issue_id}/comments", response_model=List[Comment])
async def read_issue_comments(
    issue_id: int,
    db: AsyncSession = Depends(get_db),
) -> Any:
    """
    Retrieve the comments of an issue, oldest first.
    Reading does not move any "last viewed" watermark.
    """
    issue = await get_issue(db, id=issue_id)
    if not issue:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Issue not found",
        )
    return await get_issue_comments(db, issue_id=issue_id)


@router.post("/issues/{issue_id}/comments", response_model=CommentMessage, status_code=status.HTTP_201_CREATED)
async def create_issue_comment(
    issue_id: int,
    comment_in: CommentCreate,
    db: AsyncSession = Depends(get_db),
) -> Any:
    """
    Add a comment to an issue as an admin or as the reporter.
    """
    issue = await get_issue(db, id=issue_id)
    if not issue:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Issue not found",
        )

    comment = await create_comment(db, obj_in=comment_in, issue_id=issue_id)
    logger.info(
        f"Comment added: issue_id={issue_id}, comment_id={comment.id}, "
        f"author_type={comment.author_type.value}"
    )
    return {"message": "Comment added successfully", "comment": comment}
