from typing import Any, List, Optional
import traceback

from fastapi import APIRouter, Depends, File, Form, HTTPException, Response, UploadFile, status
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_admin
from app.core.config import settings
from app.core.logging import get_logger
from app.crud.issue import (
    create_issue,
    delete_issue,
    get_all_issues,
    get_issue,
    get_issues,
    get_statistics,
    update_issue_status,
)
from app.db.session import get_db
from app.models import Admin, IssueCategory, IssueStatus
from app.schemas import (
    IssueCreate,
    IssueDetail,
    IssueMarkViewed,
    IssueMessage,
    IssueStatistics,
    IssueStatusUpdate,
    IssueWithUnread,
)
from app.services.export import CSV_FILENAME, render_issues_csv
from app.services.notifications import mark_viewed, summarize_issue
from app.services.storage import PhotoStorage, StorageError, get_storage

logger = get_logger("app.issues")

router = APIRouter()


def _issue_not_found() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail="Issue not found",
    )


def _format_validation_error(error: ValidationError) -> str:
    parts = []
    for item in error.errors():
        field = ".".join(str(loc) for loc in item["loc"])
        parts.append(f"{field}: {item['msg']}" if field else item["msg"])
    return "; ".join(parts)


async def _read_photo(photo: UploadFile) -> bytes:
    """
    Check the attachment is an image within the size limit and return its bytes.
    """
    if not (photo.content_type or "").startswith("image/"):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Only image files are allowed",
        )
    data = await photo.read(settings.MAX_UPLOAD_SIZE + 1)
    if len(data) > settings.MAX_UPLOAD_SIZE:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Photo exceeds the {settings.MAX_UPLOAD_SIZE // (1024 * 1024)}MB limit",
        )
    return data


def _parse_filter(name: str, value: Optional[str], enum_cls):
    """
    Blank filter values mean "no filter"; anything else must be a member of ``enum_cls``.
    """
    if value is None or not value.strip():
        return None
    try:
        return enum_cls(value.strip())
    except ValueError:
        raise HTTPException(
            status_code=400,
            detail=f"Invalid {name}. Must be one of: " + ", ".join(m.value for m in enum_cls),
        )


@router.get("/issues", response_model=List[IssueWithUnread])
async def read_issues(
    status: Optional[str] = None,
    category: Optional[str] = None,
    search: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
) -> Any:
    """
    Retrieve issues newest first, optionally filtered by status, category and a search term.
    Each issue carries its unread comment counters for both roles.
    """
    issues = await get_issues(
        db,
        status=_parse_filter("status", status, IssueStatus),
        category=_parse_filter("category", category, IssueCategory),
        search=search,
    )
    return [
        IssueWithUnread.model_validate(issue).model_copy(update=summarize_issue(issue)._asdict())
        for issue in issues
    ]


@router.get("/issues/stats", response_model=IssueStatistics)
async def read_statistics(db: AsyncSession = Depends(get_db)) -> Any:
    """
    Issue counts overall, per status and per category.
    """
    return await get_statistics(db)


@router.get("/issues/export/csv", response_class=Response)
async def export_issues_csv(
    current_admin: Admin = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
) -> Response:
    """
    Download every issue as CSV. Admin only.
    """
    issues = await get_all_issues(db)
    logger.info(f"CSV export: admin_id={current_admin.id}, rows={len(issues)}")
    return Response(
        content=render_issues_csv(issues),
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename={CSV_FILENAME}"},
    )


@router.get("/issues/{issue_id}", response_model=IssueDetail)
async def read_issue(
    issue_id: int,
    db: AsyncSession = Depends(get_db),
) -> Any:
    """
    Get an issue by ID with its comments, oldest first.
    """
    issue = await get_issue(db, id=issue_id, with_comments=True)
    if not issue:
        raise _issue_not_found()
    return issue


@router.post("/issues", response_model=IssueMessage, status_code=status.HTTP_201_CREATED)
async def create_new_issue(
    title: str = Form(""),
    description: str = Form(""),
    category: str = Form(""),
    location: str = Form(""),
    reporter_name: Optional[str] = Form(None, alias="reporterName"),
    reporter_email: Optional[str] = Form(None, alias="reporterEmail"),
    reporter_phone: Optional[str] = Form(None, alias="reporterPhone"),
    photo: Optional[UploadFile] = File(None),
    db: AsyncSession = Depends(get_db),
    storage: PhotoStorage = Depends(get_storage),
) -> Any:
    """
    Report a new issue. The photo, if any, is stored before the issue is saved.
    """
    if not all(value.strip() for value in (title, description, category, location)):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Title, description, category, and location are required",
        )

    valid_categories = [c.value for c in IssueCategory]
    if category not in valid_categories:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid category. Must be one of: " + ", ".join(valid_categories),
        )

    try:
        issue_in = IssueCreate(
            title=title,
            description=description,
            category=category,
            location=location,
            reporter_name=reporter_name,
            reporter_email=reporter_email,
            reporter_phone=reporter_phone,
        )
    except ValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=_format_validation_error(e),
        )

    photo_data = None
    if photo is not None and photo.filename:
        photo_data = await _read_photo(photo)

    photo_url = None
    if photo_data is not None:
        try:
            photo_url = await storage.upload(photo_data, photo.filename, photo.content_type)
        except StorageError as e:
            logger.error(f"Photo upload error: title={issue_in.title}, error={str(e)}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Failed to upload photo",
            )

    try:
        issue = await create_issue(db, obj_in=issue_in, photo_url=photo_url)
    except Exception as e:
        error_details = traceback.format_exc()
        logger.error(f"Create issue error: title={issue_in.title}, error={str(e)}\n{error_details}")
        if photo_url:
            try:
                await storage.remove(photo_url)
            except StorageError as cleanup_error:
                logger.error(f"Orphan photo left behind: url={photo_url}, error={cleanup_error}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create issue",
        )

    logger.info(f"Issue reported: issue_id={issue.id}, category={issue.category.value}")
    return {"message": "Issue reported successfully", "issue": issue}


@router.patch("/issues/{issue_id}/status", response_model=IssueMessage)
async def update_status(
    issue_id: int,
    status_in: IssueStatusUpdate,
    current_admin: Admin = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
) -> Any:
    """
    Change the status of an issue. Admin only.
    """
    issue = await get_issue(db, id=issue_id)
    if not issue:
        raise _issue_not_found()

    previous = issue.status
    issue = await update_issue_status(db, db_obj=issue, status=status_in.status)
    logger.info(
        f"Issue status updated: issue_id={issue.id}, {previous.value} -> {issue.status.value}, "
        f"admin_id={current_admin.id}"
    )
    return {"message": "Issue status updated successfully", "issue": issue}


@router.delete("/issues/{issue_id}")
async def delete_issue_by_id(
    issue_id: int,
    current_admin: Admin = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
) -> Any:
    """
    Delete an issue and its comments. Admin only.
    """
    issue = await delete_issue(db, id=issue_id)
    if not issue:
        raise _issue_not_found()
    logger.info(f"Issue deleted: issue_id={issue_id}, admin_id={current_admin.id}")
    return {"message": "Issue deleted successfully"}


@router.post("/issues/{issue_id}/mark-viewed", response_model=IssueMessage)
async def mark_issue_viewed(
    issue_id: int,
    viewed_in: IssueMarkViewed,
    db: AsyncSession = Depends(get_db),
) -> Any:
    """
    Record that the given role has seen the issue's comments up to now.
    """
    issue = await get_issue(db, id=issue_id)
    if not issue:
        raise _issue_not_found()
    issue = await mark_viewed(db, issue, viewed_in.viewer_type)
    return {"message": "Issue marked as viewed", "issue": issue}
