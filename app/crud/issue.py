from typing import List, Optional

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.models import Issue, IssueCategory, IssueStatus
from app.schemas import CategoryCount, IssueCreate, IssueStatistics

# Upper bound of the INTEGER primary key column
MAX_ISSUE_ID = 2**31 - 1


async def get_issue(db: AsyncSession, id: int, with_comments: bool = False) -> Optional[Issue]:
    """
    Get an issue by ID, optionally with its comments loaded.
    Ids outside the key range cannot exist and resolve to None.
    """
    if not 1 <= id <= MAX_ISSUE_ID:
        return None
    query = select(Issue).filter(Issue.id == id)
    if with_comments:
        query = query.options(selectinload(Issue.comments))
    result = await db.execute(query)
    return result.scalars().first()


def build_issue_filters(
    status: Optional[IssueStatus] = None,
    category: Optional[IssueCategory] = None,
    search: Optional[str] = None,
) -> list:
    """
    Build the WHERE clauses for an issue listing; the clauses are ANDed.
    """
    filters = []
    if status:
        filters.append(Issue.status == status)
    if category:
        filters.append(Issue.category == category)
    if search and search.strip():
        term = search.strip()
        filters.append(
            or_(
                Issue.title.icontains(term, autoescape=True),
                Issue.description.icontains(term, autoescape=True),
                Issue.location.icontains(term, autoescape=True),
            )
        )
    return filters


async def get_issues(
    db: AsyncSession,
    status: Optional[IssueStatus] = None,
    category: Optional[IssueCategory] = None,
    search: Optional[str] = None,
) -> List[Issue]:
    """
    Get issues newest first, with comments loaded for the unread counters.
    """
    query = (
        select(Issue)
        .options(selectinload(Issue.comments))
        .filter(*build_issue_filters(status=status, category=category, search=search))
        .order_by(Issue.created_at.desc(), Issue.id.desc())
    )
    result = await db.execute(query)
    return list(result.scalars().all())


async def get_all_issues(db: AsyncSession) -> List[Issue]:
    """
    Get every issue newest first, without comments.
    """
    result = await db.execute(select(Issue).order_by(Issue.created_at.desc(), Issue.id.desc()))
    return list(result.scalars().all())


async def create_issue(db: AsyncSession, obj_in: IssueCreate, photo_url: Optional[str] = None) -> Issue:
    """
    Create a new issue in Pending status.
    """
    db_obj = Issue(
        title=obj_in.title,
        description=obj_in.description,
        category=obj_in.category,
        location=obj_in.location,
        reporter_name=obj_in.reporter_name,
        reporter_email=obj_in.reporter_email,
        reporter_phone=obj_in.reporter_phone,
        photo_url=photo_url,
        status=IssueStatus.PENDING,
    )
    db.add(db_obj)
    await db.commit()
    await db.refresh(db_obj)
    return db_obj


async def update_issue_status(db: AsyncSession, db_obj: Issue, status: IssueStatus) -> Issue:
    """
    Update the status of an issue.
    """
    db_obj.status = status
    db.add(db_obj)
    await db.commit()
    await db.refresh(db_obj)
    return db_obj


async def delete_issue(db: AsyncSession, id: int) -> Optional[Issue]:
    """
    Delete an issue together with its comments.
    """
    issue = await get_issue(db, id=id, with_comments=True)
    if issue is None:
        return None
    await db.delete(issue)
    await db.commit()
    return issue


async def get_statistics(db: AsyncSession) -> IssueStatistics:
    """
    Count issues overall, per status and per category.
    Categories without issues are left out of ``by_category``.
    """
    status_rows = await db.execute(
        select(Issue.status, func.count(Issue.id)).group_by(Issue.status)
    )
    by_status = {row[0]: row[1] for row in status_rows.all()}

    category_rows = await db.execute(
        select(Issue.category, func.count(Issue.id))
        .group_by(Issue.category)
        .order_by(Issue.category)
    )
    by_category = [
        CategoryCount(category=category, count=count)
        for category, count in category_rows.all()
        if count > 0
    ]

    return IssueStatistics(
        total=sum(by_status.values()),
        pending=by_status.get(IssueStatus.PENDING, 0),
        in_progress=by_status.get(IssueStatus.IN_PROGRESS, 0),
        resolved=by_status.get(IssueStatus.RESOLVED, 0),
        by_category=by_category,
    )
