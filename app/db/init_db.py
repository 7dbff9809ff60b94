from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from app.core.config import settings
from app.core.logging import get_logger
from app.crud.admin import create_admin, get_admin_by_email
from app.db.base_class import Base
from app.models import Issue, IssueCategory, IssueStatus

logger = get_logger("app.db")

SAMPLE_ISSUES = [
    {
        "title": "Broken Streetlight on Main Street",
        "description": "The streetlight near house #45 has been non-functional for 3 days, causing safety concerns.",
        "category": IssueCategory.ELECTRICITY,
        "location": "Main Street, near #45",
        "status": IssueStatus.PENDING,
    },
    {
        "title": "Pothole on Highway Road",
        "description": "Large pothole causing vehicle damage. Urgent repair needed.",
        "category": IssueCategory.ROADS,
        "location": "Highway Road, intersection with Oak Avenue",
        "status": IssueStatus.IN_PROGRESS,
    },
    {
        "title": "Water Leakage in Park Area",
        "description": "Continuous water leakage from underground pipe in Central Park.",
        "category": IssueCategory.WATER,
        "location": "Central Park, Zone B",
        "status": IssueStatus.PENDING,
    },
    {
        "title": "Waste Pickup Delayed",
        "description": "Waste has not been collected for over a week in Sector 5.",
        "category": IssueCategory.WASTE,
        "location": "Sector 5, residential area",
        "status": IssueStatus.RESOLVED,
    },
    {
        "title": "Broken Fence at Community Center",
        "description": "The fence surrounding the community center is broken, posing security risks.",
        "category": IssueCategory.SAFETY,
        "location": "Community Center, East Gate",
        "status": IssueStatus.PENDING,
    },
]


async def init_db(engine: AsyncEngine) -> None:
    """Initialize database tables."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    logger.info("Database tables initialized")


async def create_initial_data(session: AsyncSession) -> None:
    """Create the first admin and, if enabled, sample issues."""
    admin = await get_admin_by_email(session, email=settings.FIRST_ADMIN_EMAIL)
    if not admin:
        await create_admin(
            session,
            email=settings.FIRST_ADMIN_EMAIL,
            password=settings.FIRST_ADMIN_PASSWORD,
            name=settings.FIRST_ADMIN_NAME,
        )
        logger.info(f"Admin user created: email={settings.FIRST_ADMIN_EMAIL}")

    if settings.SEED_SAMPLE_ISSUES:
        existing = await session.scalar(select(func.count(Issue.id)))
        if not existing:
            session.add_all([Issue(**data) for data in SAMPLE_ISSUES])
            await session.commit()
            logger.info(f"Created {len(SAMPLE_ISSUES)} sample issues")

    logger.info("Initial data created")
