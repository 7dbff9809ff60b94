from sqlalchemy import Column, String, Integer, Enum, Text, DateTime
import enum
from sqlalchemy.orm import relationship

from app.db.base_class import Base


class IssueStatus(str, enum.Enum):
    PENDING = "Pending"
    IN_PROGRESS = "In-Progress"
    RESOLVED = "Resolved"


class IssueCategory(str, enum.Enum):
    ELECTRICITY = "Electricity"
    ROADS = "Roads"
    WATER = "Water"
    WASTE = "Waste"
    SAFETY = "Safety"


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


class Issue(Base):
    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    category = Column(
        Enum(IssueCategory, name="issuecategory", values_callable=_enum_values),
        nullable=False,
        index=True,
    )
    location = Column(String(500), nullable=False)
    status = Column(
        Enum(IssueStatus, name="issuestatus", values_callable=_enum_values),
        default=IssueStatus.PENDING,
        nullable=False,
        index=True,
    )
    photo_url = Column(String(1024), nullable=True)

    # Reporters have no account; contact details are optional
    reporter_name = Column(String(255), nullable=True)
    reporter_email = Column(String(255), nullable=True)
    reporter_phone = Column(String(50), nullable=True)

    # Notification watermarks, only written by "mark viewed"
    last_admin_view = Column(DateTime, nullable=True)
    last_reporter_view = Column(DateTime, nullable=True)

    comments = relationship(
        "Comment",
        back_populates="issue",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Comment.created_at",
    )
