from sqlalchemy import Column, String, Integer, ForeignKey, Text, Enum
import enum
from sqlalchemy.orm import relationship

from app.db.base_class import Base


class AuthorType(str, enum.Enum):
    ADMIN = "admin"
    REPORTER = "reporter"


class Comment(Base):
    id = Column(Integer, primary_key=True, index=True)
    content = Column(Text, nullable=False)
    author_name = Column(String(255), nullable=False)
    author_type = Column(
        Enum(AuthorType, name="authortype", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
    )

    issue_id = Column(Integer, ForeignKey("issue.id", ondelete="CASCADE"), nullable=False, index=True)
    issue = relationship("Issue", back_populates="comments")
