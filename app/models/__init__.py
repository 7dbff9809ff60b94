from app.models.admin import Admin
from app.models.issue import Issue, IssueCategory, IssueStatus
from app.models.comment import Comment, AuthorType
