from app.schemas.admin import Admin, AdminLogin, Token, TokenVerification
from app.schemas.comment import Comment, CommentCreate, CommentMessage
from app.schemas.issue import (
    CategoryCount,
    Issue,
    IssueCreate,
    IssueDetail,
    IssueMarkViewed,
    IssueMessage,
    IssueStatistics,
    IssueStatusUpdate,
    IssueWithUnread,
)
