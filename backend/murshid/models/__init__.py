"""
Model package initialisation.

Imports every model so that Flask-Migrate and db.create_all() see the whole
content graph.
"""
from murshid import db

from .user import User
from .catalog import University, Major
from .post import CommunityPost, POST_TYPES
from .answer import CommunityAnswer
from .comment import CommunityComment
from .likes import CommunityPostLike, CommunityAnswerLike, CommunityCommentLike
from .report import (
    CommunityReport, REPORT_REASONS, REPORT_CONTENT_TYPES, REPORT_STATUSES,
    REPORT_STATUS_PENDING, REPORT_STATUS_DISMISSED, REPORT_STATUS_ACTIONED,
)
from .content_version import ContentVersion, VERSION_CONTENT_TYPES

__all__ = [
    'db',
    'User', 'University', 'Major',
    'CommunityPost', 'CommunityAnswer', 'CommunityComment',
    'CommunityPostLike', 'CommunityAnswerLike', 'CommunityCommentLike',
    'CommunityReport', 'ContentVersion',
    'POST_TYPES', 'REPORT_REASONS', 'REPORT_CONTENT_TYPES', 'REPORT_STATUSES',
    'REPORT_STATUS_PENDING', 'REPORT_STATUS_DISMISSED', 'REPORT_STATUS_ACTIONED',
    'VERSION_CONTENT_TYPES',
]
