"""
Schemas package for the Journal Platform API.

Core types are in schemas/user.py.
Request schemas that only one router uses are defined in that router.
"""

# User schemas - core types
from .user import (
    AppRole,
    User,
    UserWithProfile,
    UserList,
    Token,
)

from .article import (
    Article,
    ArticleCreate,
    ArticleUpdate,
    ArchiveIssue,
    ArchiveVolume,
)

from .review import (
    ReviewTarget,
    Review,
    ReviewAssignment,
)


__all__ = [
    # User schemas
    'AppRole',
    'User',
    'UserWithProfile',
    'UserList',
    'Token',

    # Article schemas
    'Article',
    'ArticleCreate',
    'ArticleUpdate',
    'ArchiveIssue',
    'ArchiveVolume',

    # Review schemas
    'ReviewTarget',
    'Review',
    'ReviewAssignment',
]
