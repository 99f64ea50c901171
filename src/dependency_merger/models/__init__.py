"""
Data Models

Dependency Merger 시스템의 핵심 데이터 모델들
"""

from .notification import Notification, NotificationKind, DependencyScope
from .pull_request import (
    PullRequestState,
    CheckRun,
    StatusContext,
    CommitSnapshot,
    PullRequestSnapshot,
    ReviewRecord,
)
from .decision import CheckFailure, IgnoreCause, Merge, Skip, Ignore, MergeDecision

__all__ = [
    "Notification",
    "NotificationKind",
    "DependencyScope",
    "PullRequestState",
    "CheckRun",
    "StatusContext",
    "CommitSnapshot",
    "PullRequestSnapshot",
    "ReviewRecord",
    "CheckFailure",
    "IgnoreCause",
    "Merge",
    "Skip",
    "Ignore",
    "MergeDecision",
]
