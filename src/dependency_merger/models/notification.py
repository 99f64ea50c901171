"""
Notification Data Models

GitHub 알림 관련 데이터 모델들
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional
from pydantic import BaseModel, field_validator


class NotificationKind(Enum):
    """알림 제목으로 판별한 알림 종류"""
    DEPENDENCY_UPDATE = "dependency_update"
    SECURITY_ALERT = "security_alert"
    UNRELATED = "unrelated"


class DependencyScope(Enum):
    """의존성 업데이트 범위"""
    PROD = "deps"
    DEV = "deps-dev"


@dataclass(frozen=True)
class Notification:
    """GitHub 알림 스레드"""
    thread_id: str
    subject_title: Optional[str]
    subject_url: Optional[str]

    def __post_init__(self):
        """데이터 검증"""
        if not self.thread_id:
            raise ValueError("Thread id cannot be empty")


# Pydantic models for API payload validation
class SubjectPayload(BaseModel):
    title: Optional[str] = None
    url: Optional[str] = None
    type: Optional[str] = None


class NotificationPayload(BaseModel):
    """REST `GET /notifications` 응답 항목"""
    id: str
    subject: SubjectPayload

    @field_validator('id', mode='before')
    @classmethod
    def validate_id(cls, v):
        # 스레드 id는 문자열이지만 숫자로 오는 경우도 허용
        if isinstance(v, int):
            return str(v)
        return v
