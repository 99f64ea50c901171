"""
Merge Decision Data Models

자동 머지 판단 결과 데이터 모델들
"""

from dataclasses import dataclass
from enum import Enum
from typing import Tuple, Union


class IgnoreCause(Enum):
    """PR을 무시하는 이유"""
    UNTRUSTED_AUTHOR = "untrusted_author"
    NOT_OPEN = "not_open"


@dataclass(frozen=True)
class CheckFailure:
    """실패했거나 성공하지 않은 체크/상태"""
    kind: str  # 'check_run', 'status'
    name: str
    state: str
    url: str = ""

    def __post_init__(self):
        """데이터 검증"""
        valid_kinds = {'check_run', 'status'}
        if self.kind not in valid_kinds:
            raise ValueError(f"Invalid kind: {self.kind}")

    def describe(self) -> str:
        """로그 출력용 한 줄 설명"""
        label = "Check run" if self.kind == 'check_run' else "Status"
        text = f'{label} by "{self.name}" ({self.state})'
        if self.url:
            text += f" {self.url}"
        return text


@dataclass(frozen=True)
class Merge:
    """승인 후 머지"""
    commit_title: str
    commit_id: str


@dataclass(frozen=True)
class Skip:
    """이번 실행에서는 건너뜀 (알림은 읽지 않은 상태로 유지)"""
    reason: str
    failures: Tuple[CheckFailure, ...] = ()
    reviewers: Tuple[str, ...] = ()


@dataclass(frozen=True)
class Ignore:
    """자동 머지 대상이 아님"""
    reason: str
    cause: IgnoreCause

    @property
    def should_mark_read(self) -> bool:
        """이미 닫히거나 머지된 PR의 알림만 읽음 처리"""
        return self.cause is IgnoreCause.NOT_OPEN


MergeDecision = Union[Merge, Skip, Ignore]
