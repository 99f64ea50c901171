"""
Pull Request Data Models

Pull Request 스냅샷 및 리뷰 관련 데이터 모델들
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple
from pydantic import BaseModel, Field, field_validator


class PullRequestState(Enum):
    """Pull Request 상태"""
    OPEN = "OPEN"
    CLOSED = "CLOSED"
    MERGED = "MERGED"


@dataclass(frozen=True)
class CheckRun:
    """커밋에 연결된 개별 CI 체크 실행 결과"""
    name: str
    conclusion: Optional[str]  # None이면 아직 실행 중
    permalink: Optional[str] = None

    @property
    def is_pending(self) -> bool:
        return self.conclusion is None


@dataclass(frozen=True)
class StatusContext:
    """레거시 커밋 상태 (commit status API)"""
    context: str
    state: str  # 'SUCCESS', 'FAILURE', 'PENDING', 'ERROR', 'EXPECTED'
    target_url: Optional[str] = None


@dataclass(frozen=True)
class CommitSnapshot:
    """PR의 마지막 커밋"""
    oid: str
    check_runs: Tuple[CheckRun, ...] = ()
    status_contexts: Tuple[StatusContext, ...] = ()

    def __post_init__(self):
        """데이터 검증"""
        if not self.oid:
            raise ValueError("Commit id cannot be empty")


@dataclass(frozen=True)
class PullRequestSnapshot:
    """의사결정 시점에 가져온 PR의 읽기 전용 스냅샷"""
    owner: str
    repo: str
    number: int
    state: PullRequestState
    author_login: Optional[str]
    last_commit: CommitSnapshot
    changed_file_paths: Tuple[str, ...] = ()

    def __post_init__(self):
        """데이터 검증"""
        if self.number <= 0:
            raise ValueError("PR number must be positive")
        if not self.owner or not self.repo:
            raise ValueError("Owner and repo cannot be empty")

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"

    @property
    def is_open(self) -> bool:
        return self.state is PullRequestState.OPEN

    def html_url(self, web_base_url: str = "https://github.com") -> str:
        """브라우저용 PR URL 반환"""
        return pull_request_html_url(web_base_url, self.owner, self.repo, self.number)


def pull_request_html_url(web_base_url: str, owner: str, repo: str, number: int) -> str:
    """스냅샷을 만들기 전에도 쓸 수 있는 PR 브라우저 URL"""
    return f"{web_base_url.rstrip('/')}/{owner}/{repo}/pull/{number}"


@dataclass(frozen=True)
class ReviewRecord:
    """PR 리뷰 한 건"""
    reviewer_login: str
    state: str  # 'APPROVED', 'CHANGES_REQUESTED', 'COMMENTED', 'DISMISSED', 'PENDING'

    @property
    def requests_changes(self) -> bool:
        return self.state == "CHANGES_REQUESTED"


# Pydantic models for API payload validation
class ActorPayload(BaseModel):
    """GraphQL/REST 사용자 필드"""
    login: str


class CheckRunPayload(BaseModel):
    name: str
    conclusion: Optional[str] = None
    permalink: Optional[str] = None


class CheckRunConnection(BaseModel):
    nodes: List[CheckRunPayload] = Field(default_factory=list)


class CheckSuitePayload(BaseModel):
    checkRuns: Optional[CheckRunConnection] = None


class CheckSuiteConnection(BaseModel):
    nodes: List[CheckSuitePayload] = Field(default_factory=list)


class StatusContextPayload(BaseModel):
    context: str
    state: str
    targetUrl: Optional[str] = None
    description: Optional[str] = None


class StatusPayload(BaseModel):
    state: Optional[str] = None
    contexts: List[StatusContextPayload] = Field(default_factory=list)


class CommitPayload(BaseModel):
    oid: str
    checkSuites: Optional[CheckSuiteConnection] = None
    status: Optional[StatusPayload] = None


class CommitNodePayload(BaseModel):
    commit: CommitPayload


class CommitConnection(BaseModel):
    nodes: List[CommitNodePayload]

    @field_validator('nodes')
    @classmethod
    def validate_nodes(cls, v):
        if not v:
            raise ValueError('Pull request must have at least one commit')
        return v


class FilePayload(BaseModel):
    path: str


class FileConnection(BaseModel):
    nodes: List[FilePayload] = Field(default_factory=list)


class PullRequestResource(BaseModel):
    """GraphQL `resource(url:)` 응답의 PullRequest 조각"""
    state: PullRequestState
    author: Optional[ActorPayload] = None
    files: Optional[FileConnection] = None
    commits: CommitConnection


class ReviewPayload(BaseModel):
    """REST 리뷰 목록 항목"""
    user: Optional[ActorPayload] = None
    state: str
