"""
Shared fixtures for dependency merger tests.
"""

import pytest

from dependency_merger.config import AppConfig, GitHubConfig, LoggingConfig, MergeConfig
from dependency_merger.models.pull_request import (
    CheckRun,
    CommitSnapshot,
    PullRequestSnapshot,
    PullRequestState,
    ReviewRecord,
    StatusContext,
)


@pytest.fixture
def make_pr():
    """Factory for PullRequestSnapshot objects with green defaults."""
    def _make_pr(
        author="dependabot",
        state=PullRequestState.OPEN,
        check_runs=(),
        statuses=(),
        files=("package-lock.json",),
        oid="5a4ac9002d0be2fb38bd78e4b4dbde5606d7042f",
        number=42,
    ):
        return PullRequestSnapshot(
            owner="octo-org",
            repo="octo-app",
            number=number,
            state=state,
            author_login=author,
            changed_file_paths=tuple(files),
            last_commit=CommitSnapshot(
                oid=oid,
                check_runs=tuple(check_runs),
                status_contexts=tuple(statuses),
            ),
        )
    return _make_pr


@pytest.fixture
def check_run():
    def _check_run(name="test", conclusion="SUCCESS"):
        return CheckRun(name=name, conclusion=conclusion, permalink=f"https://github.com/octo-org/octo-app/runs/{name}")
    return _check_run


@pytest.fixture
def status():
    def _status(context="ci/circleci", state="SUCCESS"):
        return StatusContext(context=context, state=state, target_url=f"https://ci.example.com/{context}")
    return _status


@pytest.fixture
def review():
    def _review(login="gr2m", state="APPROVED"):
        return ReviewRecord(reviewer_login=login, state=state)
    return _review


@pytest.fixture
def make_resource():
    """Factory for GraphQL PullRequest resource payloads."""
    def _make_resource(
        state="OPEN",
        author="dependabot",
        files=("package-lock.json",),
        check_suites=None,
        status=None,
        oid="5a4ac9002d0be2fb38bd78e4b4dbde5606d7042f",
    ):
        if check_suites is None:
            check_suites = [[{"name": "test", "conclusion": "SUCCESS", "permalink": "https://github.com/runs/1"}]]
        return {
            "state": state,
            "author": {"login": author} if author else None,
            "files": {"nodes": [{"path": path} for path in files]},
            "commits": {
                "nodes": [{
                    "commit": {
                        "oid": oid,
                        "checkSuites": {
                            "nodes": [{"checkRuns": {"nodes": runs}} for runs in check_suites]
                        },
                        "status": status,
                    }
                }]
            },
        }
    return _make_resource


@pytest.fixture
def app_config():
    return AppConfig(
        github=GitHubConfig(token="ghp_test_token_123456789"),
        merge=MergeConfig(),
        logging=LoggingConfig(),
    )
