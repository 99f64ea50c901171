"""
Unit tests for data models.
"""

import pytest
from pydantic import ValidationError

from dependency_merger.models.notification import Notification, NotificationPayload
from dependency_merger.models.pull_request import (
    CommitSnapshot,
    PullRequestResource,
    PullRequestSnapshot,
    PullRequestState,
    ReviewRecord,
)
from dependency_merger.models.decision import CheckFailure, IgnoreCause, Ignore


class TestPullRequestModels:
    """Unit tests for pull request data models."""

    def test_snapshot_properties(self, make_pr):
        pr = make_pr(number=7)

        assert pr.full_name == "octo-org/octo-app"
        assert pr.is_open
        assert pr.html_url() == "https://github.com/octo-org/octo-app/pull/7"
        assert pr.html_url("https://ghe.example.com/") == "https://ghe.example.com/octo-org/octo-app/pull/7"

    def test_snapshot_validation(self):
        commit = CommitSnapshot(oid="abc1234")

        with pytest.raises(ValueError):
            PullRequestSnapshot(
                owner="octo-org", repo="octo-app", number=0,
                state=PullRequestState.OPEN, author_login="dependabot", last_commit=commit,
            )

        with pytest.raises(ValueError):
            PullRequestSnapshot(
                owner="", repo="octo-app", number=1,
                state=PullRequestState.OPEN, author_login="dependabot", last_commit=commit,
            )

    def test_commit_requires_oid(self):
        with pytest.raises(ValueError):
            CommitSnapshot(oid="")

    def test_snapshot_is_immutable(self, make_pr):
        pr = make_pr()

        with pytest.raises(AttributeError):
            pr.state = PullRequestState.MERGED

    def test_review_record(self):
        assert ReviewRecord("octocat", "CHANGES_REQUESTED").requests_changes
        assert not ReviewRecord("octocat", "APPROVED").requests_changes


class TestDecisionModels:
    """Unit tests for decision data models."""

    def test_check_failure_kind_validation(self):
        with pytest.raises(ValueError):
            CheckFailure(kind="workflow", name="test", state="FAILURE")

    def test_check_failure_describe(self):
        failure = CheckFailure(kind="check_run", name="test", state="FAILURE", url="https://github.com/runs/1")

        assert failure.describe() == 'Check run by "test" (FAILURE) https://github.com/runs/1'
        assert CheckFailure(kind="status", name="ci", state="PENDING").describe() == 'Status by "ci" (PENDING)'

    def test_ignore_mark_read(self):
        assert Ignore("closed", IgnoreCause.NOT_OPEN).should_mark_read
        assert not Ignore("not a known dependency update app", IgnoreCause.UNTRUSTED_AUTHOR).should_mark_read


class TestPayloadModels:
    """Unit tests for pydantic payload models."""

    def test_notification_payload_numeric_id(self):
        payload = NotificationPayload.model_validate({"id": 1234, "subject": {"title": "t", "url": None}})

        assert payload.id == "1234"

    def test_notification_requires_thread_id(self):
        with pytest.raises(ValueError):
            Notification(thread_id="", subject_title="t", subject_url=None)

    def test_resource_requires_commit(self):
        with pytest.raises(ValidationError):
            PullRequestResource.model_validate({"state": "OPEN", "commits": {"nodes": []}})

    def test_resource_rejects_unknown_state(self, make_resource):
        with pytest.raises(ValidationError):
            PullRequestResource.model_validate(make_resource(state="DRAFT"))

    def test_resource_state_enum(self, make_resource):
        payload = PullRequestResource.model_validate(make_resource(state="MERGED"))

        assert payload.state is PullRequestState.MERGED
