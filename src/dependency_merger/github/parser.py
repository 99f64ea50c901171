"""
GitHub Payload Parser

Parses GitHub notification, pull request and review payloads into
structured snapshots for merge decisions. Payloads are validated with
the pydantic models in ``models`` before conversion.
"""

import re
import logging
from typing import Dict, List, Optional, Tuple

from pydantic import ValidationError

from ..models.notification import Notification, NotificationPayload
from ..models.pull_request import (
    CheckRun,
    CommitSnapshot,
    PullRequestResource,
    PullRequestSnapshot,
    ReviewPayload,
    ReviewRecord,
    StatusContext,
)


logger = logging.getLogger(__name__)


GHOST_LOGIN = "ghost"


class PayloadError(ValueError):
    """Unexpected GitHub API payload shape"""


class GitHubPayloadParser:
    """
    Parser for GitHub API payloads.

    Converts REST notification and review lists and the GraphQL pull
    request resource into immutable domain objects.
    """

    def __init__(self, api_base_url: str = "https://api.github.com"):
        """
        Initialize payload parser.

        Args:
            api_base_url: API base URL that notification subject URLs start with
        """
        self.api_base_url = api_base_url.rstrip('/')
        self.pull_request_url_pattern = re.compile(
            r'^' + re.escape(self.api_base_url) + r'/repos/([^/]+)/([^/]+)/pulls/(\d+)$'
        )

    def parse_notifications(self, notifications_data: List[Dict]) -> List[Notification]:
        """
        Parse notification threads, dropping malformed entries.

        Args:
            notifications_data: Items from ``GET /notifications``

        Returns:
            List of Notification objects
        """
        notifications = []

        for notification_data in notifications_data:
            try:
                payload = NotificationPayload.model_validate(notification_data)
            except ValidationError as e:
                logger.warning(f"Skipping malformed notification: {e}")
                continue

            notifications.append(Notification(
                thread_id=payload.id,
                subject_title=payload.subject.title,
                subject_url=payload.subject.url,
            ))

        return notifications

    def parse_pull_request_url(self, url: Optional[str]) -> Optional[Tuple[str, str, int]]:
        """
        Extract owner, repo and number from a pull request API URL.

        Returns:
            (owner, repo, number), or None if the URL is not a pull request
        """
        if not url:
            return None

        match = self.pull_request_url_pattern.match(url)
        if not match:
            return None

        owner, repo, number = match.groups()
        return owner, repo, int(number)

    def parse_pull_request(self, owner: str, repo: str, number: int, resource: Dict) -> PullRequestSnapshot:
        """
        Parse GraphQL pull request resource into a snapshot.

        Args:
            owner: Repository owner
            repo: Repository name
            number: Pull request number
            resource: ``resource`` member of the GraphQL response

        Returns:
            Structured PullRequestSnapshot

        Raises:
            PayloadError: If the resource does not look like a pull request
        """
        try:
            payload = PullRequestResource.model_validate(resource)
        except ValidationError as e:
            raise PayloadError(f"Unexpected pull request payload for {owner}/{repo}#{number}: {e}") from e

        commit = payload.commits.nodes[-1].commit

        # check runs of all check suites, flattened in API order
        check_runs = []
        for suite in (commit.checkSuites.nodes if commit.checkSuites else []):
            if suite.checkRuns is None:
                continue
            for run in suite.checkRuns.nodes:
                check_runs.append(CheckRun(
                    name=run.name,
                    conclusion=run.conclusion,
                    permalink=run.permalink,
                ))

        # a commit may have check runs but no legacy status
        status_contexts = []
        if commit.status is not None:
            for context in commit.status.contexts:
                status_contexts.append(StatusContext(
                    context=context.context,
                    state=context.state,
                    target_url=context.targetUrl,
                ))

        changed_files = tuple(node.path for node in payload.files.nodes) if payload.files else ()

        try:
            snapshot = PullRequestSnapshot(
                owner=owner,
                repo=repo,
                number=number,
                state=payload.state,
                author_login=payload.author.login if payload.author else None,
                changed_file_paths=changed_files,
                last_commit=CommitSnapshot(
                    oid=commit.oid,
                    check_runs=tuple(check_runs),
                    status_contexts=tuple(status_contexts),
                ),
            )
        except ValueError as e:
            raise PayloadError(f"Invalid pull request {owner}/{repo}#{number}: {e}") from e

        logger.debug(
            f"Parsed {snapshot.full_name}#{number}: state={snapshot.state.value}, "
            f"{len(check_runs)} check runs, {len(status_contexts)} statuses"
        )
        return snapshot

    def parse_reviews(self, reviews_data: List[Dict]) -> List[ReviewRecord]:
        """
        Parse pull request reviews.

        Args:
            reviews_data: Items from the list reviews endpoint

        Returns:
            List of ReviewRecord objects, in API order
        """
        reviews = []

        for review_data in reviews_data:
            try:
                payload = ReviewPayload.model_validate(review_data)
            except ValidationError as e:
                raise PayloadError(f"Unexpected review payload: {e}") from e

            reviews.append(ReviewRecord(
                reviewer_login=payload.user.login if payload.user else GHOST_LOGIN,
                state=payload.state,
            ))

        return reviews
