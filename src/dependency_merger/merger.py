"""
Dependency Update Merger

Main interface that orchestrates one triage run: from loading the
notification inbox to approving and merging green dependency updates.
"""

import logging
from typing import List, Optional
from datetime import datetime
from dataclasses import dataclass, field

from .config import AppConfig
from .github.client import (
    AuthenticationError,
    GitHubAPIError,
    GitHubClient,
    InsufficientScopesError,
    MergeConflictError,
    RateLimitExceeded,
)
from .github.parser import GitHubPayloadParser, PayloadError
from .models.notification import Notification, NotificationKind
from .models.decision import Ignore, Merge, MergeDecision, Skip
from .models.pull_request import PullRequestSnapshot, pull_request_html_url
from .triage.classifier import TitleClassifier
from .triage.commit_title import CommitTitleRewriter
from .triage.decision import MergeDecisionEngine


logger = logging.getLogger(__name__)


# errors that make every further API call pointless
FATAL_ERRORS = (AuthenticationError, InsufficientScopesError, RateLimitExceeded)


@dataclass
class RunSummary:
    """Result of a single triage run."""
    started_at: datetime
    notifications_seen: int = 0
    security_alerts_read: List[str] = field(default_factory=list)
    merged: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    ignored: List[str] = field(default_factory=list)
    conflicts: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    dry_run: bool = False

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)

    def describe(self) -> str:
        text = (
            f"{self.notifications_seen} notifications: "
            f"{len(self.merged)} merged, {len(self.skipped)} skipped, "
            f"{len(self.ignored)} ignored, {len(self.conflicts)} conflicts, "
            f"{len(self.errors)} errors, "
            f"{len(self.security_alerts_read)} security alerts marked read"
        )
        if self.dry_run:
            text += " (dry run)"
        return text


class DependencyMerger:
    """
    Dependency update merger.

    Orchestrates a run:
    1. Verify token scopes
    2. Load and classify notifications
    3. Mark security vulnerability alerts as read
    4. Inspect every dependency update pull request, approve and merge
       the ones that are green, then mark their notifications read
    """

    def __init__(
        self,
        config: AppConfig,
        client: Optional[GitHubClient] = None,
    ):
        """
        Initialize dependency merger.

        Args:
            config: Validated application configuration
            client: Optional GitHub client (created from config if omitted)
        """
        self.config = config

        logger.debug("Initializing dependency merger components...")

        self.client = client or GitHubClient(
            config.github.token,
            base_url=config.github.api_base_url,
            timeout_seconds=config.github.timeout_seconds,
        )
        self.parser = GitHubPayloadParser(api_base_url=config.github.api_base_url)
        self.classifier = TitleClassifier(include_greenkeeper=config.merge.include_greenkeeper)
        self.engine = MergeDecisionEngine(
            trusted_authors=config.merge.effective_trusted_authors,
            ignored_checks=config.merge.ignored_checks,
            title_rewriter=CommitTitleRewriter(manifest_files=config.merge.manifest_files),
        )

    @property
    def dry_run(self) -> bool:
        return self.config.merge.dry_run

    def run(self) -> RunSummary:
        """
        Run one triage pass over the notification inbox.

        Returns:
            RunSummary of everything that happened

        Raises:
            AuthenticationError, InsufficientScopesError, RateLimitExceeded:
                Fatal errors that abort the run
        """
        summary = RunSummary(started_at=datetime.now(), dry_run=self.dry_run)

        self.client.verify_scopes(self.config.github.required_scopes)

        notifications = self.parser.parse_notifications(self.client.list_notifications())
        summary.notifications_seen = len(notifications)

        dependency_updates = []
        security_alerts = []
        for notification in notifications:
            kind = self.classifier.classify(notification.subject_title)
            if kind is NotificationKind.DEPENDENCY_UPDATE:
                dependency_updates.append(notification)
            elif kind is NotificationKind.SECURITY_ALERT:
                security_alerts.append(notification)
            elif kind is NotificationKind.UNRELATED:
                logger.debug(f'Leaving "{notification.subject_title}" alone')

        logger.info(f"{len(dependency_updates)} dependency update pull requests found in notifications")
        logger.info(f"{len(security_alerts)} security vulnerability notifications found")

        for notification in security_alerts:
            self._run_item(notification, self._handle_security_alert, summary)

        for notification in dependency_updates:
            self._run_item(notification, self._handle_dependency_update, summary)

        logger.info(f"Run completed: {summary.describe()}")
        return summary

    def _run_item(self, notification: Notification, handler, summary: RunSummary) -> None:
        """Run a handler for one notification, containing non-fatal errors."""
        try:
            handler(notification, summary)
        except FATAL_ERRORS:
            raise
        except MergeConflictError:
            logger.warning("pull request was meanwhile rebased, try again later")
            summary.conflicts.append(notification.subject_title or notification.thread_id)
        except (GitHubAPIError, PayloadError) as e:
            logger.error(f'Failed to process "{notification.subject_title}": {e}')
            summary.errors.append(f"{notification.subject_title or notification.thread_id}: {e}")

    def _handle_security_alert(self, notification: Notification, summary: RunSummary) -> None:
        self._mark_read(notification)
        summary.security_alerts_read.append(notification.subject_title)

    def _handle_dependency_update(self, notification: Notification, summary: RunSummary) -> None:
        """
        Inspect a dependency update pull request and act on the decision.

        Args:
            notification: Notification referencing the pull request
            summary: RunSummary to record the outcome in
        """
        location = self.parser.parse_pull_request_url(notification.subject_url)
        if location is None:
            logger.info(f"Ignoring {notification.subject_url}, not a pull request URL")
            summary.ignored.append(notification.subject_url or notification.thread_id)
            return

        owner, repo, number = location

        resource = self.client.get_pull_request_resource(
            pull_request_html_url(self.config.github.web_base_url, owner, repo, number),
            changed_files_limit=self.config.merge.changed_files_limit,
        )
        pr = self.parser.parse_pull_request(owner, repo, number, resource)

        decision = self.engine.check_gates(pr)
        if decision is None:
            reviews = self.parser.parse_reviews(self.client.list_reviews(owner, repo, number))
            decision = self.engine.decide(pr, reviews, notification.subject_title)

        self._apply_decision(notification, pr, decision, summary)

    def _apply_decision(
        self,
        notification: Notification,
        pr: PullRequestSnapshot,
        decision: MergeDecision,
        summary: RunSummary,
    ) -> None:
        html_url = pr.html_url(self.config.github.web_base_url)

        if isinstance(decision, Ignore):
            logger.info(f'Ignoring {html_url}: {decision.reason} (author "{pr.author_login}")')
            summary.ignored.append(html_url)
            if decision.should_mark_read:
                self._mark_read(notification)
            return

        if isinstance(decision, Skip):
            logger.info(f"Skipping {html_url}: {decision.reason}")
            for failure in decision.failures:
                logger.info(f"- {failure.describe()}")
            summary.skipped.append(html_url)
            return

        if isinstance(decision, Merge):
            self._approve_and_merge(pr, decision)
            summary.merged.append(html_url)
            self._mark_read(notification)
            return

        raise TypeError(f"Unknown merge decision: {decision!r}")

    def _approve_and_merge(self, pr: PullRequestSnapshot, decision: Merge) -> None:
        if self.dry_run:
            logger.info(
                f"[dry-run] Would approve {pr.full_name}#{pr.number} at {decision.commit_id} "
                f'and {self.config.merge.merge_method} merge as "{decision.commit_title}"'
            )
            return

        self.client.approve_pull_request(pr.owner, pr.repo, pr.number, decision.commit_id)
        self.client.merge_pull_request(
            pr.owner,
            pr.repo,
            pr.number,
            merge_method=self.config.merge.merge_method,
            commit_title=decision.commit_title,
        )

    def _mark_read(self, notification: Notification) -> None:
        if self.dry_run:
            logger.info(f'[dry-run] Would mark "{notification.subject_title}" notification as read')
            return

        logger.info(f'Marking "{notification.subject_title}" notification as read')
        self.client.mark_notification_read(notification.thread_id)
