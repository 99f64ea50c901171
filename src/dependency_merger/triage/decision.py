"""
Merge Decision Engine

Decides whether a dependency update pull request is safe to merge
automatically, based on its author, state, CI results and reviews.
The engine only reads the snapshot it is given; approving, merging and
marking notifications read is left to the caller.
"""

import logging
from typing import Iterable, List, Optional, Sequence

from ..models.pull_request import PullRequestSnapshot, ReviewRecord
from ..models.decision import (
    CheckFailure,
    IgnoreCause,
    Ignore,
    Merge,
    MergeDecision,
    Skip,
)
from .commit_title import CommitTitleRewriter


logger = logging.getLogger(__name__)


SUCCESSFUL_CONCLUSIONS = frozenset({"SUCCESS", "NEUTRAL"})
SUCCESSFUL_STATUS_STATE = "SUCCESS"

DEFAULT_TRUSTED_AUTHORS = ("dependabot", "renovate")
# reporting-only checks that never block a merge
DEFAULT_IGNORED_CHECKS = ("Pika CI", "project-board")


class MergeDecisionEngine:
    """
    Merge eligibility rules for dependency update pull requests.

    Evaluation order, stopping at the first outcome:
    1. Author must be a trusted dependency bot
    2. Pull request must still be open
    3. No failing check runs (pending and ignored checks excepted)
    4. No non-successful commit status contexts
    5. No review requesting changes
    """

    def __init__(
        self,
        trusted_authors: Optional[Iterable[str]] = None,
        ignored_checks: Optional[Iterable[str]] = None,
        title_rewriter: Optional[CommitTitleRewriter] = None,
    ):
        """
        Initialize merge decision engine.

        Args:
            trusted_authors: Logins of dependency update apps
            ignored_checks: Check run names that never block a merge
            title_rewriter: CommitTitleRewriter used for the merge commit title
        """
        self.trusted_authors = frozenset(
            trusted_authors if trusted_authors is not None else DEFAULT_TRUSTED_AUTHORS
        )
        self.ignored_checks = frozenset(
            ignored_checks if ignored_checks is not None else DEFAULT_IGNORED_CHECKS
        )
        self.title_rewriter = title_rewriter or CommitTitleRewriter()

    def decide(
        self,
        pr: PullRequestSnapshot,
        reviews: Sequence[ReviewRecord],
        title: str,
    ) -> MergeDecision:
        """
        Decide what to do with a pull request.

        Args:
            pr: Freshly fetched pull request snapshot
            reviews: Reviews of the pull request, in API order
            title: Pull request title, used for the commit title

        Returns:
            Merge, Skip or Ignore decision
        """
        decision = self.check_gates(pr)
        if decision is not None:
            return decision

        decision = self._check_reviews(reviews)
        if decision is not None:
            return decision

        return Merge(
            commit_title=self.title_rewriter.commit_title_for(title, pr),
            commit_id=pr.last_commit.oid,
        )

    def check_gates(self, pr: PullRequestSnapshot) -> Optional[MergeDecision]:
        """
        Run every rule that does not need reviews.

        Returns:
            Ignore or Skip decision, or None if the pull request passed
        """
        if pr.author_login not in self.trusted_authors:
            return Ignore(
                reason="not a known dependency update app",
                cause=IgnoreCause.UNTRUSTED_AUTHOR,
            )

        if not pr.is_open:
            return Ignore(
                reason=f'pull request state is "{pr.state.value}"',
                cause=IgnoreCause.NOT_OPEN,
            )

        return self._check_ci(pr)

    def unsuccessful_checks(self, pr: PullRequestSnapshot) -> List[CheckFailure]:
        """
        Collect check runs and status contexts that block a merge.

        A check run with no conclusion is still running and does not count.
        """
        failures = []

        for check_run in pr.last_commit.check_runs:
            if check_run.conclusion is None:
                continue
            if check_run.conclusion in SUCCESSFUL_CONCLUSIONS:
                continue
            if check_run.name in self.ignored_checks:
                continue
            failures.append(CheckFailure(
                kind='check_run',
                name=check_run.name,
                state=check_run.conclusion,
                url=check_run.permalink or "",
            ))

        for status in pr.last_commit.status_contexts:
            if status.state != SUCCESSFUL_STATUS_STATE:
                failures.append(CheckFailure(
                    kind='status',
                    name=status.context,
                    state=status.state,
                    url=status.target_url or "",
                ))

        return failures

    def _check_ci(self, pr: PullRequestSnapshot) -> Optional[Skip]:
        failures = self.unsuccessful_checks(pr)
        if not failures:
            return None

        total = len(pr.last_commit.check_runs) + len(pr.last_commit.status_contexts)
        return Skip(
            reason=f"{len(failures)} of {total} checks/statuses failing",
            failures=tuple(failures),
        )

    def _check_reviews(self, reviews: Sequence[ReviewRecord]) -> Optional[Skip]:
        # Every CHANGES_REQUESTED review in the history blocks, even if the
        # same reviewer approved later.
        reviewers = []
        for review in reviews:
            if review.requests_changes and review.reviewer_login not in reviewers:
                reviewers.append(review.reviewer_login)

        if not reviewers:
            return None

        return Skip(
            reason="changes requested by: " + ", ".join(f"@{login}" for login in reviewers),
            reviewers=tuple(reviewers),
        )
