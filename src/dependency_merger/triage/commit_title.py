"""
Commit Title Rewriter

Derives the squash merge commit title for a dependency update pull request.
The commit prefix drives semantic-release: only bumps that touch a dependency
manifest are released as user facing fixes.
"""

import re
import logging
from typing import Iterable, Optional

from ..models.notification import DependencyScope
from ..models.pull_request import PullRequestSnapshot
from .classifier import DEPENDABOT_TITLE_PATTERN, dependency_scope, is_lock_file_maintenance


logger = logging.getLogger(__name__)


FIX_DEPS_PREFIX = re.compile(r'^fix\(deps\)')
BUILD_DEPS_PREFIX = re.compile(r'^build\(deps\)')

DEFAULT_MANIFEST_FILES = ("package.json",)


class CommitTitleRewriter:
    """
    Rewrites dependency update titles into squash merge commit titles.
    """

    def __init__(self, manifest_files: Optional[Iterable[str]] = None):
        """
        Initialize commit title rewriter.

        Args:
            manifest_files: Repository paths whose change marks an
                out-of-range update (default: package.json)
        """
        self.manifest_files = frozenset(
            manifest_files if manifest_files is not None else DEFAULT_MANIFEST_FILES
        )

    def rewrite(
        self,
        original_title: str,
        scope: Optional[DependencyScope],
        manifest_changed: bool,
        is_lock_file_maintenance: bool,
    ) -> str:
        """
        Rewrite a pull request title into a commit title.

        Args:
            original_title: Pull request (notification) title
            scope: Dependency scope, None if unknown
            manifest_changed: Whether a manifest file is part of the diff
            is_lock_file_maintenance: Whether this is a lock file maintenance PR

        Returns:
            Commit title, unchanged unless a prefix rewrite applies
        """
        # lock file maintenance only bumps transitive dependencies
        if is_lock_file_maintenance:
            return FIX_DEPS_PREFIX.sub("build(deps)", original_title, count=1)

        if not DEPENDABOT_TITLE_PATTERN.match(original_title):
            return original_title

        # dev dependency bumps keep their prefix
        if scope is DependencyScope.DEV:
            return original_title

        if manifest_changed:
            return BUILD_DEPS_PREFIX.sub("fix(deps)", original_title, count=1)

        return original_title

    def manifest_changed(self, pr: PullRequestSnapshot) -> bool:
        return any(path in self.manifest_files for path in pr.changed_file_paths)

    def commit_title_for(self, title: str, pr: PullRequestSnapshot) -> str:
        """
        Compute the commit title for a pull request snapshot.

        Args:
            title: Pull request title as seen in the notification
            pr: Pull request snapshot (used for changed files)

        Returns:
            Commit title for the squash merge
        """
        commit_title = self.rewrite(
            title,
            scope=dependency_scope(title),
            manifest_changed=self.manifest_changed(pr),
            is_lock_file_maintenance=is_lock_file_maintenance(title),
        )

        if commit_title != title:
            logger.debug(f"Rewrote commit title: {title!r} -> {commit_title!r}")

        return commit_title
