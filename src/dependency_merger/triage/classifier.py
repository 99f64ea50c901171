"""
Title Classifier

Classifies GitHub notifications by subject title into dependency update
pull requests, security vulnerability alerts, or unrelated notifications.
"""

import re
import logging
from typing import Any, Optional

from ..models.notification import NotificationKind, DependencyScope


logger = logging.getLogger(__name__)


# Dependabot: "build(deps): bump foo from 1.0.0 to 1.1.0"
DEPENDABOT_TITLE_PATTERN = re.compile(
    r'^(chore|build)\((deps(-dev)?)\): bump \S+ from \d+\.\d+\.\d+ to \d+\.\d+\.\d+'
)
# Renovate: "fix(deps): update dependency foo to v2" / "build(deps): lock file maintenance"
RENOVATE_DEPENDENCY_TITLE_PATTERN = re.compile(
    r'^(chore|build|fix)\(deps\): (update .* to v\d+(\.\d+\.\d+)?|lock file maintenance)'
)
# Renovate pinned GitHub Action: "ci(action): update actions/checkout digest to 5a4ac90"
RENOVATE_ACTION_DIGEST_TITLE_PATTERN = re.compile(
    r'^ci\(action\): update .* digest to [0-9a-f]{7}'
)
GREENKEEPER_TITLE_PATTERN = re.compile(r'^Update .* to the latest version 🚀')
SECURITY_ALERT_TITLE_PATTERN = re.compile(r'^Potential security vulnerability found')
LOCK_FILE_MAINTENANCE_PATTERN = re.compile(r'lock file maintenance')


class TitleClassifier:
    """
    Pattern-matches notification titles against dependency bot conventions.

    Never raises: anything that is not a string, or does not match a known
    convention, is classified as unrelated.
    """

    def __init__(self, include_greenkeeper: bool = False):
        """
        Initialize title classifier.

        Args:
            include_greenkeeper: Also treat legacy Greenkeeper titles as
                dependency updates
        """
        self.dependency_patterns = [
            DEPENDABOT_TITLE_PATTERN,
            RENOVATE_DEPENDENCY_TITLE_PATTERN,
            RENOVATE_ACTION_DIGEST_TITLE_PATTERN,
        ]
        if include_greenkeeper:
            self.dependency_patterns.append(GREENKEEPER_TITLE_PATTERN)

    def classify(self, title: Any) -> NotificationKind:
        """
        Classify a notification subject title.

        Args:
            title: Notification subject title (may be None or malformed)

        Returns:
            NotificationKind for the title
        """
        if not isinstance(title, str) or not title:
            return NotificationKind.UNRELATED

        if self.is_dependency_update(title):
            return NotificationKind.DEPENDENCY_UPDATE

        if SECURITY_ALERT_TITLE_PATTERN.match(title):
            return NotificationKind.SECURITY_ALERT

        return NotificationKind.UNRELATED

    def is_dependency_update(self, title: Any) -> bool:
        if not isinstance(title, str):
            return False
        return any(pattern.match(title) for pattern in self.dependency_patterns)


def dependency_scope(title: Any) -> Optional[DependencyScope]:
    """
    Get the dependency scope captured by a Dependabot style title.

    Returns:
        DependencyScope.DEV for ``deps-dev``, DependencyScope.PROD for
        ``deps``, or None when the title is not a Dependabot bump
    """
    if not isinstance(title, str):
        return None

    match = DEPENDABOT_TITLE_PATTERN.match(title)
    if not match:
        return None

    return DependencyScope(match.group(2))


def is_lock_file_maintenance(title: Any) -> bool:
    return isinstance(title, str) and bool(LOCK_FILE_MAINTENANCE_PATTERN.search(title))
