"""
Property-based tests for notification title classification.

Property 1: Title Classification
Validates: dependency bot conventions, security alerts, unrelated titles
"""

from hypothesis import given, assume, strategies as st

from dependency_merger.models.notification import DependencyScope, NotificationKind
from dependency_merger.triage.classifier import TitleClassifier, dependency_scope
from dependency_merger.triage.commit_title import CommitTitleRewriter


classifier = TitleClassifier()

package_names = st.from_regex(r'@?[a-z][a-z0-9\-]{0,20}(/[a-z][a-z0-9\-]{0,20})?', fullmatch=True)
versions = st.tuples(
    st.integers(min_value=0, max_value=99),
    st.integers(min_value=0, max_value=99),
    st.integers(min_value=0, max_value=99),
).map(lambda parts: ".".join(str(part) for part in parts))
shas = st.from_regex(r'[0-9a-f]{7,40}', fullmatch=True)


class TestTitleClassificationProperties:
    """Property tests for TitleClassifier."""

    @given(
        prefix=st.sampled_from(["chore", "build"]),
        scope=st.sampled_from(["deps", "deps-dev"]),
        package=package_names,
        old=versions,
        new=versions,
    )
    def test_dependabot_titles_are_dependency_updates(self, prefix, scope, package, old, new):
        """
        Property: Every Dependabot bump title is a dependency update.

        Given: A title in the Dependabot convention
        When: The title is classified
        Then: It is a dependency update with the captured scope
        """
        title = f"{prefix}({scope}): bump {package} from {old} to {new}"

        assert classifier.classify(title) is NotificationKind.DEPENDENCY_UPDATE
        assert dependency_scope(title) is DependencyScope(scope)

    @given(
        prefix=st.sampled_from(["chore", "build", "fix"]),
        package=package_names,
        major=st.integers(min_value=0, max_value=999),
        minor_patch=st.one_of(
            st.just(""),
            st.tuples(st.integers(min_value=0, max_value=99), st.integers(min_value=0, max_value=99))
            .map(lambda parts: f".{parts[0]}.{parts[1]}"),
        ),
    )
    def test_renovate_titles_are_dependency_updates(self, prefix, package, major, minor_patch):
        title = f"{prefix}(deps): update dependency {package} to v{major}{minor_patch}"

        assert classifier.classify(title) is NotificationKind.DEPENDENCY_UPDATE

    @given(action=package_names, sha=shas)
    def test_action_digest_titles_are_dependency_updates(self, action, sha):
        title = f"ci(action): update {action} digest to {sha}"

        assert classifier.classify(title) is NotificationKind.DEPENDENCY_UPDATE

    @given(title=st.one_of(st.none(), st.integers(), st.text(), st.binary()))
    def test_classify_never_raises(self, title):
        """
        Property: Classification is total.

        Given: Any input, including non-strings
        When: It is classified
        Then: A NotificationKind is returned without raising
        """
        assert isinstance(classifier.classify(title), NotificationKind)

    @given(title=st.text())
    def test_titles_without_known_prefix_are_unrelated(self, title):
        """
        Property: Titles outside the known conventions are never acted upon.
        """
        assume(not title.startswith(("chore(", "build(", "fix(", "ci(", "Potential security vulnerability found")))

        assert classifier.classify(title) is NotificationKind.UNRELATED

    @given(suffix=st.text())
    def test_security_alert_prefix(self, suffix):
        title = "Potential security vulnerability found" + suffix

        assert classifier.classify(title) is NotificationKind.SECURITY_ALERT


class TestCommitTitleProperties:
    """Property tests for CommitTitleRewriter."""

    @given(
        package=package_names,
        old=versions,
        new=versions,
        manifest_changed=st.booleans(),
    )
    def test_dev_dependencies_never_rewritten(self, package, old, new, manifest_changed):
        title = f"chore(deps-dev): bump {package} from {old} to {new}"

        assert CommitTitleRewriter().rewrite(title, DependencyScope.DEV, manifest_changed, False) == title

    @given(title=st.text(), manifest_changed=st.booleans())
    def test_rewrite_only_touches_prefix(self, title, manifest_changed):
        """
        Property: Rewriting only ever swaps a build(deps)/fix(deps) prefix.
        """
        result = CommitTitleRewriter().rewrite(title, dependency_scope(title), manifest_changed, False)

        assert result == title or (
            title.startswith("build(deps)") and result == "fix(deps)" + title[len("build(deps)"):]
        )
