"""
GitHub API Client

Handles GitHub API authentication, rate limiting, and communication.
Provides methods for notifications, pull request inspection, reviews
and merging over the REST and GraphQL APIs.
"""

import time
import logging
from typing import Any, Dict, List, Optional, Sequence
from datetime import datetime
import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry


logger = logging.getLogger(__name__)


PULL_REQUEST_QUERY = """
query($htmlUrl: URI!, $filesLimit: Int!) {
  resource(url: $htmlUrl) {
    ... on PullRequest {
      state
      author {
        login
      }
      files(first: $filesLimit) {
        nodes {
          path
        }
      }
      commits(last: 1) {
        nodes {
          commit {
            oid
            checkSuites(first: 100) {
              nodes {
                checkRuns(first: 100) {
                  nodes {
                    name
                    conclusion
                    permalink
                  }
                }
              }
            }
            status {
              state
              contexts {
                state
                targetUrl
                description
                context
              }
            }
          }
        }
      }
    }
  }
}
"""


class GitHubAPIError(Exception):
    """GitHub API related errors"""
    def __init__(self, message: str, status_code: Optional[int] = None, response_data: Optional[Dict] = None):
        super().__init__(message)
        self.status_code = status_code
        self.response_data = response_data


class AuthenticationError(GitHubAPIError):
    """Token rejected by GitHub"""


class InsufficientScopesError(GitHubAPIError):
    """Token is missing required OAuth scopes"""
    def __init__(self, missing_scopes: Sequence[str]):
        super().__init__(
            "Provided GITHUB_TOKEN does not include "
            + ", ".join(f'"{scope}"' for scope in missing_scopes)
            + " scope"
        )
        self.missing_scopes = list(missing_scopes)


class RateLimitExceeded(GitHubAPIError):
    """GitHub API rate limit exceeded"""
    def __init__(self, reset_time: datetime):
        super().__init__(f"Rate limit exceeded. Resets at {reset_time}")
        self.reset_time = reset_time


class MergeConflictError(GitHubAPIError):
    """Pull request head changed or is not mergeable right now"""


class GitHubClient:
    """
    GitHub API client with authentication, rate limiting, and error handling.

    Provides methods for:
    - Token scope verification
    - Notification listing and marking threads as read
    - Pull request inspection over GraphQL
    - Review listing, approving and merging
    """

    def __init__(
        self,
        token: str,
        base_url: str = "https://api.github.com",
        timeout_seconds: int = 30,
        per_page: int = 100,
    ):
        """
        Initialize GitHub client.

        Args:
            token: GitHub personal access token
            base_url: GitHub API base URL (default: https://api.github.com)
            timeout_seconds: Timeout for every HTTP request
            per_page: Page size used for paginated REST endpoints
        """
        if not token:
            raise ValueError("GitHub token is required")

        self.token = token
        self.base_url = base_url.rstrip('/')
        self.timeout_seconds = timeout_seconds
        self.per_page = per_page
        self.session = self._create_session()
        self.rate_limit_remaining = 5000
        self.rate_limit_reset = datetime.now()

    @property
    def graphql_url(self) -> str:
        # GitHub Enterprise serves REST under /api/v3 and GraphQL under /api/graphql
        if self.base_url.endswith('/api/v3'):
            return self.base_url[:-len('/v3')] + '/graphql'
        return f"{self.base_url}/graphql"

    def _create_session(self) -> requests.Session:
        """Create requests session with retry strategy and authentication."""
        session = requests.Session()

        # Configure retry strategy
        retry_strategy = Retry(
            total=3,
            backoff_factor=1,
            status_forcelist=[429, 500, 502, 503, 504],
            allowed_methods=["HEAD", "GET"],
            raise_on_status=False,
        )
        adapter = HTTPAdapter(max_retries=retry_strategy)
        session.mount("http://", adapter)
        session.mount("https://", adapter)

        # Set authentication headers
        session.headers.update({
            'Authorization': f'token {self.token}',
            'Accept': 'application/vnd.github.v3+json',
            'User-Agent': 'Dependency-Merger/1.0'
        })

        return session

    def _check_rate_limit(self) -> None:
        """Check and handle GitHub API rate limits."""
        if self.rate_limit_remaining <= 10 and datetime.now() < self.rate_limit_reset:
            wait_time = (self.rate_limit_reset - datetime.now()).total_seconds()
            if wait_time > 0:
                logger.warning(f"Rate limit low ({self.rate_limit_remaining}), resets in {wait_time:.1f}s")
                raise RateLimitExceeded(self.rate_limit_reset)

    def _update_rate_limit(self, response: requests.Response) -> None:
        """Update rate limit information from response headers."""
        if 'X-RateLimit-Remaining' in response.headers:
            self.rate_limit_remaining = int(response.headers['X-RateLimit-Remaining'])

        if 'X-RateLimit-Reset' in response.headers:
            reset_timestamp = int(response.headers['X-RateLimit-Reset'])
            self.rate_limit_reset = datetime.fromtimestamp(reset_timestamp)

    def _make_request(self, method: str, endpoint: str, **kwargs) -> requests.Response:
        """
        Make authenticated request to GitHub API with rate limiting.

        Args:
            method: HTTP method (GET, POST, etc.)
            endpoint: API endpoint (without base URL) or absolute URL
            **kwargs: Additional arguments for requests

        Returns:
            Response object

        Raises:
            GitHubAPIError: For API errors
            AuthenticationError: When the token is rejected
            RateLimitExceeded: When rate limit is exceeded
        """
        self._check_rate_limit()

        if endpoint.startswith('http'):
            url = endpoint
        else:
            url = f"{self.base_url}/{endpoint.lstrip('/')}"
        kwargs.setdefault('timeout', self.timeout_seconds)

        try:
            response = self.session.request(method, url, **kwargs)
        except requests.RequestException as e:
            logger.error(f"Request failed: {e}")
            raise GitHubAPIError(f"Request failed: {str(e)}")

        self._update_rate_limit(response)

        if response.status_code == 429 or (
            response.status_code == 403 and response.headers.get('X-RateLimit-Remaining') == '0'
        ):
            reset_time = datetime.fromtimestamp(int(response.headers.get('X-RateLimit-Reset', time.time() + 3600)))
            raise RateLimitExceeded(reset_time)

        if not response.ok:
            error_data = self._error_data(response)
            message = f"GitHub API error: {response.status_code} - {error_data.get('message', 'Unknown error')}"
            if response.status_code == 401:
                raise AuthenticationError(message, status_code=401, response_data=error_data)
            raise GitHubAPIError(message, status_code=response.status_code, response_data=error_data)

        return response

    @staticmethod
    def _error_data(response: requests.Response) -> Dict:
        if not response.content:
            return {}
        try:
            data = response.json()
        except ValueError:
            return {'message': response.text[:200]}
        return data if isinstance(data, dict) else {}

    def _paginate(self, endpoint: str, params: Optional[Dict] = None) -> List[Dict]:
        """
        Collect every page of a list endpoint.

        Follows the ``Link: rel="next"`` header, since some endpoints
        (notifications) cap the page size below the requested ``per_page``.

        Args:
            endpoint: API endpoint returning a JSON array
            params: Extra query parameters

        Returns:
            Items from all pages
        """
        items = []
        page_params = dict(params or {})
        page_params['per_page'] = self.per_page
        url = endpoint

        while url:
            response = self._make_request('GET', url, params=page_params)

            page_items = response.json()
            if not page_items:
                break

            items.extend(page_items)

            # the next link already carries the query string
            url = response.links.get('next', {}).get('url')
            page_params = None

        return items

    def get_token_scopes(self) -> List[str]:
        """
        Get OAuth scopes granted to the token.

        Returns:
            Scope names from the X-OAuth-Scopes header (empty for tokens
            without classic scopes)
        """
        response = self._make_request('GET', '/')
        header = response.headers.get('X-OAuth-Scopes', '')
        return [scope.strip() for scope in header.split(',') if scope.strip()]

    def verify_scopes(self, required_scopes: Sequence[str]) -> None:
        """
        Ensure the token carries all required scopes.

        Raises:
            InsufficientScopesError: If any required scope is missing
        """
        scopes = self.get_token_scopes()
        missing = [scope for scope in required_scopes if scope not in scopes]
        if missing:
            raise InsufficientScopesError(missing)
        logger.info(f"Token scopes verified: {', '.join(scopes)}")

    def list_notifications(self) -> List[Dict]:
        """
        Get all unread notifications of the authenticated user.

        Returns:
            List of notification thread data
        """
        logger.info("Loading all notifications")

        notifications = self._paginate('/notifications')

        logger.info(f"{len(notifications)} notifications found")
        return notifications

    def mark_notification_read(self, thread_id: str) -> None:
        """Mark a notification thread as read."""
        self._make_request('PATCH', f'/notifications/threads/{thread_id}')

    def graphql(self, query: str, variables: Optional[Dict[str, Any]] = None) -> Dict:
        """
        Run a GraphQL query.

        Args:
            query: GraphQL document
            variables: Query variables

        Returns:
            The ``data`` member of the response

        Raises:
            GitHubAPIError: For HTTP errors and GraphQL errors
        """
        response = self._make_request(
            'POST',
            self.graphql_url,
            json={'query': query, 'variables': variables or {}},
        )
        payload = response.json()

        if payload.get('errors'):
            messages = "; ".join(error.get('message', 'Unknown error') for error in payload['errors'])
            raise GitHubAPIError(f"GraphQL error: {messages}", response_data=payload)

        return payload.get('data') or {}

    def get_pull_request_resource(self, html_url: str, changed_files_limit: int = 100) -> Dict:
        """
        Get pull request state, author, files and last commit checks.

        Args:
            html_url: Browser URL of the pull request
            changed_files_limit: Number of changed files to fetch

        Returns:
            GraphQL PullRequest resource data
        """
        logger.info(f"Checking {html_url}")

        data = self.graphql(
            PULL_REQUEST_QUERY,
            {'htmlUrl': html_url, 'filesLimit': changed_files_limit},
        )
        resource = data.get('resource')
        if not resource:
            raise GitHubAPIError(f"Pull request not found: {html_url}", status_code=404)

        return resource

    def list_reviews(self, owner: str, repo: str, pr_number: int) -> List[Dict]:
        """
        Get all reviews of a pull request.

        Args:
            owner: Repository owner
            repo: Repository name
            pr_number: Pull request number

        Returns:
            List of review data, oldest first
        """
        logger.debug(f"Fetching reviews for {owner}/{repo}#{pr_number}")
        return self._paginate(f'/repos/{owner}/{repo}/pulls/{pr_number}/reviews')

    def approve_pull_request(self, owner: str, repo: str, pr_number: int, commit_id: str) -> Dict:
        """
        Submit an approving review for a specific commit.

        Args:
            owner: Repository owner
            repo: Repository name
            pr_number: Pull request number
            commit_id: Commit the approval applies to

        Returns:
            Created review data
        """
        logger.info(f"Adding review to {owner}/{repo}#{pr_number}")

        response = self._make_request(
            'POST',
            f'/repos/{owner}/{repo}/pulls/{pr_number}/reviews',
            json={'event': 'APPROVE', 'commit_id': commit_id},
        )
        return response.json()

    def merge_pull_request(
        self,
        owner: str,
        repo: str,
        pr_number: int,
        merge_method: str = "squash",
        commit_title: Optional[str] = None,
    ) -> Dict:
        """
        Merge a pull request.

        Args:
            owner: Repository owner
            repo: Repository name
            pr_number: Pull request number
            merge_method: 'merge', 'squash' or 'rebase'
            commit_title: Title for the merge commit

        Returns:
            Merge result data

        Raises:
            MergeConflictError: If the pull request changed since it was
                inspected (HTTP 405/409)
        """
        logger.info(f"Merging {owner}/{repo}#{pr_number} ({merge_method})")

        body = {'merge_method': merge_method}
        if commit_title:
            body['commit_title'] = commit_title

        try:
            response = self._make_request(
                'PUT',
                f'/repos/{owner}/{repo}/pulls/{pr_number}/merge',
                json=body,
            )
        except GitHubAPIError as e:
            if e.status_code in (405, 409):
                raise MergeConflictError(str(e), status_code=e.status_code, response_data=e.response_data) from e
            raise

        return response.json()
