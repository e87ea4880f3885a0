"""
GitHub API Client

Handles GitHub API authentication, rate limiting, and communication.
Implements the review host used to post and resolve inspection comments.
"""

import subprocess
import time
import logging
from typing import Dict, List, Optional
from datetime import datetime

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from ..models.review import AnnotationKind, ExistingAnnotation, LineComment, strike
from .host import ReviewHost, ReviewHostError


logger = logging.getLogger(__name__)

TOKEN_ENV_VAR = "MANIFEST_GITHUB_TOKEN"


class GitHubAPIError(ReviewHostError):
    """GitHub API related errors"""
    def __init__(self, message: str, status_code: Optional[int] = None, response_data: Optional[Dict] = None):
        super().__init__(message)
        self.status_code = status_code
        self.response_data = response_data


class RateLimitExceeded(GitHubAPIError):
    """GitHub API rate limit exceeded"""
    def __init__(self, reset_time: datetime):
        super().__init__(f"Rate limit exceeded. Resets at {reset_time}")
        self.reset_time = reset_time


class NoPullRequestError(GitHubAPIError):
    """No pull request exists for the current branch"""
    def __init__(self, branch: str):
        super().__init__(f"No pull request exists for branch '{branch}'")
        self.branch = branch


class GitHubClient(ReviewHost):
    """
    GitHub API client with authentication, rate limiting, and error handling.
    
    Provides methods for:
    - Pull request lookup and details
    - Fetching, posting and resolving PR comments
    - API rate limit management
    """

    per_page = 100

    def __init__(
        self,
        token: str,
        owner: str,
        repo: str,
        base_url: str = "https://api.github.com",
        timeout: int = 30,
    ):
        """
        Initialize GitHub client.
        
        Args:
            token: GitHub personal access token
            owner: Repository owner
            repo: Repository name
            base_url: GitHub API base URL (default: https://api.github.com)
            timeout: Per-request timeout in seconds
        """
        self.token = token
        self.owner = owner
        self.repo = repo
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.session = self._create_session()
        self.rate_limit_remaining = 5000
        self.rate_limit_reset = datetime.now()

    @property
    def headers(self) -> Dict[str, str]:
        return dict(self.session.headers)

    def _create_session(self) -> requests.Session:
        """Create requests session with retry strategy and authentication."""
        session = requests.Session()
        
        # Only idempotent requests are retried, so comments are never posted twice
        retry_strategy = Retry(
            total=3,
            backoff_factor=1,
            status_forcelist=[429, 500, 502, 503, 504],
            allowed_methods=["GET"],
        )
        adapter = HTTPAdapter(max_retries=retry_strategy)
        session.mount("http://", adapter)
        session.mount("https://", adapter)
        
        session.headers.update({
            'Authorization': f'Bearer {self.token}',
            'Accept': 'application/vnd.github.v3+json',
            'User-Agent': 'manifest'
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
            endpoint: API endpoint (without base URL)
            **kwargs: Additional arguments for requests
            
        Returns:
            Response object
            
        Raises:
            GitHubAPIError: For API errors
            RateLimitExceeded: When rate limit is exceeded
        """
        self._check_rate_limit()
        
        url = f"{self.base_url}/{endpoint.lstrip('/')}"
        kwargs.setdefault('timeout', self.timeout)
        
        try:
            response = self.session.request(method, url, **kwargs)
        except requests.RequestException as e:
            logger.error(f"Request failed: {e}")
            raise GitHubAPIError(f"Request failed: {str(e)}")

        self._update_rate_limit(response)

        if response.status_code == 429 or (response.status_code == 403 and self.rate_limit_remaining == 0):
            reset_time = datetime.fromtimestamp(int(response.headers.get('X-RateLimit-Reset', time.time() + 3600)))
            raise RateLimitExceeded(reset_time)

        if not response.ok:
            try:
                error_data = response.json() if response.content else {}
            except ValueError:
                error_data = {}
            raise GitHubAPIError(
                f"GitHub API error: {response.status_code} - {error_data.get('message', 'Unknown error')}",
                status_code=response.status_code,
                response_data=error_data
            )

        return response

    def _paginate(self, endpoint: str) -> List[Dict]:
        """Fetch every page of a list endpoint."""
        items = []
        page = 1
        
        while True:
            response = self._make_request(
                'GET',
                endpoint,
                params={'page': page, 'per_page': self.per_page}
            )
            
            page_items = response.json()
            if not page_items:
                break
                
            items.extend(page_items)
            
            if len(page_items) < self.per_page:
                break
                
            page += 1
        
        return items

    @property
    def _repo_path(self) -> str:
        return f"/repos/{self.owner}/{self.repo}"
    
    def get_pull_request(self, number: int) -> Dict:
        """
        Get pull request information.
        
        Args:
            number: Pull request number
            
        Returns:
            Pull request data
        """
        logger.info(f"Fetching PR {self.owner}/{self.repo}#{number}")
        
        response = self._make_request('GET', f'{self._repo_path}/pulls/{number}')
        return response.json()

    def pull_numbers_for_branch(self, branch: str) -> List[int]:
        """
        Get the numbers of open pull requests whose head is ``branch``.
        
        Args:
            branch: Branch name in this repository
            
        Returns:
            Pull request numbers, most recent first
        """
        response = self._make_request(
            'GET',
            f'{self._repo_path}/pulls',
            params={'head': f'{self.owner}:{branch}'}
        )
        return [pull['number'] for pull in response.json()]

    def pull_number_for_branch(self, branch: str) -> int:
        """Return the first pull request for ``branch``."""
        numbers = self.pull_numbers_for_branch(branch)
        if not numbers:
            raise NoPullRequestError(branch)
        return numbers[0]

    def fetch_thread_annotations(self, number: int) -> List[ExistingAnnotation]:
        comments = self._paginate(f'{self._repo_path}/issues/{number}/comments')
        logger.debug(f"Fetched {len(comments)} conversation comments for #{number}")
        return [
            ExistingAnnotation(body=c.get('body') or '', id=c['id'], kind=AnnotationKind.REVIEW)
            for c in comments
        ]

    def fetch_line_annotations(self, number: int) -> List[ExistingAnnotation]:
        comments = self._paginate(f'{self._repo_path}/pulls/{number}/comments')
        logger.debug(f"Fetched {len(comments)} line comments for #{number}")
        return [
            ExistingAnnotation(body=c.get('body') or '', id=c['id'], kind=AnnotationKind.FILE_LINE)
            for c in comments
        ]

    def post_thread_comment(self, number: int, body: str) -> None:
        logger.info(f"Commenting on {self.owner}/{self.repo}#{number}")
        self._make_request(
            'POST',
            f'{self._repo_path}/issues/{number}/comments',
            json={'body': body}
        )

    def post_line_comment(self, comment: LineComment) -> None:
        logger.info(f"Commenting on {comment.path}:{comment.line} in #{comment.number}")
        self._make_request(
            'POST',
            f'{self._repo_path}/pulls/{comment.number}/comments',
            json={
                'body': comment.body,
                'commit_id': comment.commit_sha,
                'path': comment.path,
                'line': comment.line,
                'side': comment.side,
            }
        )

    def resolve_thread_annotation(self, annotation: ExistingAnnotation) -> None:
        if annotation.is_resolved:
            return
        logger.info(f"Resolving conversation comment {annotation.id}")
        self._make_request(
            'PATCH',
            f'{self._repo_path}/issues/comments/{annotation.id}',
            json={'body': strike(annotation.body)}
        )

    def resolve_line_annotation(self, annotation: ExistingAnnotation) -> None:
        if annotation.is_resolved:
            return
        logger.info(f"Resolving line comment {annotation.id}")
        self._make_request(
            'PATCH',
            f'{self._repo_path}/pulls/comments/{annotation.id}',
            json={'body': strike(annotation.body)}
        )


def resolve_token(env: Dict[str, str], no_gh: bool = False) -> str:
    """
    Find a GitHub token.

    Args:
        env: Environment to read MANIFEST_GITHUB_TOKEN from
        no_gh: Do not fall back to ``gh auth token``

    Returns:
        The token

    Raises:
        GitHubAPIError: When no token can be found
    """
    token = env.get(TOKEN_ENV_VAR, "")
    if token:
        return token

    if no_gh:
        raise GitHubAPIError(f"No GitHub token found in {TOKEN_ENV_VAR}")

    try:
        output = subprocess.run(["gh", "auth", "token"], capture_output=True, text=True, check=True)
    except (OSError, subprocess.CalledProcessError) as e:
        raise GitHubAPIError(f"Could not use gh to get a token: {e}")

    return output.stdout.strip()
