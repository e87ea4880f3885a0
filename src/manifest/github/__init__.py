"""
GitHub Integration Layer

Review host implementation backed by the GitHub REST API, plus the git
helpers used to find the pull request for the current checkout.
"""

from .client import GitHubAPIError, GitHubClient, NoPullRequestError, RateLimitExceeded, resolve_token
from .host import ReviewHost, ReviewHostError

__all__ = [
    'GitHubAPIError',
    'GitHubClient',
    'NoPullRequestError',
    'RateLimitExceeded',
    'ReviewHost',
    'ReviewHostError',
    'resolve_token',
]
