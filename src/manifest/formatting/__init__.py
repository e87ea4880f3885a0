"""
Formatters

Output for checker results: terminal output and pull request comments.
"""

from .base import Formatter, FormatterWithHooks
from .github import GitHubFormatter
from .pretty import PrettyFormatter

__all__ = ['Formatter', 'FormatterWithHooks', 'GitHubFormatter', 'PrettyFormatter']
