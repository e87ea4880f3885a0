"""
Built-in Checkers

Checkers shipped with manifest, run as ``manifest checker <name>``.
"""

from .base import CheckFunc, wrap
from .pull_body import pull_body

BUILTIN_CHECKERS = {
    "pull-body": pull_body,
}

__all__ = ['BUILTIN_CHECKERS', 'CheckFunc', 'pull_body', 'wrap']
