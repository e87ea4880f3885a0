"""
Inspection

Builds the checker Import, runs checkers and aggregates their outcome.
"""

from .orchestrator import Inspection, build_import
from .parser import DiffParser, parse_diff
from .runner import CheckerRunner, parse_result

__all__ = ['Inspection', 'build_import', 'DiffParser', 'parse_diff', 'CheckerRunner', 'parse_result']
