"""
Formatter Interfaces

A formatter receives every checker result as soon as it is available. A
formatter with hooks is also told when the run starts and ends.
"""

from abc import ABC, abstractmethod

from ..models.inspection import Import
from ..models.result import Result


class Formatter(ABC):
    """Outputs checker results, e.g. to a terminal or a pull request."""

    @abstractmethod
    def format(self, source: str, inspection_import: Import, result: Result) -> None:
        """
        Output the result of one checker.

        Args:
            source: Name of the checker that produced ``result``
            inspection_import: Import the checker ran against
            result: Parsed checker result
        """

    def before_all(self, inspection_import: Import) -> None:
        """Called once before any checker starts."""

    def after_all(self, inspection_import: Import) -> None:
        """Called once after every checker has finished."""


class FormatterWithHooks(Formatter):
    """Formatter that needs the run lifecycle."""

    @abstractmethod
    def before_all(self, inspection_import: Import) -> None:
        ...

    @abstractmethod
    def after_all(self, inspection_import: Import) -> None:
        ...
