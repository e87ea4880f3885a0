"""
Inspection Orchestrator

Runs every configured checker against one Import with bounded concurrency,
hands each result to the formatter, and decides the outcome of the run.
"""

import asyncio
import logging
import threading
from typing import Optional

from ..config import InspectionConfig
from ..exceptions import (
    CheckerError,
    CheckerOutputError,
    CheckerReportedFailure,
    ChecksReportedError,
    HookError,
    InspectionError,
    ReconciliationError,
)
from ..formatting.base import Formatter
from ..models.change_set import ChangeSet
from ..models.inspection import Import, Pull
from ..models.result import Result
from .parser import parse_diff
from .runner import CheckerRunner


logger = logging.getLogger(__name__)


class Inspection:
    """
    One inspection run.

    Checkers never stop each other: every failure is recorded and reported
    together once all of them have finished.
    """

    def __init__(
        self,
        config: InspectionConfig,
        inspection_import: Import,
        formatter: Formatter,
        runner: Optional[CheckerRunner] = None,
    ):
        """
        Initialize an inspection.

        Args:
            config: Checkers to run and how many may run at once
            inspection_import: Context handed to every checker
            formatter: Receives every checker result
            runner: Runs a single checker
        """
        self.config = config
        self.inspection_import = inspection_import
        self.formatter = formatter
        self.runner = runner or CheckerRunner()

    @classmethod
    def from_diff(cls, config: InspectionConfig, diff_text: str, formatter: Formatter) -> "Inspection":
        """Build an inspection from raw unified diff text."""
        change_set = parse_diff(diff_text)
        return cls(config, build_import(change_set, strict=config.strict), formatter)

    def import_json(self) -> bytes:
        return self.inspection_import.to_json()

    def populate_pull_details(self, client, sha: str, number: int, fetch_details: bool = True) -> None:
        """
        Fill in pull request details from the review host.

        Args:
            client: GitHub client for the repository
            sha: Commit the checkers run against
            number: Pull request number
            fetch_details: Also fetch the title and description
        """
        title = description = ""
        if fetch_details:
            pull_data = client.get_pull_request(number)
            title = pull_data.get("title") or ""
            description = pull_data.get("body") or ""

        pull = Pull(number=number, title=title, description=description, owner=client.owner, repo=client.repo)
        self.inspection_import = self.inspection_import.with_pull(pull, current_sha=sha)

    def perform(self) -> None:
        """
        Run every checker and report the outcome.

        Raises:
            HookError: The formatter could not be set up; no checker ran
            InspectionError: One or more checkers or formatter calls failed
            ChecksReportedError: Everything ran, but a checker reported an error
        """
        asyncio.run(self.perform_async())

    async def perform_async(self) -> None:
        try:
            await asyncio.to_thread(self.formatter.before_all, self.inspection_import)
        except Exception as e:
            raise HookError(f"formatter setup failed: {e}") from e

        errors = InspectionError()
        had_findings = threading.Event()
        payload = self.import_json()
        checkers = self.config.checkers

        limit = self.config.concurrency
        if limit <= 0:
            limit = max(len(checkers), 1)
        semaphore = asyncio.Semaphore(limit)

        logger.info(f"Running {len(checkers)} checkers, {limit} at a time")

        try:
            outcomes = await asyncio.gather(
                *(
                    self._inspect(name, command, payload, semaphore, errors, had_findings)
                    for name, command in checkers.items()
                ),
                return_exceptions=True,
            )
            for name, outcome in zip(checkers, outcomes):
                if isinstance(outcome, Exception):
                    logger.error(f"Checker {name} crashed: {outcome}")
                    errors.add(outcome)
        finally:
            try:
                await asyncio.to_thread(self.formatter.after_all, self.inspection_import)
            except Exception as e:
                logger.error(f"Formatter cleanup failed: {e}")

        if errors.any():
            raise errors

        if had_findings.is_set():
            raise ChecksReportedError()

    async def _inspect(
        self,
        name: str,
        command: str,
        payload: bytes,
        semaphore: asyncio.Semaphore,
        errors: InspectionError,
        had_findings: threading.Event,
    ) -> None:
        result: Optional[Result] = None

        async with semaphore:
            try:
                result = await self.runner.run(name, command, payload)
            except CheckerReportedFailure as e:
                logger.error(f"Checker {name} reported a failure: {e.result.failure}")
                errors.add(e)
                result = e.result
            except CheckerError as e:
                logger.error(f"Checker {name} failed: {e}")
                if isinstance(e, CheckerOutputError):
                    logger.debug(f"Output of checker {name}:\n{e.output}")
                errors.add(e)

        if result is None:
            return

        if result.has_errors:
            had_findings.set()

        try:
            await asyncio.to_thread(self.formatter.format, name, self.inspection_import, result)
        except Exception as e:
            logger.error(f"Formatting results of {name} failed: {e}")
            if isinstance(e, ReconciliationError):
                errors.add(e)
            else:
                errors.add(ReconciliationError(f"{name}: formatting failed: {e}"))


def build_import(change_set: ChangeSet, strict: bool = False, pull: Optional[Pull] = None, current_sha: str = "") -> Import:
    """Assemble the Import handed to every checker."""
    return Import(change_set=change_set, pull=pull or Pull(), current_sha=current_sha, strict=strict)
