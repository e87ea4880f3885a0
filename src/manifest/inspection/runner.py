"""
Checker Runner

Runs one checker as a child process speaking the checker protocol: the
serialized Import goes to stdin, a serialized Result comes back on stdout.
"""

import asyncio
import logging

from pydantic import ValidationError

from ..exceptions import CheckerExecutionError, CheckerOutputError, CheckerReportedFailure
from ..models.result import Result


logger = logging.getLogger(__name__)


class CheckerRunner:
    """Executes checker commands through the shell. Holds no per-run state."""

    async def run(self, name: str, command: str, payload: bytes) -> Result:
        """
        Run a checker to completion.

        Args:
            name: Checker name, used in errors
            command: Shell command that starts the checker
            payload: Serialized Import written to the checker's stdin

        Returns:
            Parsed Result

        Raises:
            CheckerExecutionError: The checker could not start or exited non-zero
            CheckerOutputError: The checker's output is not a valid Result
            CheckerReportedFailure: The checker set ``failure`` in its Result
        """
        logger.debug(f"Running checker {name}: {command}")

        try:
            process = await asyncio.create_subprocess_shell(
                command,
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise CheckerExecutionError(name, f"could not launch `{command}`: {e}")

        stdout, stderr = await process.communicate(payload)
        stderr_text = stderr.decode("utf-8", errors="replace").strip()

        if process.returncode != 0:
            message = f"exited with status {process.returncode}"
            if stderr_text:
                message += f": {stderr_text}"
            raise CheckerExecutionError(name, message, exit_code=process.returncode, stderr=stderr_text)

        if stderr_text:
            logger.debug(f"Checker {name} stderr: {stderr_text}")

        return parse_result(name, stdout)


def parse_result(name: str, output: bytes) -> Result:
    """
    Parse checker output into a Result.

    Args:
        name: Checker name, used in errors
        output: Raw stdout of the checker

    Returns:
        Parsed Result
    """
    try:
        result = Result.model_validate_json(output)
    except ValidationError as e:
        first = e.errors()[0]
        location = ".".join(str(part) for part in first.get("loc", ()))
        detail = f"{location}: {first['msg']}" if location else first["msg"]
        raise CheckerOutputError(
            name,
            f"could not parse output: {detail}",
            output=output.decode("utf-8", errors="replace"),
        )

    if result.failure:
        raise CheckerReportedFailure(name, result)

    return result
