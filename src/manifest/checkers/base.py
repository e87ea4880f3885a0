"""
Checker Protocol Helpers

Lets a Python function act as a checker: the Import is read from stdin and
the Result is written to stdout.
"""

import sys
import logging
from typing import Callable, Optional, TextIO

from ..exceptions import CheckerError
from ..models.inspection import Import
from ..models.result import Result


logger = logging.getLogger(__name__)

CheckFunc = Callable[[Import, Result], None]


def wrap(name: str, check: CheckFunc, stdin: Optional[TextIO] = None, stdout: Optional[TextIO] = None) -> Result:
    """
    Run ``check`` using the checker protocol.

    Args:
        name: Checker name, used in errors
        check: Function that inspects the Import and fills in the Result
        stdin: Stream holding the serialized Import
        stdout: Stream the serialized Result is written to

    Returns:
        The Result that was written

    Raises:
        CheckerError: When the Import on stdin cannot be read
    """
    stdin = stdin or sys.stdin
    stdout = stdout or sys.stdout

    raw = stdin.read()
    try:
        inspection_import = Import.from_json(raw)
    except (ValueError, KeyError, TypeError) as e:
        raise CheckerError(name, f"could not parse import: {e}") from e

    result = Result()
    check(inspection_import, result)

    stdout.write(result.to_json())
    stdout.write("\n")
    stdout.flush()
    return result
