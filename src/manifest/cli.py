"""Command-line interface for manifest."""

import os
import sys
from pathlib import Path
from typing import Optional, Tuple

import click

from manifest import __version__
from manifest.checkers import BUILTIN_CHECKERS, wrap
from manifest.config import FORMATTERS, AppConfig, find_config_file, setup_logging
from manifest.console import Console
from manifest.exceptions import (
    CheckerError,
    CheckerOutputError,
    ChecksReportedError,
    ConfigError,
    HookError,
    InspectionError,
    ManifestError,
)
from manifest.formatting import GitHubFormatter, PrettyFormatter
from manifest.github import GitHubClient, resolve_token
from manifest.github.git import most_recent_sha, current_branch, nwo_from_origin
from manifest.inspection import Inspection

console = Console()
err_console = Console(stderr=True)


@click.group()
@click.version_option(version=__version__, prog_name="manifest")
def main():
    """manifest - Runs checkers against pull requests and diffs."""
    pass


@main.command()
@click.option("--config", "-c", "config_path", default=None, help="Uses the provided config FILE.")
@click.option("--diff", "-d", "diff_path", default=None, help="Uses the provided diff FILE instead of stdin.")
@click.option("--json-only", is_flag=True, help="Outputs only the import JSON and does not run the checks.")
@click.option("--concurrency", type=int, default=None, help="Sets how many checks run concurrently.")
@click.option("--checker", "-i", "checkers", multiple=True, help="Runs the provided checker command (repeatable).")
@click.option("--formatter", type=click.Choice(FORMATTERS), default=None, help="Sets the formatter to use.")
@click.option("--pr", "pr_number", type=int, default=None, help="Sets the pull request to operate against.")
@click.option("--strict", is_flag=True, help="Fails if pull request information cannot be resolved.")
@click.option("--no-github", "no_gh", is_flag=True, help="Don't use the gh CLI to find a GitHub token.")
@click.option("--debug", is_flag=True, help="Shows checker output and debug logs.")
def inspect(
    config_path: Optional[str],
    diff_path: Optional[str],
    json_only: bool,
    concurrency: Optional[int],
    checkers: Tuple[str, ...],
    formatter: Optional[str],
    pr_number: Optional[int],
    strict: bool,
    no_gh: bool,
    debug: bool,
):
    """Runs the configured checks against the provided diff."""
    try:
        config = _load_config(config_path, concurrency, checkers, formatter, strict, no_gh, debug)
    except ConfigError as e:
        err_console.error(str(e))
        sys.exit(1)

    setup_logging(config.logging)

    diff_text = _read_diff(diff_path)
    if diff_text is None:
        err_console.error("No diff provided. Please provide a --diff or pass the diff via stdin.")
        sys.exit(1)

    state = _GitHubState(config, pr_number)

    if config.inspection.formatter == "github":
        try:
            output_formatter = GitHubFormatter(state.client(), cli_formatter=PrettyFormatter(console.console))
        except ManifestError as e:
            err_console.error(f"cannot use GitHub formatter: {e}")
            sys.exit(1)
    else:
        output_formatter = PrettyFormatter(console.console)

    inspection = Inspection.from_diff(config.inspection, diff_text, output_formatter)

    if config.inspection.formatter == "github" or config.inspection.fetch_pull_info or pr_number:
        try:
            inspection.populate_pull_details(
                state.client(),
                most_recent_sha(),
                state.pull_number(),
            )
        except ManifestError as e:
            # Checks can still run locally without pull request details
            if config.inspection.strict:
                err_console.error(f"could not resolve GitHub PR information: {e}")
                sys.exit(1)
            err_console.warning(f"could not resolve GitHub PR information: {e}")

    if json_only:
        click.echo(inspection.import_json().decode("utf-8"))
        return

    if not config.inspection.checkers:
        err_console.error("No checks were provided. Add one to manifest.config.yaml or pass one via --checker")
        sys.exit(1)

    try:
        inspection.perform()
    except HookError as e:
        err_console.error(str(e))
        sys.exit(1)
    except ChecksReportedError:
        err_console.error("Manifest check failed due to one or more checkers reporting an error.")
        sys.exit(1)
    except InspectionError as e:
        for error in e.errors:
            err_console.detail("Check error:", str(error))
            if config.debug and isinstance(error, CheckerOutputError):
                err_console.detail("Checker output:", error.output)
        err_console.error("Manifest check failed due to one or more checkers failing to run successfully.")
        sys.exit(1)

    err_console.success("manifest check passed!")


@main.group()
def checker():
    """Runs a built-in checker."""
    pass


@checker.command("pull-body")
def pull_body_command():
    """Ensures that the pull request body is not empty."""
    _run_builtin("pull-body")


def _run_builtin(name: str) -> None:
    try:
        wrap(name, BUILTIN_CHECKERS[name])
    except CheckerError as e:
        click.echo(str(e), err=True)
        sys.exit(1)


def _load_config(
    config_path: Optional[str],
    concurrency: Optional[int],
    checkers: Tuple[str, ...],
    formatter: Optional[str],
    strict: bool,
    no_gh: bool,
    debug: bool,
) -> AppConfig:
    """Defaults, then the config file, then the environment and flags."""
    config = AppConfig.from_env()

    if config_path:
        config.apply_yaml(Path(config_path))
    else:
        found = find_config_file(Path.cwd())
        if found is not None:
            config.apply_yaml(found)

    if checkers:
        config.inspection.checkers = {command: command for command in checkers}
    if concurrency is not None and concurrency > 0:
        config.inspection.concurrency = concurrency
    if formatter:
        config.inspection.formatter = formatter
    if strict:
        config.inspection.strict = True
    if no_gh:
        config.github.no_gh = True
    if debug:
        config.debug = True
        config.logging.level = "DEBUG"

    config.validate()
    return config


def _read_diff(diff_path: Optional[str]) -> Optional[str]:
    if diff_path:
        try:
            return Path(diff_path).read_text(encoding="utf-8")
        except OSError as e:
            err_console.error(f"Could not read diff: {e}")
            sys.exit(1)

    stdin = click.get_text_stream("stdin")
    if stdin.isatty():
        return None
    return stdin.read()


class _GitHubState:
    """Lazily resolved GitHub client and pull request number."""

    def __init__(self, config: AppConfig, pr_number: Optional[int]):
        self.config = config
        self._client: Optional[GitHubClient] = None
        self._pull_number = pr_number or 0

    def client(self) -> GitHubClient:
        if self._client is None:
            token = self.config.github.token or resolve_token(os.environ, no_gh=self.config.github.no_gh)
            owner, repo = nwo_from_origin()
            self._client = GitHubClient(
                token,
                owner,
                repo,
                base_url=self.config.github.api_base_url,
                timeout=self.config.github.timeout_seconds,
            )
        return self._client

    def pull_number(self) -> int:
        if not self._pull_number:
            self._pull_number = self.client().pull_number_for_branch(current_branch())
        return self._pull_number


if __name__ == "__main__":
    main()
