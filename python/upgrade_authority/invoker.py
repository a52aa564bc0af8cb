"""Runs `solana program set-upgrade-authority` and interprets what it prints.

The command is passed to `subprocess.run` as an argument vector, never through a shell.
Success is read from the `--output json` payload when one can be found in stdout; with
`-v` the CLI interleaves diagnostics, so parsing falls back to one JSON object per line
and then to plain substring checks.
"""

import json
import shlex
import subprocess
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Sequence

from rich.console import Console

from .errors import ConfigurationError, SubprocessExecutionError

PROGRESS_MARKER = "Finalizing transaction"


class Outcome(Enum):
    SUCCESS = "success"
    INCONCLUSIVE = "inconclusive"


@dataclass(frozen=True)
class CommandResult:
    returncode: int
    stdout: str
    stderr: str


Runner = Callable[[Sequence[str], Optional[float]], CommandResult]


def build_command(config):
    return [
        config.solana_bin,
        "program",
        "set-upgrade-authority",
        config.program_id,
        "--upgrade-authority", config.keypair_path,
        "--new-upgrade-authority", config.new_authority,
        "--skip-new-upgrade-authority-signer-check",
        "--url", config.cluster_url,
        "--output", "json",
        "-v",
    ]


def format_command(argv):
    return shlex.join(argv)


def verification_command(config):
    return format_command([config.solana_bin, "program", "show", config.program_id, "--url", config.cluster_url])


def _text(stream):
    if stream is None:
        return ""
    if isinstance(stream, bytes):
        return stream.decode("utf-8", errors="replace")
    return stream


def subprocess_runner(argv: Sequence[str], timeout: Optional[float] = None) -> CommandResult:
    try:
        proc = subprocess.run(
            list(argv),
            capture_output=True,
            encoding="utf-8",
            errors="replace",
            timeout=timeout,
            check=False,
        )
    except FileNotFoundError as e:
        raise SubprocessExecutionError(f"{argv[0]} was not found on PATH: {e}") from e
    except subprocess.TimeoutExpired as e:
        raise SubprocessExecutionError(
            f"{argv[0]} did not finish within {timeout} seconds",
            stdout=_text(e.stdout),
            stderr=_text(e.stderr),
        ) from e
    except (OSError, ValueError) as e:
        # ValueError: an argument holding a NUL byte
        raise SubprocessExecutionError(f"Could not start {argv[0]}: {e}") from e
    return CommandResult(returncode=proc.returncode, stdout=proc.stdout or "", stderr=proc.stderr or "")


def parse_json_output(stdout) -> Optional[dict]:
    text = stdout.strip()
    if not text:
        return None
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        data = None
    if isinstance(data, dict):
        return data
    # last JSON object wins; earlier lines are verbose diagnostics
    found = None
    for line in text.splitlines():
        line = line.strip()
        if not line.startswith("{"):
            continue
        try:
            obj = json.loads(line)
        except json.JSONDecodeError:
            continue
        if isinstance(obj, dict):
            found = obj
    return found


def interpret_output(stdout, config):
    """Returns (outcome, reported_authority). reported_authority is None without JSON."""
    payload = parse_json_output(stdout)
    if payload is not None and isinstance(payload.get("authority"), str):
        reported = payload["authority"]
        if reported == config.new_authority:
            return Outcome.SUCCESS, reported
        return Outcome.INCONCLUSIVE, reported
    if PROGRESS_MARKER in stdout or config.new_authority in stdout:
        return Outcome.SUCCESS, None
    return Outcome.INCONCLUSIVE, None


def _echo(console, text, style=None):
    console.print(text, style=style, markup=False, highlight=False, soft_wrap=True)


def change_upgrade_authority(config, runner: Runner = subprocess_runner, console=None, log_level=2):
    console = console or Console()
    if log_level >= 1:
        console.print("[bold]--- Solana Program Authority Setter ---[/bold]")
        console.print("This will set the upgrade authority using the Solana CLI.")
    config.validate()

    argv = build_command(config)
    if log_level >= 1:
        console.print("\nExecuting Solana CLI command:")
        _echo(console, format_command(argv))
        console.print("\nThis may take a few moments...")

    result = runner(argv, config.timeout)
    if result.returncode != 0:
        raise SubprocessExecutionError(
            f"{argv[0]} exited with status {result.returncode}",
            returncode=result.returncode,
            stdout=result.stdout,
            stderr=result.stderr,
        )

    if log_level >= 2:
        console.print("\nCLI Command Output:")
        _echo(console, result.stdout)

    outcome, reported = interpret_output(result.stdout, config)
    if outcome is Outcome.SUCCESS:
        console.print("\n[green]SUCCESS:[/green] The Solana CLI command appears to have executed successfully.")
        _echo(
            console,
            f"The new upgrade authority for program {config.program_id} should now be {config.new_authority}.",
        )
        console.print("\nTo verify, run manually:")
        _echo(console, verification_command(config))
    else:
        if reported is not None:
            _echo(
                console,
                f"\nWARNING: CLI reported authority {reported}, expected {config.new_authority}.",
                style="yellow",
            )
        console.print("\n[yellow]INFO:[/yellow] CLI command executed. Review the output above to confirm the authority change.")
        console.print(
            "If you expected JSON output with the new authority, ensure your Solana CLI version"
            " supports --output json and the command was successful."
        )
    return outcome


def report_failure(console, error):
    console.print("\n[red]ERROR:[/red] Solana CLI command execution failed.")
    _echo(console, str(error))
    if error.stderr:
        console.print("CLI Error Output (stderr):")
        _echo(console, error.stderr)
    if error.stdout:
        console.print("CLI Standard Output (stdout, on error):")
        _echo(console, error.stdout)
    console.print("\nPlease check the command, paths, network, and your Solana CLI setup.")


def run(config, runner: Runner = subprocess_runner, console=None, log_level=2) -> int:
    console = console or Console()
    try:
        change_upgrade_authority(config, runner=runner, console=console, log_level=log_level)
    except ConfigurationError as e:
        console.print("\n[red]ERROR:[/red] Default placeholder values are still present.")
        _echo(console, str(e))
        console.print("Please replace the placeholder values in your configuration.")
        return 1
    except SubprocessExecutionError as e:
        report_failure(console, e)
        return 1
    return 0
