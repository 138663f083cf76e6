"""Shell and git utilities.

Thin wrappers around subprocess for the external programs the release
needs (git, cargo, cargo-release). Non-zero exits become ProcessError so
the pipeline stops at the first failure.
"""

from __future__ import annotations

import subprocess
from enum import Enum
from pathlib import Path

from .actions import debug
from .errors import ProcessError

# Exit status shells use for "command not found".
NOT_FOUND_EXIT_CODE = 127
# Exit status shells use for "found but cannot be executed".
NOT_EXECUTABLE_EXIT_CODE = 126


class Availability(Enum):
    """Result of probing for an external program."""

    AVAILABLE = "available"
    UNAVAILABLE = "unavailable"
    INDETERMINATE = "indeterminate"

    @property
    def ok(self) -> bool:
        return self is Availability.AVAILABLE


def _spawn(
    program: str, args: tuple[str, ...], cwd: str | Path | None, capture: bool
) -> subprocess.CompletedProcess[str]:
    debug(f"running {program} with arguments: {list(args)}")
    try:
        result = subprocess.run(
            [program, *args],
            cwd=cwd,
            capture_output=capture,
            text=True,
            check=False,
        )
    except FileNotFoundError as exc:
        raise ProcessError(program, NOT_FOUND_EXIT_CODE) from exc
    except OSError as exc:
        debug(f"could not start {program}: {exc}")
        raise ProcessError(program, NOT_EXECUTABLE_EXIT_CODE) from exc
    if result.returncode != 0:
        raise ProcessError(program, result.returncode)
    return result


def run(program: str, *args: str, cwd: str | Path | None = None) -> int:
    """Run a program, streaming its output to the terminal.

    Args:
        program: Executable to run (e.g., "cargo").
        *args: Arguments to pass to it.
        cwd: Working directory; inherits ours when None.

    Returns:
        The exit code, which is always 0 since anything else raises.

    Raises:
        ProcessError: If the program exits non-zero or cannot be started.
    """
    return _spawn(program, args, cwd, capture=False).returncode


def capture(program: str, *args: str, cwd: str | Path | None = None) -> str:
    """Run a program and return its stdout.

    Same failure rules as run(); stderr still reaches the terminal.
    """
    return _spawn(program, args, cwd, capture=True).stdout


def git(*args: str) -> str:
    """Run a git command and return stripped stdout."""
    return capture("git", *args).strip()


def probe(program: str) -> Availability:
    """Check whether a program can be run, by running ``<program> --help``.

    Never raises: a missing binary is UNAVAILABLE, and a binary that starts
    but fails (or cannot be executed) is INDETERMINATE.
    """
    debug(f'running "{program} --help"')
    try:
        result = subprocess.run(
            [program, "--help"], capture_output=True, text=True, check=False
        )
    except FileNotFoundError as exc:
        debug(f"program errored: {exc}")
        return Availability.UNAVAILABLE
    except OSError as exc:
        debug(f"program errored: {exc}")
        return Availability.INDETERMINATE

    debug(f"program exited with code {result.returncode}")
    if result.returncode == 0:
        return Availability.AVAILABLE
    return Availability.INDETERMINATE


def step(msg: str) -> None:
    """Print a visually distinct step header.

    Used to separate the phases of the release pipeline in the log.
    """
    print(f"\n{'─' * 60}\n{msg}\n{'─' * 60}", flush=True)
