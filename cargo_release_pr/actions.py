"""GitHub Actions output helpers.

Diagnostics go through workflow commands (``::debug::`` and friends) so the
runner can fold, annotate and filter them. Locally they are just printed.
"""

from __future__ import annotations

import os
import sys
import uuid


def _escape(value: str) -> str:
    """Escape message data for a workflow command."""
    return value.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


def _command(name: str, msg: str) -> None:
    print(f"::{name}::{_escape(msg)}", flush=True)


def debug(msg: str) -> None:
    """Only shown when the workflow runs with step debug logging enabled."""
    _command("debug", msg)


def info(msg: str) -> None:
    print(msg, flush=True)


def warning(msg: str) -> None:
    _command("warning", msg)


def error(msg: str) -> None:
    _command("error", msg)


def set_failed(msg: str) -> None:
    """Report a fatal error. The caller decides the exit status."""
    error(msg)
    print(f"ERROR: {msg}", file=sys.stderr)


def set_output(name: str, value: str) -> None:
    """Publish a step output.

    Appends to the file named by GITHUB_OUTPUT. Multi-line values use the
    heredoc form with a random delimiter. Outside of Actions the output is
    printed instead.
    """
    output_path = os.environ.get("GITHUB_OUTPUT")
    if not output_path:
        print(f"{name}={value}")
        return

    with open(output_path, "a") as fh:
        if "\n" in value:
            delimiter = f"ghadelimiter_{uuid.uuid4()}"
            fh.write(f"{name}<<{delimiter}\n{value}\n{delimiter}\n")
        else:
            fh.write(f"{name}={value}\n")
