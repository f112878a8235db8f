"""svn subprocess wrapper: argument vectors, timeouts, captured output."""

from __future__ import annotations

import shlex
import subprocess
from dataclasses import dataclass
from typing import Sequence, Tuple

from loguru import logger


class SvnError(Exception):
    """Raised when svn cannot be run at all (as opposed to exiting non-zero)."""


class SvnNotInstalledError(SvnError):
    """The configured svn executable could not be found."""


class SvnTimeoutError(SvnError):
    """An svn invocation ran past its timeout."""


@dataclass(frozen=True)
class CommandResult:
    """Exit status and captured streams of one svn invocation.

    *stdout* holds the bytes svn wrote, untouched. *stderr* is decoded,
    since it is only ever shown to people.
    """

    exit_code: int
    stdout: bytes
    stderr: str = ""
    args: Tuple[str, ...] = ()

    @property
    def ok(self) -> bool:
        return self.exit_code == 0

    @property
    def text(self) -> str:
        """stdout as UTF-8 text. Undecodable bytes are replaced; line endings are kept."""
        return self.stdout.decode("utf-8", errors="replace")


def target(location: str, path: str = "", revision: str = "HEAD") -> str:
    """Build a peg-revision target: ``<location><path>@<revision>``."""
    return f"{location}{path}@{revision}"


class CommandRunner:
    """Run svn subcommands as argument vectors, never through a shell.

    Non-zero exits are returned as data. Only a missing executable or a
    timeout raise, as :class:`SvnError` subclasses.
    """

    def __init__(self, binary: str = "svn", timeout: float = 30.0) -> None:
        self.binary = binary
        self.timeout = timeout

    def render(self, args: Sequence[str]) -> str:
        """Return the shell-quoted command line equivalent to *args*."""
        return shlex.join([self.binary, *args])

    def execute(self, args: Sequence[str]) -> CommandResult:
        command = [self.binary, *args]
        logger.debug(f"running: {self.render(args)}")
        try:
            proc = subprocess.run(
                command,
                capture_output=True,
                timeout=self.timeout,
            )
        except FileNotFoundError:
            raise SvnNotInstalledError(f"{self.binary} is not installed or not on PATH")
        except subprocess.TimeoutExpired:
            raise SvnTimeoutError(
                f"svn command timed out after {self.timeout}s: {self.render(args)}"
            )

        stderr = proc.stderr.decode("utf-8", errors="replace")
        if proc.returncode != 0:
            logger.debug(f"exit {proc.returncode}: {stderr.strip()}")
        return CommandResult(
            exit_code=proc.returncode,
            stdout=proc.stdout,
            stderr=stderr,
            args=tuple(args),
        )
