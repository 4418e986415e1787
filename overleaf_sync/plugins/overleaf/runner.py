"""Synchronous runner for the external Overleaf scripts."""

import logging
import os
import shutil
import subprocess
from dataclasses import dataclass
from typing import List, Optional, Sequence

logger = logging.getLogger(__name__)


@dataclass
class ExecutionResult:
    """Outcome of running an external program.

    Attributes:
        success: True only if the program ran and exited with status 0.
        stdout: Captured standard output.
        stderr: Captured standard error.
        returncode: Exit status, or None if the program never ran to completion.
        error: Spawn failure (or timeout) description; None if the program ran.
    """
    success: bool
    stdout: str = ""
    stderr: str = ""
    returncode: Optional[int] = None
    error: Optional[str] = None

    @classmethod
    def spawn_failure(cls, message: str) -> "ExecutionResult":
        return cls(success=False, error=message)


class ProcessRunner:
    """Runs external programs and buffers their output.

    Configuration:
        extra_paths: Additional PATH entries used to resolve the program.
        timeout: Seconds before the program is abandoned (default: no timeout).
    """

    def __init__(
        self,
        extra_paths: Optional[List[str]] = None,
        timeout: Optional[float] = None
    ):
        self._extra_paths: List[str] = list(extra_paths or [])
        self._timeout = timeout

    def _build_env(self) -> dict:
        env = os.environ.copy()
        if self._extra_paths:
            path_sep = os.pathsep
            env['PATH'] = env.get('PATH', '') + path_sep + path_sep.join(self._extra_paths)
        return env

    def run(self, program: str, args: Sequence[str], working_dir: str) -> ExecutionResult:
        """Run a program to completion.

        Args:
            program: Executable name (resolved via PATH) or path.
            args: Arguments passed after the program.
            working_dir: Directory the program runs in.

        Returns:
            ExecutionResult; never raises for process problems.
        """
        env = self._build_env()

        resolved = shutil.which(program, path=env.get('PATH'))
        if not resolved:
            return ExecutionResult.spawn_failure(f"executable '{program}' not found in PATH")

        argv = [resolved, *args]
        logger.debug("Running %s in %s", argv, working_dir)

        try:
            proc = subprocess.run(
                argv,
                cwd=str(working_dir),
                capture_output=True,
                encoding='utf-8',
                errors='replace',
                check=False,
                env=env,
                timeout=self._timeout,
            )
        except subprocess.TimeoutExpired:
            return ExecutionResult.spawn_failure(
                f"'{program}' timed out after {self._timeout} seconds"
            )
        except OSError as exc:
            return ExecutionResult.spawn_failure(str(exc))

        logger.debug("%s exited with status %s", program, proc.returncode)
        return ExecutionResult(
            success=proc.returncode == 0,
            stdout=proc.stdout,
            stderr=proc.stderr,
            returncode=proc.returncode,
        )
