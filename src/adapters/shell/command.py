"""
Shell command adapter — run external programs.

Every installer step (apt-get, pip, aqt, git) goes through here.
Commands run without a shell, argv as given, one at a time.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
import time

from src.adapters.base import Adapter, ExecutionContext
from src.core.models.action import Receipt

logger = logging.getLogger(__name__)


class ShellCommandAdapter(Adapter):
    """Execute commands and report the outcome as a Receipt.

    Uncaptured commands inherit stdout/stderr so long-running
    downloads show progress in the CI log. With ``stdout_to_stderr``
    their stdout goes to stderr as well, keeping stdout for a report.
    """

    def __init__(self, stdout_to_stderr: bool = False):
        self.stdout_to_stderr = stdout_to_stderr

    @property
    def name(self) -> str:
        return "shell"

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        args = context.action.args
        if not args:
            return False, "Missing command arguments"

        if shutil.which(args[0]) is None:
            return False, f"Executable not found: {args[0]}"

        return True, ""

    def execute(self, context: ExecutionContext) -> Receipt:
        action = context.action
        command = action.command_line

        if context.dry_run:
            logger.info("[dry-run] %s", command)
            return Receipt.skip(
                adapter=self.name,
                action_id=action.id,
                reason="dry-run",
                metadata={"command": command},
            )

        valid, message = self.validate(context)
        if not valid:
            return Receipt.failure(
                adapter=self.name,
                action_id=action.id,
                error=message,
                metadata={"command": command},
            )

        logger.info("[command]%s", command)
        start = time.monotonic()

        try:
            result = subprocess.run(
                action.args,
                text=True,
                timeout=action.timeout,
                **self._streams(action.capture),
            )
        except subprocess.TimeoutExpired:
            return Receipt.failure(
                adapter=self.name,
                action_id=action.id,
                error=f"Command timed out after {action.timeout}s",
                metadata={"command": command, "timeout": action.timeout},
            )
        except OSError as e:
            return Receipt.failure(
                adapter=self.name,
                action_id=action.id,
                error=f"Command execution error: {e}",
                metadata={"command": command},
            )

        elapsed_ms = int((time.monotonic() - start) * 1000)
        output = (result.stdout or "").strip()
        stderr = (result.stderr or "").strip()

        if result.returncode == 0:
            return Receipt.success(
                adapter=self.name,
                action_id=action.id,
                output=output,
                duration_ms=elapsed_ms,
                return_code=result.returncode,
                metadata={"command": command, "stderr": stderr},
            )
        return Receipt.failure(
            adapter=self.name,
            action_id=action.id,
            error=stderr or f"Command exited with code {result.returncode}",
            duration_ms=elapsed_ms,
            return_code=result.returncode,
            metadata={"command": command, "stdout": output},
        )

    def _streams(self, capture: bool) -> dict[str, int]:
        if capture:
            return {"stdout": subprocess.PIPE, "stderr": subprocess.PIPE}
        if self.stdout_to_stderr:
            # fd 2 rather than sys.stderr, which may be a wrapper without a fileno
            return {"stdout": 2}
        return {}
