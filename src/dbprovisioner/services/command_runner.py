"""Subprocess execution service for dbprovisioner."""

import subprocess
from typing import Iterable, List

from dbprovisioner.errors import ProvisionerError


class CommandRunner:
    """Runs external commands with consistent error handling."""

    REDACTED = "********"

    def __init__(self, logger):
        self.logger = logger

    def _display(self, cmd: List[str], redact: Iterable[str]) -> str:
        cmd_str = " ".join(cmd)
        for secret in redact:
            if secret:
                cmd_str = cmd_str.replace(secret, self.REDACTED)
        return cmd_str

    def run(
        self,
        cmd: List[str],
        check: bool = True,
        capture_output: bool = False,
        quiet: bool = False,
        redact: Iterable[str] = (),
    ) -> subprocess.CompletedProcess:
        """Run ``cmd`` and block until it exits.

        ``capture_output`` pipes stdout/stderr back to the caller, ``quiet``
        discards both, and with neither the child inherits the terminal so
        that package managers and password prompts stay interactive.
        """
        cmd_str = self._display(cmd, redact)
        self.logger.debug("Executing: %s", cmd_str)

        stream_kwargs = {}
        if quiet and not capture_output:
            stream_kwargs = {"stdout": subprocess.DEVNULL, "stderr": subprocess.DEVNULL}

        try:
            result = subprocess.run(
                cmd,
                text=True,
                capture_output=capture_output,
                **stream_kwargs,
            )
        except FileNotFoundError as exc:
            raise ProvisionerError(
                f"Required command not found: {cmd[0]}. Please install it and try again."
            ) from exc
        except Exception as exc:
            raise ProvisionerError(f"Failed to execute command: {cmd_str}. {exc}") from exc

        if capture_output and result.stdout:
            self.logger.debug("Command output: %s", result.stdout.strip())

        if result.returncode == 0:
            return result

        stderr = (result.stderr or "").strip() if capture_output else ""
        message = f"Command failed ({result.returncode}): {cmd_str}"
        if stderr:
            message = f"{message}\n{stderr}"

        if check:
            raise ProvisionerError(message)

        self.logger.debug(message)
        return result
