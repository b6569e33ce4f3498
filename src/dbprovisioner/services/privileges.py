"""Root/sudo privilege checks."""

import os
import shutil
from typing import Callable, Optional

from dbprovisioner.errors import ProvisionerError


class PrivilegeChecker:
    """Confirms the run can install packages and manage services.

    Install, service and socket commands are issued through ``sudo`` even for
    root, so a root shell without the sudo binary is rejected here.
    """

    def __init__(
        self,
        logger,
        console,
        run_cmd: Callable,
        geteuid: Callable[[], int] = os.geteuid,
        which: Callable[[str], Optional[str]] = shutil.which,
    ):
        self.logger = logger
        self.console = console
        self.run_cmd = run_cmd
        self.geteuid = geteuid
        self.which = which

    def has_privileges(self) -> bool:
        if self.geteuid() == 0:
            if not self.which("sudo"):
                message = "Running as root but sudo is not installed. Install sudo and re-run."
                self.console.print(f"[bold red]{message}[/bold red]")
                self.logger.error(message)
                return False

            message = "Running as root user - this is not recommended for security reasons"
            self.console.print(f"[yellow]{message}[/yellow]")
            self.logger.warning(message)
            return True

        try:
            result = self.run_cmd(["sudo", "-n", "true"], check=False, quiet=True)
            if result.returncode == 0:
                self.console.print("[green]Sudo privileges confirmed[/green]")
                return True

            self.console.print(
                "[blue]Testing sudo access (you may be prompted for your password)...[/blue]"
            )
            result = self.run_cmd(["sudo", "true"], check=False)
        except ProvisionerError as exc:
            self.logger.error("Failed to check privileges: %s", exc)
            return False

        if result.returncode == 0:
            self.console.print("[green]Sudo privileges confirmed with password[/green]")
            return True
        return False
