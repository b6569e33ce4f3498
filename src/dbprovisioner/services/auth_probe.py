"""Administrative authentication discovery."""

from typing import Callable, List

from dbprovisioner.constants import ADMIN_USER, CLIENT_BINARY, PROBE_QUERY
from dbprovisioner.errors import ProvisionerError
from dbprovisioner.models import AuthOutcome, AuthStrategy
from dbprovisioner.services.notices import announce_admin_password


class AuthProber:
    """Finds the first administrative login method that works on this host.

    Strategies are tried least-interactive first: sudo over the unix socket
    (fresh installs with peer authentication), the admin account without a
    password, and finally an interactive password prompt.
    """

    def __init__(self, logger, console, run_cmd: Callable):
        self.logger = logger
        self.console = console
        self.run_cmd = run_cmd

    def _attempt(self, strategy: AuthStrategy, cmd: List[str], interactive: bool = False) -> bool:
        try:
            result = self.run_cmd(cmd, check=False, capture_output=not interactive)
        except ProvisionerError as exc:
            self.console.print(f"[yellow]{strategy.value} authentication failed: {exc}[/yellow]")
            self.logger.warning("%s authentication failed: %s", strategy.value, exc)
            return False

        if result.returncode != 0:
            self.logger.debug(
                "%s authentication rejected: %s",
                strategy.value,
                (result.stderr or "").strip(),
            )
            return False
        return True

    def probe(self) -> AuthOutcome:
        self.console.rule("Testing MariaDB Root Access")

        self.console.print("[blue]Testing Unix socket authentication...[/blue]")
        socket_cmd = ["sudo", CLIENT_BINARY, "-u", ADMIN_USER, "--execute", PROBE_QUERY]
        if self._attempt(AuthStrategy.SOCKET, socket_cmd):
            self.console.print("[green]Unix socket authentication successful[/green]")
            self.logger.info("Using socket authentication")
            return AuthOutcome(strategy=AuthStrategy.SOCKET, succeeded=True)

        self.console.print("[blue]Testing no-password authentication...[/blue]")
        no_password_cmd = [CLIENT_BINARY, "-u", ADMIN_USER, "--execute", PROBE_QUERY]
        if self._attempt(AuthStrategy.NO_PASSWORD, no_password_cmd):
            self.console.print("[green]No-password authentication successful[/green]")
            self.logger.info("Using no-password authentication")
            return AuthOutcome(strategy=AuthStrategy.NO_PASSWORD, succeeded=True)

        announce_admin_password(self.console)
        password_cmd = [CLIENT_BINARY, "-u", ADMIN_USER, "-p", "--execute", PROBE_QUERY]
        if self._attempt(AuthStrategy.PASSWORD, password_cmd, interactive=True):
            self.console.print("[green]Root password authentication successful[/green]")
            self.logger.info("Using password authentication")
            return AuthOutcome(
                strategy=AuthStrategy.PASSWORD,
                succeeded=True,
                requires_interactive_password=True,
            )

        self.logger.error("No administrative authentication method succeeded")
        return AuthOutcome.failed()
