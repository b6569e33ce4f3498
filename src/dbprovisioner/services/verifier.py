"""End-to-end connectivity check as the service account."""

from typing import Callable

from dbprovisioner.constants import CLIENT_BINARY, VERIFY_QUERY
from dbprovisioner.errors import ProvisionerError
from dbprovisioner.models import DatabaseConfig
from dbprovisioner.services.notices import announce_service_password


class ConnectivityVerifier:
    """Logs in as the created user, not root, so missing grants are caught."""

    def __init__(self, logger, console, run_cmd: Callable):
        self.logger = logger
        self.console = console
        self.run_cmd = run_cmd

    def build_command(self, config: DatabaseConfig):
        return [
            CLIENT_BINARY,
            "-h",
            config.host,
            "-P",
            str(config.port),
            "-u",
            config.user,
            "-p",
            "-D",
            config.name,
            "--execute",
            VERIFY_QUERY,
        ]

    def verify(self, config: DatabaseConfig) -> bool:
        self.console.rule("Testing Database Connection")
        announce_service_password(self.console, config.user)

        try:
            result = self.run_cmd(self.build_command(config), check=False, capture_output=True)
        except ProvisionerError as exc:
            self.console.print(f"[bold red]Connection test error:[/bold red] {exc}")
            self.logger.error("Connection test error: %s", exc)
            return False

        if result.returncode != 0:
            error_text = (result.stderr or "").strip()
            self.console.print(f"[bold red]Connection test failed:[/bold red] {error_text}")
            self.logger.error("Connection test failed: %s", error_text)
            return False

        self.console.print("[green]Database connection test passed[/green]")
        self.logger.info("Database connection test passed as %s", config.user)
        return True
