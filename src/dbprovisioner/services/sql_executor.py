"""Runs SQL batches through the MariaDB command-line client."""

from typing import Callable, Iterable, List

from dbprovisioner.constants import ADMIN_USER, CLIENT_BINARY
from dbprovisioner.errors import ProvisionerError
from dbprovisioner.models import AuthOutcome, AuthStrategy, DatabaseConfig
from dbprovisioner.services.notices import announce_admin_password


class SqlExecutor:
    """Executes SQL as the administrative account using the probed strategy."""

    def __init__(self, logger, console, run_cmd: Callable):
        self.logger = logger
        self.console = console
        self.run_cmd = run_cmd

    def build_command(
        self,
        sql: str,
        config: DatabaseConfig,
        use_named_database: bool,
        auth: AuthOutcome,
    ) -> List[str]:
        if auth.strategy is AuthStrategy.SOCKET:
            cmd = ["sudo", CLIENT_BINARY, "-u", ADMIN_USER]
        else:
            cmd = [CLIENT_BINARY, "-h", config.host, "-P", str(config.port), "-u", ADMIN_USER]
            if auth.strategy is AuthStrategy.PASSWORD:
                cmd.append("-p")

        if use_named_database:
            cmd.extend(["-D", config.name])

        cmd.extend(["--execute", sql])
        return cmd

    def execute(
        self,
        sql: str,
        config: DatabaseConfig,
        use_named_database: bool,
        auth: AuthOutcome,
        redact: Iterable[str] = (),
    ) -> bool:
        if not auth.succeeded:
            self.logger.error("Refusing to execute SQL without a working authentication method.")
            return False

        cmd = self.build_command(sql, config, use_named_database, auth)
        if auth.requires_interactive_password:
            announce_admin_password(self.console)

        try:
            result = self.run_cmd(cmd, check=False, capture_output=True, redact=redact)
        except ProvisionerError as exc:
            self.console.print(f"[bold red]SQL execution error:[/bold red] {exc}")
            self.logger.error("SQL execution error: %s", exc)
            return False

        if result.returncode != 0:
            error_text = (result.stderr or "").strip()
            self.console.print(f"[bold red]SQL execution failed:[/bold red] {error_text}")
            self.logger.error("SQL execution failed: %s", error_text)
            return False

        return True
