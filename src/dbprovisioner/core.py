import logging
import subprocess
import time
from enum import Enum
from typing import List, Optional

from rich.console import Console

from .constants import SERVICE_START_WAIT_SECONDS
from .errors import (
    AuthFailure,
    ConnectivityFailure,
    DetectionFailure,
    InstallFailure,
    PrivilegeFailure,
    ProvisionerError,
    ServiceStartFailure,
    SqlFailure,
)
from .errors_catalog import actionable_error
from .models import AuthOutcome, DatabaseConfig, PackageManagerProfile, SetupOptions
from .services.auth_probe import AuthProber
from .services.command_runner import CommandRunner
from .services.installer import ServiceInstaller
from .services.package_managers import PackageManagerDetector, supported_manager_names
from .services.privileges import PrivilegeChecker
from .services.schema import SchemaProvisioner
from .services.sql_executor import SqlExecutor
from .services.verifier import ConnectivityVerifier

console = Console()
logger = logging.getLogger("dbprovisioner")


class ProvisionState(Enum):
    START = "start"
    PRIVILEGE_CHECK = "privilege_check"
    DETECT = "detect"
    ENSURE_INSTALLED = "ensure_installed"
    ENSURE_RUNNING = "ensure_running"
    AUTH_PROBE = "auth_probe"
    PROVISION_SCHEMA = "provision_schema"
    PROVISION_USER = "provision_user"
    VERIFY = "verify"
    SEED_OPTIONAL = "seed_optional"
    SUMMARY = "summary"
    DONE = "done"
    FAILED = "failed"


class DatabaseProvisioner:
    """Sequences install, authentication, schema and account setup for one host.

    Every step blocks until its subprocess exits. A failing step ends the run
    with exit status 1; nothing is rolled back because all SQL is safe to rerun.
    """

    def __init__(
        self,
        config: DatabaseConfig,
        options: SetupOptions,
        command_runner: Optional[CommandRunner] = None,
    ):
        self.config = config
        self.options = options
        self.command_runner = command_runner or CommandRunner(logger=logger)

        self.state = ProvisionState.START
        self.history: List[ProvisionState] = [ProvisionState.START]
        self.failure_reason: Optional[str] = None
        self.profile: Optional[PackageManagerProfile] = None
        self.auth: Optional[AuthOutcome] = None

        self.privilege_checker = PrivilegeChecker(
            logger=logger, console=console, run_cmd=self._run_cmd
        )
        self.detector = PackageManagerDetector(
            logger=logger, console=console, run_cmd=self._run_cmd
        )
        self.installer = ServiceInstaller(logger=logger, console=console, run_cmd=self._run_cmd)
        self.auth_prober = AuthProber(logger=logger, console=console, run_cmd=self._run_cmd)
        self.sql_executor = SqlExecutor(logger=logger, console=console, run_cmd=self._run_cmd)
        self.schema_provisioner = SchemaProvisioner(
            logger=logger, console=console, executor=self.sql_executor
        )
        self.verifier = ConnectivityVerifier(logger=logger, console=console, run_cmd=self._run_cmd)

    def _run_cmd(
        self, cmd: List[str], check: bool = True, **kwargs
    ) -> subprocess.CompletedProcess:
        return self.command_runner.run(cmd, check=check, **kwargs)

    def _transition(self, state: ProvisionState):
        logger.debug("State %s -> %s", self.state.value, state.value)
        self.state = state
        self.history.append(state)

    def check_privileges(self):
        self._transition(ProvisionState.PRIVILEGE_CHECK)
        console.print("[blue]Checking system privileges...[/blue]")
        if not self.privilege_checker.has_privileges():
            raise PrivilegeFailure(actionable_error("no_privileges"))

    def detect_package_manager(self) -> PackageManagerProfile:
        self._transition(ProvisionState.DETECT)
        profile = self.detector.detect()
        if profile is None:
            raise DetectionFailure(
                actionable_error("no_package_manager", supported=supported_manager_names())
            )
        self.profile = profile
        return profile

    def ensure_installed(self, profile: PackageManagerProfile):
        self._transition(ProvisionState.ENSURE_INSTALLED)
        if self.installer.is_installed():
            console.print("[green]MariaDB client found[/green]")
            logger.info("MariaDB client found")
            return

        console.print("[yellow]MariaDB not found. Installing it now...[/yellow]")
        logger.warning("MariaDB not found. Installing it now...")
        if not self.installer.install(profile):
            raise InstallFailure(actionable_error("install_failed", manager=profile.name))

    def ensure_running(self, profile: PackageManagerProfile):
        self._transition(ProvisionState.ENSURE_RUNNING)
        service = profile.service_name
        if self.installer.is_running(service):
            logger.info("MariaDB service is running")
            return

        self.installer.start(profile)
        # Single fixed wait for service startup, then one re-check.
        time.sleep(SERVICE_START_WAIT_SECONDS)

        if not self.installer.is_running(service):
            raise ServiceStartFailure(actionable_error("service_not_running", service=service))
        console.print("[green]MariaDB service started[/green]")

    def probe_authentication(self) -> AuthOutcome:
        self._transition(ProvisionState.AUTH_PROBE)
        auth = self.auth_prober.probe()
        if not auth.succeeded:
            raise AuthFailure(actionable_error("auth_failed"))
        self.auth = auth
        return auth

    def provision_schema(self, auth: AuthOutcome):
        self._transition(ProvisionState.PROVISION_SCHEMA)
        if not self.schema_provisioner.create_database(self.config, auth):
            raise SqlFailure(
                actionable_error("database_creation_failed", database=self.config.name)
            )

    def provision_user(self, auth: AuthOutcome):
        self._transition(ProvisionState.PROVISION_USER)
        if not self.schema_provisioner.create_user(self.config, auth):
            raise SqlFailure(actionable_error("user_creation_failed", user=self.config.user))

    def verify_connection(self):
        self._transition(ProvisionState.VERIFY)
        if not self.verifier.verify(self.config):
            raise ConnectivityFailure(
                actionable_error(
                    "connection_test_failed", user=self.config.user, database=self.config.name
                )
            )

    def seed_sample_data(self, auth: AuthOutcome):
        self._transition(ProvisionState.SEED_OPTIONAL)
        if not self.schema_provisioner.seed(self.config, auth):
            message = "Sample data creation failed, but setup completed successfully"
            console.print(f"[yellow]{message}[/yellow]")
            logger.warning(message)

    def display_summary(self):
        self._transition(ProvisionState.SUMMARY)
        config = self.config
        console.rule("Setup Summary")
        console.print("[green]✓ MariaDB Server:[/green] Installed and running")
        console.print(f"[green]✓ Database:[/green] {config.name}")
        console.print(f"[green]✓ Database User:[/green] {config.user}")
        console.print(f"[green]✓ Host:[/green] {config.host}:{config.port}")

        console.print("\n[cyan]Database Connection Details:[/cyan]")
        console.print(f"  Host: {config.host}")
        console.print(f"  Port: {config.port}")
        console.print(f"  Database: {config.name}")
        console.print(f"  Username: {config.user}")
        console.print("  Password: \\[CONFIGURED]")

        console.print("\n[yellow]Next Steps:[/yellow]")
        console.print("  • Update your application config files with these credentials")
        console.print("  • Change the default password in production environments")
        console.print("  • Consider using environment variables for sensitive data")

    def _fail(self, reason: str):
        self.failure_reason = reason
        self._transition(ProvisionState.FAILED)

    def run(self) -> int:
        try:
            console.rule("Multi-Tenant MariaDB Setup")
            logger.info("Starting dbprovisioner...")

            if self.options.test_only:
                console.print("[blue]Running in test-only mode[/blue]")
                logger.info("Running in test-only mode")
                self.verify_connection()
                self._transition(ProvisionState.DONE)
                return 0

            self.check_privileges()
            profile = self.detect_package_manager()
            self.ensure_installed(profile)
            self.ensure_running(profile)
            auth = self.probe_authentication()
            self.provision_schema(auth)
            self.provision_user(auth)
            self.verify_connection()
            if self.options.sample_data:
                self.seed_sample_data(auth)
            self.display_summary()

            self._transition(ProvisionState.DONE)
            console.print("[bold green]MariaDB setup completed successfully![/bold green]")
            logger.info("MariaDB setup completed successfully")
            return 0

        except KeyboardInterrupt:
            console.print("[bold red]Operation cancelled by user.[/bold red]")
            logger.info("Operation cancelled by user")
            self._fail("Operation cancelled by user.")
            return 1
        except ProvisionerError as exc:
            console.print(f"[bold red]Error:[/bold red] {exc}")
            logger.error(str(exc))
            self._fail(str(exc))
            return 1
        except Exception as exc:
            console.print(f"[bold red]Unexpected error:[/bold red] {exc}")
            logger.exception("Unexpected error")
            self._fail(str(exc))
            return 1
