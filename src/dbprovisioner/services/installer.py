"""MariaDB package installation and service lifecycle."""

import shutil
from typing import Callable, List, Optional

from dbprovisioner.constants import CLIENT_BINARY, SERVICE_ALTERNATE_NAMES
from dbprovisioner.errors import ProvisionerError
from dbprovisioner.models import PackageManagerProfile, PostInstallQuirk


class ServiceInstaller:
    """Installs MariaDB with a detected package manager and starts its service."""

    def __init__(
        self,
        logger,
        console,
        run_cmd: Callable,
        which: Callable[[str], Optional[str]] = shutil.which,
    ):
        self.logger = logger
        self.console = console
        self.run_cmd = run_cmd
        self.which = which

    def _succeeds(self, cmd: List[str], quiet: bool = True) -> bool:
        try:
            result = self.run_cmd(cmd, check=False, quiet=quiet)
        except ProvisionerError as exc:
            self.logger.debug("%s", exc)
            return False
        return result.returncode == 0

    def _best_effort(self, cmd: List[str], description: str):
        try:
            result = self.run_cmd(cmd, check=False)
        except ProvisionerError as exc:
            self.logger.warning("%s failed: %s", description, exc)
            return
        if result.returncode != 0:
            self.logger.warning("%s exited with status %s.", description, result.returncode)

    def is_installed(self) -> bool:
        return self._succeeds([CLIENT_BINARY, "--version"])

    def is_running(self, service_name: str) -> bool:
        names = [service_name] + [alt for alt in SERVICE_ALTERNATE_NAMES if alt != service_name]
        for name in names:
            if self._succeeds(["systemctl", "is-active", name]):
                return True

        return self._succeeds(["service", service_name, "status"])

    def install(self, profile: PackageManagerProfile) -> bool:
        self.console.rule(f"Installing MariaDB Server using {profile.name}")
        self.logger.info("Installing MariaDB with %s", profile.name)

        self.console.print("[blue]Updating package list...[/blue]")
        try:
            update = self.run_cmd(list(profile.update_command), check=False)
        except ProvisionerError as exc:
            self.logger.warning("Package list update failed: %s", exc)
        else:
            # dnf/yum check-update exits 100 when updates are available.
            if update.returncode != 0:
                self.logger.warning(
                    "Package list update exited with status %s; continuing.", update.returncode
                )

        self.console.print(
            f"[blue]Installing MariaDB packages: {', '.join(profile.packages)}[/blue]"
        )
        try:
            result = self.run_cmd(
                list(profile.install_command) + list(profile.packages), check=False
            )
        except ProvisionerError as exc:
            self.console.print(f"[bold red]Installation failed:[/bold red] {exc}")
            self.logger.error("Installation failed: %s", exc)
            return False

        if result.returncode != 0:
            self.console.print("[bold red]Failed to install MariaDB packages[/bold red]")
            self.logger.error(
                "Package installation exited with status %s.", result.returncode
            )
            return False

        self._post_install(profile)
        self.start(profile, enable=True)

        self.console.print("[green]MariaDB installation completed[/green]")
        self.logger.info("MariaDB installation completed")
        return True

    def _post_install(self, profile: PackageManagerProfile):
        if profile.post_install is PostInstallQuirk.INIT_DATADIR:
            self.console.print(
                f"[blue]Initializing MariaDB data directory ({profile.name})...[/blue]"
            )
            self._best_effort(
                [
                    "sudo",
                    "mariadb-install-db",
                    "--user=mysql",
                    "--basedir=/usr",
                    "--datadir=/var/lib/mysql",
                ],
                "Data directory initialization",
            )
        elif profile.post_install is PostInstallQuirk.EMERGE_CONFIG:
            self.console.print(f"[blue]Configuring MariaDB ({profile.name})...[/blue]")
            self._best_effort(
                ["sudo", "emerge", "--config", "dev-db/mariadb"],
                "Package configuration",
            )

    def start(self, profile: PackageManagerProfile, enable: bool = False):
        """Issues start (and optionally enable) through the profile's init system.

        Best-effort: the caller re-checks ``is_running`` afterwards.
        """
        service = profile.service_name
        self.console.print("[blue]Starting MariaDB service...[/blue]")

        if profile.post_install is PostInstallQuirk.OPENRC:
            self.logger.info("Using OpenRC for %s", profile.name)
            if enable:
                self._best_effort(
                    ["sudo", "rc-update", "add", service, "default"], "OpenRC enable"
                )
            self._best_effort(["sudo", "rc-service", service, "start"], "OpenRC start")
            return

        if self.which("systemctl"):
            self._best_effort(["sudo", "systemctl", "start", service], "systemctl start")
            if enable:
                self._best_effort(["sudo", "systemctl", "enable", service], "systemctl enable")
            return

        self.logger.info("Systemctl not available, trying service command...")
        self._best_effort(["sudo", "service", service, "start"], "service start")
