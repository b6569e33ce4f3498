"""Package manager catalogue and host detection."""

from typing import Callable, Optional, Sequence

from dbprovisioner.errors import ProvisionerError
from dbprovisioner.models import PackageManagerProfile, PostInstallQuirk

# Priority order: the first manager whose probe succeeds wins.
PACKAGE_MANAGERS: Sequence[PackageManagerProfile] = (
    PackageManagerProfile(
        name="APT",
        detect_command=("apt", "--version"),
        update_command=("sudo", "apt", "update"),
        install_command=("sudo", "apt", "install", "-y"),
        packages=("mariadb-server", "mariadb-client"),
    ),
    PackageManagerProfile(
        name="DNF",
        detect_command=("dnf", "--version"),
        update_command=("sudo", "dnf", "check-update"),
        install_command=("sudo", "dnf", "install", "-y"),
        packages=("mariadb-server", "mariadb"),
    ),
    PackageManagerProfile(
        name="YUM",
        detect_command=("yum", "--version"),
        update_command=("sudo", "yum", "check-update"),
        install_command=("sudo", "yum", "install", "-y"),
        packages=("mariadb-server", "mariadb"),
    ),
    PackageManagerProfile(
        name="Pacman",
        detect_command=("pacman", "--version"),
        update_command=("sudo", "pacman", "-Sy"),
        install_command=("sudo", "pacman", "-S", "--noconfirm"),
        packages=("mariadb",),
        post_install=PostInstallQuirk.INIT_DATADIR,
    ),
    PackageManagerProfile(
        name="Zypper",
        detect_command=("zypper", "--version"),
        update_command=("sudo", "zypper", "refresh"),
        install_command=("sudo", "zypper", "install", "-y"),
        packages=("mariadb", "mariadb-client"),
    ),
    PackageManagerProfile(
        name="APK",
        detect_command=("apk", "--version"),
        update_command=("sudo", "apk", "update"),
        install_command=("sudo", "apk", "add"),
        packages=("mariadb", "mariadb-client"),
        post_install=PostInstallQuirk.OPENRC,
    ),
    PackageManagerProfile(
        name="Portage",
        detect_command=("emerge", "--version"),
        update_command=("sudo", "emerge", "--sync"),
        install_command=("sudo", "emerge"),
        packages=("dev-db/mariadb",),
        post_install=PostInstallQuirk.EMERGE_CONFIG,
    ),
    PackageManagerProfile(
        name="XBPS",
        detect_command=("xbps-install", "--version"),
        update_command=("sudo", "xbps-install", "-S"),
        install_command=("sudo", "xbps-install", "-y"),
        packages=("mariadb",),
    ),
)


def supported_manager_names(profiles: Sequence[PackageManagerProfile] = PACKAGE_MANAGERS) -> str:
    return ", ".join(profile.name for profile in profiles)


class PackageManagerDetector:
    """Finds the first catalogued package manager that works on this host."""

    def __init__(
        self,
        logger,
        console,
        run_cmd: Callable,
        profiles: Sequence[PackageManagerProfile] = PACKAGE_MANAGERS,
    ):
        self.logger = logger
        self.console = console
        self.run_cmd = run_cmd
        self.profiles = profiles

    def _is_available(self, profile: PackageManagerProfile) -> bool:
        try:
            result = self.run_cmd(list(profile.detect_command), check=False, quiet=True)
        except ProvisionerError:
            return False
        return result.returncode == 0

    def detect(self) -> Optional[PackageManagerProfile]:
        self.console.print("[blue]Detecting package manager...[/blue]")
        self.logger.info("Detecting package manager...")

        for profile in self.profiles:
            if self._is_available(profile):
                self.console.print(f"[green]Detected package manager: {profile.name}[/green]")
                self.logger.info("Detected package manager: %s", profile.name)
                return profile
            self.logger.debug("Package manager %s not available.", profile.name)

        return None
