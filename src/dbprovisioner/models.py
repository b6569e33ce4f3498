"""Shared domain models for dbprovisioner."""

from dataclasses import dataclass
from enum import Enum
from typing import Tuple

from .constants import DEFAULT_CONFIG_PATH


@dataclass(frozen=True)
class DatabaseConfig:
    """Target database, service account and network endpoint for one run."""

    name: str
    user: str
    password: str
    host: str
    port: int


@dataclass(frozen=True)
class SetupOptions:
    """Run-mode flags resolved from the command line."""

    sample_data: bool = False
    test_only: bool = False
    verbose: bool = False
    config_path: str = DEFAULT_CONFIG_PATH


class PostInstallQuirk(Enum):
    NONE = "none"
    INIT_DATADIR = "init-datadir"
    EMERGE_CONFIG = "emerge-config"
    OPENRC = "openrc"


@dataclass(frozen=True)
class PackageManagerProfile:
    """Commands and package names needed to install MariaDB with one manager."""

    name: str
    detect_command: Tuple[str, ...]
    update_command: Tuple[str, ...]
    install_command: Tuple[str, ...]
    packages: Tuple[str, ...]
    service_name: str = "mariadb"
    post_install: PostInstallQuirk = PostInstallQuirk.NONE


class AuthStrategy(Enum):
    SOCKET = "socket"
    NO_PASSWORD = "no-password"
    PASSWORD = "password"
    NONE = "none"


@dataclass(frozen=True)
class AuthOutcome:
    """Administrative authentication strategy discovered for this run."""

    strategy: AuthStrategy
    succeeded: bool
    requires_interactive_password: bool = False

    @classmethod
    def failed(cls) -> "AuthOutcome":
        return cls(strategy=AuthStrategy.NONE, succeeded=False)
