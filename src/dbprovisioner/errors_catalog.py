"""Actionable error catalog for dbprovisioner."""

from typing import Dict

_ERROR_MESSAGES: Dict[str, Dict[str, str]] = {
    "no_privileges": {
        "what": (
            "Root privileges or sudo access are required to install packages "
            "and manage system services."
        ),
        "next": "Re-run with `sudo dbprovisioner` or add your user to the sudo group.",
    },
    "no_package_manager": {
        "what": "No supported package manager found. Supported package managers: {supported}.",
        "next": "Install MariaDB manually, then re-run to provision the schema.",
    },
    "install_failed": {
        "what": "MariaDB installation with {manager} failed.",
        "next": "Review the package manager output above and fix repository or network issues.",
    },
    "service_not_running": {
        "what": "Failed to start the MariaDB service `{service}`.",
        "next": "Check `sudo systemctl status {service}` or `journalctl -u {service}`.",
    },
    "auth_failed": {
        "what": "Cannot establish an administrative connection to MariaDB.",
        "next": (
            "Make sure the service is running and root authentication is configured. "
            "Try running `sudo mysql_secure_installation`."
        ),
    },
    "database_creation_failed": {
        "what": "Database and table creation for `{database}` failed.",
        "next": "Fix the SQL error above and re-run; every statement is safe to repeat.",
    },
    "user_creation_failed": {
        "what": "Creation of database user `{user}` failed.",
        "next": "Fix the SQL error above and re-run; every statement is safe to repeat.",
    },
    "connection_test_failed": {
        "what": "Connection test as `{user}` on `{database}` failed.",
        "next": "Verify the password and grants for `{user}`@`localhost`.",
    },
}


def actionable_error(code: str, **kwargs: str) -> str:
    if code not in _ERROR_MESSAGES:
        raise KeyError(f"Unknown error catalog key: {code}")

    template = _ERROR_MESSAGES[code]
    what = template["what"].format(**kwargs)
    next_step = template["next"].format(**kwargs)
    return f"{what} Suggested action: {next_step}"
