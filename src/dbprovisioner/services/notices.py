"""Console notices shown before interactive password prompts."""

from dbprovisioner.constants import ADMIN_USER, DEFAULT_DB_PASSWORD


def announce_admin_password(console):
    console.print(
        f"\n[bold yellow]\\[PASSWORD REQUIRED][/bold yellow] "
        f"[bold]MariaDB {ADMIN_USER} user ({ADMIN_USER}@localhost)[/bold]"
    )
    console.print(f"[cyan]You will be prompted for the MariaDB {ADMIN_USER} password.[/cyan]")
    console.print(
        f"[yellow]Note: This is the MariaDB {ADMIN_USER}@localhost database password\n"
        "      (not your system user password)[/yellow]\n"
    )


def announce_service_password(console, user: str):
    console.print(
        f"\n[bold yellow]\\[PASSWORD REQUIRED][/bold yellow] [bold]Database user ({user})[/bold]"
    )
    console.print(f"[cyan]You will be prompted for the {user} password.[/cyan]")
    console.print(
        f"[yellow]Note: This is the {user} database user password\n"
        f"      Default: {DEFAULT_DB_PASSWORD} (if just installed)[/yellow]\n"
    )
