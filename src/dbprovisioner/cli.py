import logging

import click
from rich.logging import RichHandler

from .constants import DEFAULT_CONFIG_PATH
from .core import DatabaseProvisioner, ProvisionerError, console
from .models import SetupOptions
from .services.config_loader import ConfigLoader

logging.basicConfig(
    level="INFO",
    format="%(message)s",
    datefmt="[%X]",
    handlers=[RichHandler(rich_tracebacks=True, show_level=False, show_path=False)],
)


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.option(
    "--sample-data",
    "-s",
    is_flag=True,
    default=False,
    help="Create sample data for testing.",
)
@click.option(
    "--test-only",
    "-t",
    is_flag=True,
    default=False,
    help="Only test the database connection as the configured user.",
)
@click.option("--verbose", "-v", is_flag=True, default=False, help="Enable verbose logging.")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(dir_okay=False),
    default=DEFAULT_CONFIG_PATH,
    show_default=True,
    help="Path to a JSON configuration file with name/user/password/host/port.",
)
@click.option("--log-file", type=click.Path(dir_okay=False), help="Path to log file.")
def main(sample_data, test_only, verbose, config_path, log_file):
    """Install MariaDB and provision a multi-tenant database and service account.

    \b
    Supported package managers: APT, DNF, YUM, Pacman, Zypper, APK, Portage, XBPS.
    Environment variables DB_NAME, DB_USER, DB_PASSWORD, DB_HOST and DB_PORT
    override values from the config file.

    \b
    Password prompts:
      The first prompts ask for the MariaDB 'root'@'localhost' password,
      the final prompt asks for the service account password.
    """
    logger = logging.getLogger("dbprovisioner")

    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)
        logger.setLevel(logging.DEBUG)
    else:
        logger.setLevel(logging.INFO)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(logging.DEBUG if verbose else logging.INFO)
        file_handler.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(message)s"))
        logger.addHandler(file_handler)

    options = SetupOptions(
        sample_data=sample_data,
        test_only=test_only,
        verbose=verbose,
        config_path=config_path,
    )

    try:
        config = ConfigLoader(logger=logger, console=console).resolve(options.config_path)
    except ProvisionerError as exc:
        raise click.ClickException(str(exc)) from exc

    provisioner = DatabaseProvisioner(config=config, options=options)
    raise SystemExit(provisioner.run())


if __name__ == "__main__":
    main()
