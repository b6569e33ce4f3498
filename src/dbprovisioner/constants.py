"""Static values shared across dbprovisioner services."""

DEFAULT_DB_NAME = "universal_db"
DEFAULT_DB_USER = "webadmin"
DEFAULT_DB_PASSWORD = "Password123!"
DEFAULT_DB_HOST = "localhost"
DEFAULT_DB_PORT = 3306

DEFAULT_CONFIG_PATH = "./config/database.json"

ADMIN_USER = "root"
CLIENT_BINARY = "mysql"
SERVICE_ALTERNATE_NAMES = ("mysql", "mysqld")
SERVICE_START_WAIT_SECONDS = 3.0

PROBE_QUERY = "SELECT 1;"
VERIFY_QUERY = "SELECT 1 AS test_connection;"
